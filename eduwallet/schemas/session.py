from pydantic import BaseModel, Field
from typing import Optional

from eduwallet.schemas.wallet import WalletState


class SessionRequest(BaseModel):
    """로그인 요청 - 현재 세션의 사용자 지정"""

    user_id: str = Field(..., min_length=1, max_length=128, description="사용자 ID")


class SessionResponse(BaseModel):
    """현재 세션 정보"""

    user_id: Optional[str] = Field(None, description="현재 사용자 ID")
    state: WalletState = Field(..., description="지갑 스토어 상태")
