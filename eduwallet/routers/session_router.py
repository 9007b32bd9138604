"""
세션 API 라우터

현재 프로세스의 활성 사용자(identity)를 지정/해제합니다.
사용자가 바뀌면 지갑 스토어가 해당 사용자의 지갑으로 전환됩니다.

- GET /session: 현재 사용자 조회
- PUT /session: 사용자 로그인 (지갑 전환)
- DELETE /session: 로그아웃 (지갑 비활성화)
"""

from fastapi import APIRouter, Depends
from dependency_injector.wiring import inject, Provide

from eduwallet.containers import Container
from eduwallet.providers.identity import SessionIdentityProvider
from eduwallet.schemas.session import SessionRequest, SessionResponse
from eduwallet.services.wallet_store import WalletStore
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/session", tags=["session"])


@router.get("", response_model=SessionResponse)
@inject
async def get_session(
    wallet_store: WalletStore = Depends(Provide[Container.services.wallet_store]),
) -> SessionResponse:
    return SessionResponse(user_id=wallet_store.user_id, state=wallet_store.state)


@router.put("", response_model=SessionResponse)
@inject
async def sign_in(
    request: SessionRequest,
    identity_provider: SessionIdentityProvider = Depends(
        Provide[Container.services.identity_provider]
    ),
    wallet_store: WalletStore = Depends(Provide[Container.services.wallet_store]),
) -> SessionResponse:
    """
    사용자 로그인 - 지갑 스토어가 구독 중이므로 전환은 동기적으로 완료된다
    """
    identity_provider.sign_in(request.user_id)
    return SessionResponse(user_id=wallet_store.user_id, state=wallet_store.state)


@router.delete("", response_model=SessionResponse)
@inject
async def sign_out(
    identity_provider: SessionIdentityProvider = Depends(
        Provide[Container.services.identity_provider]
    ),
    wallet_store: WalletStore = Depends(Provide[Container.services.wallet_store]),
) -> SessionResponse:
    identity_provider.sign_out()
    return SessionResponse(user_id=wallet_store.user_id, state=wallet_store.state)
