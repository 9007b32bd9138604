"""
EduCoins 지갑 API 라우터

- GET /wallet: 현재 지갑 (earned, spent, balance, 거래 내역)
- GET /wallet/transactions: 거래 내역 페이지 조회 (최신순)
- POST /wallet/transactions: 거래 기록 (earn | spend)
- POST /wallet/spent: 코인 사용
- POST /wallet/refresh: 저장소와 재동기화
- GET /wallet/integrity: spent 정합성 검증

활성 사용자가 없으면 변경/검증 요청은 401 을 반환한다.
"""

from fastapi import APIRouter, Depends, Query
from dependency_injector.wiring import inject, Provide

from eduwallet.containers import Container
from eduwallet.core.exceptions import AuthenticationError
from eduwallet.services.wallet_store import WalletStore
from eduwallet.schemas.wallet import (
    SpendRequest,
    TransactionCreateRequest,
    TransactionResult,
    WalletIntegrityReport,
    WalletLedgerResponse,
    WalletSnapshot,
)
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/wallet", tags=["wallet"])


def _require_identity(wallet_store: WalletStore) -> str:
    if wallet_store.user_id is None:
        raise AuthenticationError("No active identity")
    return wallet_store.user_id


@router.get("", response_model=WalletSnapshot)
@inject
async def get_wallet(
    wallet_store: WalletStore = Depends(Provide[Container.services.wallet_store]),
) -> WalletSnapshot:
    """
    내 지갑 조회 - 사용자가 없으면 earned=0 인 빈 지갑을 반환
    """
    return wallet_store.get_snapshot()


@router.get("/transactions", response_model=WalletLedgerResponse)
@inject
async def get_transactions(
    limit: int = Query(50, ge=1, le=100, description="페이지 크기"),
    offset: int = Query(0, ge=0, description="오프셋"),
    wallet_store: WalletStore = Depends(Provide[Container.services.wallet_store]),
) -> WalletLedgerResponse:
    return wallet_store.list_transactions(limit=limit, offset=offset)


@router.post("/transactions", response_model=TransactionResult)
@inject
async def add_transaction(
    request: TransactionCreateRequest,
    wallet_store: WalletStore = Depends(Provide[Container.services.wallet_store]),
) -> TransactionResult:
    """
    거래 기록 - spend 인 경우만 spent 가 증가한다

    HTTP Status:
        200: 기록 성공 (저장 실패 시 persisted=false, error_code=STORAGE_WRITE_FAILED)
        401: 활성 사용자 없음
        422: 유효하지 않은 금액
    """
    user_id = _require_identity(wallet_store)
    result = wallet_store.record_transaction(
        request.amount, request.type, request.description
    )
    if not result.persisted:
        logger.warning(f"Transaction for user {user_id} kept in memory only")
    return result


@router.post("/spent", response_model=TransactionResult)
@inject
async def spend(
    request: SpendRequest,
    wallet_store: WalletStore = Depends(Provide[Container.services.wallet_store]),
) -> TransactionResult:
    user_id = _require_identity(wallet_store)
    result = wallet_store.update_spent(request.amount, request.description)
    if not result.persisted:
        logger.warning(f"Spend for user {user_id} kept in memory only")
    return result


@router.post("/refresh", response_model=WalletSnapshot)
@inject
async def refresh_wallet(
    wallet_store: WalletStore = Depends(Provide[Container.services.wallet_store]),
) -> WalletSnapshot:
    _require_identity(wallet_store)
    wallet_store.refresh()
    return wallet_store.get_snapshot()


@router.get("/integrity", response_model=WalletIntegrityReport)
@inject
async def verify_integrity(
    wallet_store: WalletStore = Depends(Provide[Container.services.wallet_store]),
) -> WalletIntegrityReport:
    _require_identity(wallet_store)
    return wallet_store.verify_integrity()
