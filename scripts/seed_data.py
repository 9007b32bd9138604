"""
데모 지갑 시드 스크립트
데모 학생 계정들의 지갑 스냅샷을 설정된 저장소에 기록
"""

import sys
import os

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from eduwallet.config import settings
from eduwallet.providers.identity import SessionIdentityProvider
from eduwallet.providers.storage.factory import build_key_value_store
from eduwallet.repositories.wallet_repository import WalletRepository
from eduwallet.schemas.wallet import TransactionType
from eduwallet.services.wallet_store import WalletStore


def seed_wallet_data():
    """데모 지갑 시드"""

    # 데모 학생별 거래 (오래된 순)
    demo_wallets = {
        "student_demo_1": [
            (150, TransactionType.EARN, "Energy Quest completed"),
            (50, TransactionType.SPEND, "Bought hint"),
        ],
        "student_demo_2": [
            (80, TransactionType.EARN, "Assignment approved"),
            (200, TransactionType.SPEND, "Avatar frame"),
            (30, TransactionType.SPEND, "Bought hint"),
        ],
        "student_demo_3": [],
    }

    storage = build_key_value_store(settings)
    repository = WalletRepository(storage, key_prefix=settings.WALLET_KEY_PREFIX)
    identity = SessionIdentityProvider()
    store = WalletStore(repository, identity, settings)

    try:
        for user_id, transactions in demo_wallets.items():
            # 기존 데모 지갑 삭제
            repository.delete(user_id)

            identity.sign_in(user_id)
            for amount, kind, description in transactions:
                result = store.record_transaction(amount, kind, description)
                if not result.persisted:
                    raise RuntimeError(f"Failed to persist wallet for {user_id}")

            print(
                f"✅ {user_id}: earned={store.earned} spent={store.spent} "
                f"balance={store.balance} ({len(store.transactions)}건)"
            )
        identity.sign_out()
        print(f"💾 저장소: {settings.STORAGE_BACKEND}")

    except Exception as e:
        print(f"❌ 시드 데이터 생성 실패: {str(e)}")
        raise
    finally:
        store.close()


if __name__ == "__main__":
    seed_wallet_data()
