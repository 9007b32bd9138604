#!/usr/bin/env python3
"""Verify Redis wallet storage with the configured settings"""

from datetime import datetime, timezone

from eduwallet.config import settings
from eduwallet.providers.storage.redis_store import RedisKeyValueStore
from eduwallet.repositories.wallet_repository import WalletRepository
from eduwallet.schemas.wallet import Transaction, TransactionType, WalletRecord
from eduwallet.services.wallet_store import generate_transaction_id


def main():
    print("="*60)
    print("Redis Wallet Storage Verification")
    print("="*60)

    # 1. Check settings
    print(f"\n1. Configuration Settings:")
    print(f"   REDIS_HOST: {settings.REDIS_HOST}")
    print(f"   REDIS_PORT: {settings.REDIS_PORT}")
    print(f"   REDIS_DB: {settings.REDIS_DB}")
    print(f"   REDIS_PASSWORD: {'(not set)' if not settings.REDIS_PASSWORD else '***'}")
    print(f"   STORAGE_BACKEND: {settings.STORAGE_BACKEND}")

    # 2. Key scheme
    storage = RedisKeyValueStore(settings=settings)
    repository = WalletRepository(storage, key_prefix="verify:wallet_")
    print(f"\n2. Key Scheme:")
    print(f"   Example key: {repository.storage_key('u1')}")

    # 3. Connection
    print(f"\n3. Redis Connection Test:")
    if not storage.ping():
        print(f"   ❌ PING failed - check REDIS_* settings")
        return

    print(f"   ✅ PING successful")

    # 4. Snapshot round trip
    print(f"\n4. Snapshot Round Trip:")
    now = datetime.now(timezone.utc)
    record = WalletRecord(
        earned=settings.WALLET_FIXED_EARNED,
        spent=25,
        transactions=[
            Transaction(
                id=generate_transaction_id(now),
                amount=25,
                type=TransactionType.SPEND,
                description="verify",
                timestamp=now,
            )
        ],
    )

    if repository.save("u1", record):
        print(f"   ✅ SET operation successful")
        loaded = repository.load("u1")
        if loaded == record:
            print(f"   ✅ GET operation successful")
            print(f"   Retrieved data: {loaded.model_dump_json()}")
        else:
            print(f"   ❌ GET operation failed - data mismatch")
    else:
        print(f"   ❌ SET operation failed")

    removed = repository.purge_legacy()
    print(f"   Cleaned up {removed} verification key(s)")

    storage.close()

    print("\n" + "="*60)
    print("✅ Verification Complete!")
    print("="*60)
    print("\nNext steps:")
    print("1. Run: STORAGE_BACKEND=redis uvicorn eduwallet.main:app --host 0.0.0.0 --port 8000 --reload")
    print("2. Sign in: curl -X PUT localhost:8000/api/v1/session -H 'Content-Type: application/json' -d '{\"user_id\": \"u1\"}'")
    print("3. Check wallet: curl localhost:8000/api/v1/wallet")


if __name__ == "__main__":
    main()
