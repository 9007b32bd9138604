# Repository layer - Snapshot persistence with Pydantic records

from .wallet_repository import WalletRepository

__all__ = [
    "WalletRepository",
]
