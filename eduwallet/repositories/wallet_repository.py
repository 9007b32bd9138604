import json
import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from eduwallet.core.exceptions import WalletDecodeError
from eduwallet.providers.storage.base import KeyValueStore
from eduwallet.schemas.wallet import WalletRecord

logger = logging.getLogger(__name__)


class WalletRepository:
    """지갑 스냅샷 저장소 - 사용자별 키로 전체 스냅샷을 읽고 쓴다"""

    def __init__(self, storage: KeyValueStore, key_prefix: str = "wallet_"):
        self.storage = storage
        self.key_prefix = key_prefix

    def storage_key(self, user_id: str) -> str:
        return f"{self.key_prefix}{user_id}"

    def load(self, user_id: str) -> Optional[WalletRecord]:
        """사용자 지갑 스냅샷 조회

        Args:
            user_id: 사용자 ID

        Returns:
            WalletRecord 또는 저장된 값이 없으면 None

        Raises:
            WalletDecodeError: 저장된 값이 올바른 JSON 지갑 형식이 아닌 경우
        """
        key = self.storage_key(user_id)
        raw = self.storage.get(key)
        if raw is None:
            return None

        try:
            payload = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise WalletDecodeError(key, f"invalid JSON ({e})") from e

        if not isinstance(payload, dict):
            raise WalletDecodeError(key, f"expected object, got {type(payload).__name__}")

        try:
            return WalletRecord.model_validate(payload)
        except PydanticValidationError as e:
            raise WalletDecodeError(key, f"{e.error_count()} invalid field(s)") from e

    def save(self, user_id: str, record: WalletRecord) -> bool:
        """전체 스냅샷 덮어쓰기 (증분 기록 아님)"""
        key = self.storage_key(user_id)
        serialized = record.model_dump_json()
        saved = self.storage.set(key, serialized)
        if not saved:
            logger.error(f"Failed to persist wallet snapshot {key} ({len(serialized)} bytes)")
        return saved

    def delete(self, user_id: str) -> bool:
        """한 사용자의 지갑 스냅샷만 삭제 (접두사 매칭 없음)"""
        return self.storage.remove(self.storage_key(user_id))

    def purge_legacy(self, key_prefix: Optional[str] = None) -> int:
        """레거시 키 체계로 저장된 지갑 스냅샷 일괄 삭제"""
        prefix = key_prefix or self.key_prefix
        removed = self.storage.remove_all(prefix)
        logger.info(f"Purged {removed} wallet snapshot(s) under '{prefix}'")
        return removed
