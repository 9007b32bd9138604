from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
from urllib.parse import quote


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file="eduwallet/.env",
        env_file_encoding="utf-8",
        extra="allow",
    )
    # Application
    APP_NAME: str = "EduWallet API"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "simple"  # simple | json

    # Storage
    STORAGE_BACKEND: str = "memory"  # memory | redis
    STORAGE_MAX_BYTES: Optional[int] = None  # in-memory quota, None = unbounded

    # Redis
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: Optional[str] = None

    # Wallet Rules
    WALLET_FIXED_EARNED: int = 1200  # EduCoins granted to every account
    WALLET_KEY_PREFIX: str = "wallet_"
    LEGACY_WALLET_KEY_PREFIX: str = "wallet_"
    WALLET_PURGE_LEGACY_ON_STARTUP: bool = False
    WALLET_STRICT_AMOUNTS: bool = True  # reject zero/negative amounts

    @property
    def redis_url(self) -> str:
        """Construct redis URL from individual components"""
        # URL encode the password to handle special characters
        auth = f":{quote(self.REDIS_PASSWORD, safe='')}@" if self.REDIS_PASSWORD else ""
        return f"redis://{auth}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


settings = Settings()
