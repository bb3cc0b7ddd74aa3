"""Application Configuration"""

from pydantic_settings import BaseSettings
from typing import List
from functools import lru_cache


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables

    Every value can be overridden through the environment or a
    local .env file.
    """

    # Application
    APP_NAME: str = "SolanaLens"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 3420
    ALLOWED_ORIGINS: List[str] = ["*"]

    # Solana RPC
    SOLANA_RPC_URL: str = "https://api.mainnet-beta.solana.com"
    RPC_COMMITMENT: str = "confirmed"
    RPC_TIMEOUT_SECONDS: float = 30.0
    PERFORMANCE_SAMPLE_COUNT: int = 5
    SLOT_DURATION_SECONDS: float = 0.4

    # Sampling
    DEFAULT_BLOCK_WINDOW: int = 5
    MAX_BLOCK_WINDOW: int = 20
    ACTIVITY_BATCH_SIZE: int = 10
    MAX_ACTIVITY_LIMIT: int = 100

    # Dashboard
    REFRESH_INTERVAL_SECONDS: float = 10.0

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_TTL_SECONDS: int = 10

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
