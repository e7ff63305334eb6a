"""Configuration for the indexer callback service."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Service settings loaded from environment variables."""

    # Attached chain
    INDEXER_CHAIN_KIND: str = "evm"
    EVM_CHAIN_ID: int | None = None

    # Downstream services
    RELAYER_SERVICE_URL: str
    HYPERBRIDGE_SERVICE_URL: str
    SERVICE_API_KEY: str = ""
    HTTP_TIMEOUT_SECONDS: int = Field(default=30, ge=1, le=120)
    MAX_RETRIES: int = Field(default=2, ge=0, le=5)

    # Auth
    WORKER_API_KEY: str


@lru_cache
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
