from functools import lru_cache
from pathlib import Path
from typing import List, Optional
import logging
import os

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings


DEFAULT_DATASET_PATH = str(Path(__file__).resolve().parent.parent / "data" / "catalog.json")

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application configuration settings loaded from environment variables."""

    # API settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Storefront Catalog Service"
    DEBUG: bool = False

    # Comma separated list of allowed origins
    BACKEND_CORS_ORIGINS: str = "*"

    # Logging settings
    LOG_LEVEL: str = "INFO"
    ENABLE_STRUCTURED_LOGGING: bool = True

    # Commerce platform (Medusa store API)
    USE_MEDUSA: bool = False
    MEDUSA_BACKEND_URL: Optional[str] = None
    MEDUSA_PUBLISHABLE_KEY: Optional[str] = None
    MEDUSA_DEFAULT_COUNTRY: str = "us"
    MEDUSA_PRODUCT_LIMIT: int = 100

    # Legacy shop (WooCommerce REST API)
    WOO_ENABLED: bool = True
    WC_API_URL: Optional[str] = None
    WC_SITE_URL: Optional[str] = None
    WC_CONSUMER_KEY: Optional[str] = None
    WC_CONSUMER_SECRET: Optional[str] = None
    WC_PER_PAGE: int = 100

    # Bundled local dataset
    LOCAL_DATASET_ENABLED: bool = True
    LOCAL_DATASET_PATH: Optional[str] = DEFAULT_DATASET_PATH

    # Moves one source to the front of the fallback chain
    PREFERRED_SOURCE: Optional[str] = None

    # External API timeout settings
    SOURCE_TIMEOUT_SECONDS: float = 5.0  # budget for one source attempt
    HTTP_TIMEOUT_SECONDS: float = 4.0
    MAX_RETRIES: int = 2
    RETRY_BACKOFF_FACTOR: float = 0.3

    @field_validator("PREFERRED_SOURCE", mode="before")
    @classmethod
    def normalize_preferred_source(cls, v: Optional[str]) -> Optional[str]:
        """Lower-case the preferred source name and treat blanks as unset."""
        if v is None:
            return None
        v = str(v).strip().lower()
        return v or None

    @property
    def cors_origins(self) -> List[str]:
        """Parse CORS origins from the comma separated setting."""
        return [origin.strip() for origin in self.BACKEND_CORS_ORIGINS.split(",") if origin.strip()]

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


def load_env_file(env_file: str = ".env") -> None:
    """
    Load environment variables from specified .env file.

    Args:
        env_file: Path to the .env file. Defaults to ".env".
    """
    env_path = os.path.join(os.getcwd(), env_file)
    if os.path.exists(env_path):
        load_dotenv(env_path)
    else:
        logger.debug(f"Environment file {env_path} not found")


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings with caching for efficiency.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
