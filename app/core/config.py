"""
NDC Fare Engine - Configuration Management
Centralized settings using Pydantic Settings
"""

from decimal import Decimal
from functools import lru_cache
from typing import Dict, List, Union

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # === Application Settings ===
    APP_NAME: str = "NDC Fare Engine"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "Fare reconciliation for NDC offer-price and air-shopping responses"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"  # development, staging, production

    # === API Settings ===
    API_V1_PREFIX: str = "/api/v1"
    SHOW_DOCS: bool = True

    # === CORS Settings ===
    BACKEND_CORS_ORIGINS: List[str] = ["*"]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # === Provider Defaults ===
    # Jetstar omits currency and owner on some call types
    DEFAULT_CURRENCY: str = "AUD"
    DEFAULT_OWNER_CODE: str = "JQ"

    # === Reconciliation ===
    RECONCILIATION_TOLERANCE: Decimal = Decimal("0.01")

    # Extra or replacement names for tax/fee codes, e.g. {"IIM": "Indirect Markup"}
    TAX_FEE_NAME_OVERRIDES: Dict[str, str] = {}

    # === Document Limits ===
    MAX_DOCUMENT_BYTES: int = 10 * 1024 * 1024

    # === Logging ===
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"  # json, text

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Alias for BACKEND_CORS_ORIGINS"""
        return self.BACKEND_CORS_ORIGINS

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


# Global settings instance
settings = get_settings()
