"""Application configuration"""

import logging
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    app_name: str = "TeamHub API"
    environment: str = "development"  # "development" or "production"
    port: int = 5000
    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    # Storage
    database_path: str = "/app/data/db/teamhub.json"
    uploads_dir: str = "/app/data/uploads"

    # Security
    jwt_secret: str = "dev-secret-change-me"
    jwt_refresh_secret: str = "dev-refresh-secret-change-me"
    access_token_expire_minutes: int = 60 * 24 * 7  # 7 days
    refresh_token_expire_days: int = 30

    # Firebase (ID token verification is skipped when unset)
    firebase_project_id: Optional[str] = None

    # Include the known allowlist in OAuth 403 responses. Never enable in production.
    auth_debug_diagnostics: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def validate_production_settings(settings: Settings) -> list:
    """Validate that all required settings are configured for production"""
    errors = []

    if settings.jwt_secret == "dev-secret-change-me":
        errors.append("JWT_SECRET must be changed from default value")

    if settings.jwt_refresh_secret == "dev-refresh-secret-change-me":
        errors.append("JWT_REFRESH_SECRET must be changed from default value")

    if settings.auth_debug_diagnostics:
        errors.append("AUTH_DEBUG_DIAGNOSTICS must be disabled in production")

    return errors


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    base_settings = Settings()

    if base_settings.is_production:
        for error in validate_production_settings(base_settings):
            logger.warning(f"Production config warning: {error}")

    return base_settings


# Convenience access
settings = get_settings()
