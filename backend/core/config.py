"""
Configuration management for the admin console backend.

Settings are read from environment variables (or a local ``.env`` file)
and validated once at import time when running in production.
"""

from functools import lru_cache
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Store collection and path names are configurable so that a staging
    project can share a Firebase project with production under different
    roots.
    """

    # Environment Settings
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # API
    cors_origins: str = "http://localhost:3000"

    # Store backend: "firebase" talks to the hosted services, "memory"
    # keeps everything in-process (local development and tests)
    store_backend: str = "firebase"

    # Firebase Configuration
    firebase_credentials_path: Optional[str] = None
    firebase_project_id: Optional[str] = None
    firebase_database_url: Optional[str] = None

    # Document store collections
    orders_collection: str = "orders"
    menu_collection: str = "menus"
    admins_collection: str = "admins"

    # Realtime tree paths
    orders_path: str = "orders"

    # Order Sync Configuration
    dual_write_creates: bool = True
    orders_live_mirror: bool = True

    # Dashboard
    default_chart_range: str = "weekly"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("store_backend")
    def validate_store_backend(cls, v):
        """Only the two known backends are accepted."""
        v = v.lower()
        if v not in ("firebase", "memory"):
            raise ValueError("STORE_BACKEND must be 'firebase' or 'memory'")
        return v

    @field_validator("orders_path")
    def strip_orders_path(cls, v):
        return v.strip("/")

    @property
    def cors_origin_list(self) -> List[str]:
        """CORS origins parsed from the comma separated setting."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"

    @property
    def uses_memory_store(self) -> bool:
        return self.store_backend == "memory"


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Returns:
        Settings instance with environment variables loaded
    """
    return Settings()


# Export settings instance for easy import
settings = get_settings()


def validate_production_config(config: Settings = settings):
    """Validate configuration for production deployment."""
    if not config.is_production:
        return

    issues = []

    if config.uses_memory_store:
        issues.append("STORE_BACKEND is 'memory'")

    if config.debug:
        issues.append("DEBUG is enabled in production")

    if not config.firebase_database_url:
        issues.append("FIREBASE_DATABASE_URL is not set")

    if issues:
        raise ValueError(f"Production configuration issues detected: {', '.join(issues)}")


# Validate on import if in production
if settings.is_production:
    validate_production_config()
