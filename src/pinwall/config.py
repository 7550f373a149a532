"""
Pinwall Configuration Module.

Handles application settings, feature flags, and environment configuration.
Uses pydantic-settings for validation and type safety.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeatureFlags(BaseSettings):
    """Feature flags for enabling/disabling pin interactions."""

    model_config = SettingsConfigDict(env_prefix="FEATURE_")

    pins: bool = True
    comments: bool = True
    tags: bool = True

    def to_dict(self) -> dict[str, bool]:
        """Return feature flags as dictionary for health endpoint."""
        return {
            "pins": self.pins,
            "comments": self.comments,
            "tags": self.tags,
        }


DEMO_SUPABASE_URL = "https://demo.supabase.co"
DEMO_SERVICE_ROLE_KEY = "demo-service-role-key"


class SupabaseSettings(BaseSettings):
    """Supabase configuration for the pin store and tag catalog."""

    model_config = SettingsConfigDict(env_prefix="SUPABASE_")

    url: str = Field(default=DEMO_SUPABASE_URL, description="Supabase project URL")
    service_role_key: str = Field(default=DEMO_SERVICE_ROLE_KEY, description="Supabase service role key")
    pins_table: str = Field(default="pins", description="Table holding pin documents")
    users_table: str = Field(default="users", description="Table used to expand user references")
    tags_table: str = Field(default="saved_tags", description="Append-only tag catalog table")

    @property
    def uses_demo_credentials(self) -> bool:
        return self.url == DEMO_SUPABASE_URL or self.service_role_key == DEMO_SERVICE_ROLE_KEY


class AuthSettings(BaseSettings):
    """Bearer token configuration."""

    model_config = SettingsConfigDict(env_prefix="AUTH_")

    jwt_secret: str = Field(default="demo-jwt-secret-for-development-only", description="HS secret for access tokens")
    jwt_algorithm: str = Field(default="HS256")
    access_token_ttl_seconds: int = Field(default=3600, ge=60)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_env: Literal["development", "staging", "production"] = "development"
    app_debug: bool = False
    app_log_level: str = "INFO"

    # Storage
    storage_backend: Literal["memory", "supabase"] = Field(
        default="memory",
        description="Backend used for the pin repository and tag catalog.",
        validation_alias="STORAGE_BACKEND",
    )
    tag_catalog_drain_timeout_seconds: float = Field(
        default=5.0,
        description="How long shutdown waits for pending tag catalog writes.",
        validation_alias="TAG_CATALOG_DRAIN_TIMEOUT_SECONDS",
    )

    # Nested settings
    features: FeatureFlags = Field(default_factory=FeatureFlags)
    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
