"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )
    supabase_service_key: Optional[str] = Field(
        None,
        description="Supabase service role key (for admin operations)"
    )

    # ===================
    # STORAGE
    # ===================
    products_bucket: str = Field(
        default="products",
        description="Storage bucket for product images, videos and UMKM logos"
    )
    reviews_bucket: str = Field(
        default="wardig-assets",
        description="Storage bucket for customer review photos"
    )

    # ===================
    # SESSION
    # ===================
    session_cookie_name: str = Field(
        default="sb-access-token",
        description="Cookie holding the admin access token"
    )
    session_cookie_max_age: int = Field(
        default=60 * 60 * 24 * 7,
        ge=60,
        description="Session cookie lifetime in seconds"
    )
    login_path: str = Field(
        default="/login",
        description="Where unauthenticated admin visitors are sent"
    )
    dashboard_path: str = Field(
        default="/admin/dashboard",
        description="Where admins land after signing in"
    )

    # ===================
    # PUBLIC PAGES
    # ===================
    public_base_url: Optional[str] = Field(
        None,
        description="Absolute base URL encoded into QR codes (request URL used when unset)"
    )
    qr_size_px: int = Field(
        default=256,
        ge=64,
        le=2048,
        description="Rendered QR image width and height"
    )
    qr_margin: int = Field(
        default=2,
        ge=0,
        le=10,
        description="Quiet zone around the QR code, in modules"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        description="Origins allowed to call the API from a browser"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def admin_configured(self) -> bool:
        """Check if a service role key is available."""
        return bool(self.supabase_service_key)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
