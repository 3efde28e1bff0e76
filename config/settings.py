"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


BASE_DIR = Path(__file__).resolve().parent.parent


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
    # UPLOADS
    # ===================
    max_upload_mb: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Largest accepted upload, checked before parsing"
    )
    templates_dir: Path = Field(
        default=BASE_DIR / "templates",
        description="Directory holding the default bulk-upload templates"
    )

    # ===================
    # STOREFRONT
    # ===================
    storefront_base_url: str = Field(
        default="https://ecokartuk.com/products",
        description="Product links are built as {storefront_base_url}/{slug}"
    )
    currency: str = Field(
        default="GBP",
        pattern="^[A-Z]{3}$",
        description="ISO currency code appended to feed prices"
    )
    sale_window_days: int = Field(
        default=14,
        ge=1,
        le=90,
        description="Length of a generated sale price window"
    )

    # ===================
    # EBAY LISTING DEFAULTS
    # ===================
    ebay_action_marker: str = Field(
        default="Action(SiteID=UK|Country=GB|Currency=GBP|Version=1191)",
        description="Literal action column header required by File Exchange"
    )
    ebay_location: str = Field(default="Chhindwara")
    ebay_dispatch_time: str = Field(default="3")
    ebay_shipping_service: str = Field(default="UK_RoyalMail48")
    ebay_shipping_cost: str = Field(default="3.99")
    ebay_payment_profile: str = Field(default="ManagedPayments")
    ebay_return_profile: str = Field(default="30DayReturns")
    ebay_shipping_profile: str = Field(default="DefaultShipping")
    ebay_title_max_length: int = Field(
        default=80,
        ge=1,
        le=80,
        description="eBay rejects titles longer than 80 characters"
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
        default=["http://localhost:3000"],
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
    def max_upload_bytes(self) -> int:
        """Upload limit in bytes."""
        return self.max_upload_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
