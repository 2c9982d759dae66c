"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
Missing credentials fail here, before any client is built.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache


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
    # MARIANATEK
    # ===================
    marianatek_api_key: str = Field(
        ...,
        description="Marianatek API bearer token"
    )
    marianatek_base_url: str = Field(
        default="https://vaultcycleclub.marianatek.com/api",
        description="Marianatek tenant API root"
    )
    default_location_id: str = Field(
        default="48717",
        description="Marianatek location used when a mapping entry pins none"
    )

    # ===================
    # WEBFLOW
    # ===================
    webflow_api_key: str = Field(
        ...,
        description="Webflow API bearer token"
    )
    webflow_sku_collection: str = Field(
        ...,
        description="Webflow collection id holding the SKU items"
    )
    webflow_base_url: str = Field(
        default="https://api.webflow.com/v2",
        description="Webflow API root"
    )
    webflow_page_size: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Items requested per Webflow page"
    )

    # ===================
    # SYNC BEHAVIOUR
    # ===================
    throttle_minutes: float = Field(
        default=3,
        ge=0,
        description="Minimum minutes between two sync attempts for the same pair"
    )
    sync_interval_seconds: int = Field(
        default=60,
        ge=1,
        description="Seconds between the end of one cycle and the start of the next"
    )
    request_delay_seconds: float = Field(
        default=0.3,
        ge=0,
        description="Pause after each processed entity and each fetched page"
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        le=5,
        description="Retries for rate-limited or 500 responses"
    )
    request_timeout_seconds: float = Field(
        default=10,
        gt=0,
        description="Timeout for a single HTTP request"
    )
    scheduler_enabled: bool = Field(
        default=True,
        description="Start the periodic sync when the API starts"
    )

    # ===================
    # FILES
    # ===================
    mapping_file: str = Field(
        default="variant_mapping.json",
        description="JSON list of Webflow/Marianatek variant pairs"
    )
    state_file: str = Field(
        default="lastSynced.json",
        description="Persisted last-synced quantities per pair"
    )
    sync_log_file: str = Field(
        default="sync.log",
        description="Append-only sync event log"
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

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def throttle_seconds(self) -> float:
        """Throttle window in seconds."""
        return self.throttle_minutes * 60


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
