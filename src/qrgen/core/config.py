"""Configuration Management."""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    """Application settings from environment."""

    model_config = SettingsConfigDict(
        env_prefix="QRGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
    )

    # Server
    host: str = Field(default="0.0.0.0", description="HTTP bind address")
    port: int = Field(default=8080, gt=0, le=65535, description="HTTP port")
    environment: str = Field(default="development", description="Deployment environment")
    version: str = Field(default="1.2.0", description="Reported service version")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    json_logs: bool = Field(default=False, description="Use JSON log format")

    # Caching
    cache_enabled: bool = Field(default=True, description="Enable QR response caching")
    cache_max_keys: int = Field(default=1000, gt=0, description="Cache max key count")
    cache_sweep_interval: float = Field(default=300.0, gt=0, description="Sweeper period (seconds)")
    cache_max_age: float = Field(default=3600.0, gt=0, description="Hard entry age ceiling (seconds)")
    cache_idle_timeout: float = Field(default=1800.0, gt=0, description="Idle time before cold eviction")
    cache_min_access: int = Field(default=2, ge=0, description="Accesses that keep an idle entry")
    cache_preload: bool = Field(default=False, description="Warm the cache with popular codes")

    # Rate limiting
    rate_limit_enabled: bool = Field(default=True, description="Enable rate limiting")
    general_limit_max: int = Field(default=225, gt=0, description="Requests per window on /api/")
    general_limit_window: int = Field(default=15 * 60, gt=0, description="General window (seconds)")
    qr_limit_max: int = Field(default=60, gt=0, description="Requests per window on /api/qr")
    qr_limit_window: int = Field(default=60, gt=0, description="QR window (seconds)")

    # Validation
    max_data_length: int = Field(default=4000, gt=0, description="Max QR payload length")
    max_batch_size: int = Field(default=50, gt=0, description="Max requests per batch")

    # CORS
    cors_origins: list[str] = Field(
        default=["https://yourdomain.com", "https://api.yourdomain.com"],
        description="Allowed origins in production",
    )

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
