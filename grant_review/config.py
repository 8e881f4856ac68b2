"""Application configuration with comprehensive validation."""
from typing import Optional, Literal
from functools import lru_cache
from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with production-grade validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Grant Review Scoring Engine"
    APP_VERSION: str = "1.0.0"
    APP_ENV: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"

    # API
    API_V1_PREFIX: str = "/api/v1"

    # Store
    STORE_BACKEND: Literal["memory", "snowflake"] = "memory"

    # Snowflake
    SNOWFLAKE_ACCOUNT: Optional[str] = None
    SNOWFLAKE_USER: Optional[str] = None
    SNOWFLAKE_PASSWORD: Optional[SecretStr] = None
    SNOWFLAKE_DATABASE: Optional[str] = None
    SNOWFLAKE_SCHEMA: Optional[str] = None
    SNOWFLAKE_WAREHOUSE: Optional[str] = None
    SNOWFLAKE_ROLE: Optional[str] = None

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_ENABLED: bool = True
    CACHE_TTL_RESULTS: int = Field(default=300, ge=1)    # 5 minutes
    CACHE_TTL_PROGRESS: int = Field(default=60, ge=1)    # 1 minute

    # Scoring
    DEFAULT_VARIANCE_THRESHOLD: Optional[float] = Field(
        default=None,
        description="Percentage used when a call has no variance_threshold; unset disables flagging",
    )
    MISSING_WEIGHTED_POLICY: Literal["ignore_missing", "treat_missing_as_zero"] = "ignore_missing"

    # Assignment distribution
    DEFAULT_ASSESSORS_PER_APPLICATION: int = Field(default=2, ge=1, le=50)
    DEFAULT_DISTRIBUTION_STRATEGY: Literal["round_robin", "random", "balanced"] = "round_robin"
    DISTRIBUTION_RANDOM_SEED: Optional[int] = None

    @model_validator(mode="after")
    def validate_variance_threshold(self):
        """A configured fallback threshold must be a non-negative percentage."""
        if self.DEFAULT_VARIANCE_THRESHOLD is not None and self.DEFAULT_VARIANCE_THRESHOLD < 0:
            raise ValueError("DEFAULT_VARIANCE_THRESHOLD must be >= 0")
        return self

    @model_validator(mode="after")
    def validate_store_settings(self):
        """Snowflake backend needs credentials up front."""
        if self.STORE_BACKEND == "snowflake":
            missing = [
                name for name in ("SNOWFLAKE_ACCOUNT", "SNOWFLAKE_USER", "SNOWFLAKE_PASSWORD")
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(f"Snowflake backend requires: {', '.join(missing)}")
        return self

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Ensure production is not running in debug mode."""
        if self.APP_ENV == "production" and self.DEBUG:
            raise ValueError("DEBUG must be False in production")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()

settings = get_settings()
