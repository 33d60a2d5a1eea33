"""Configuration management for lnr."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

API_KEY_ENV = "LINEAR_API_KEY"


class Settings(BaseSettings):
    """Application settings, read from LINEAR_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="LINEAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Credentials
    api_key: Optional[str] = Field(default=None)

    # API
    api_url: str = Field(default="https://api.linear.app/graphql")
    timeout: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=3, ge=0)
    retry_base_delay: float = Field(default=1.0, ge=0)

    # Pagination
    page_size: int = Field(default=50, ge=1, le=250)
    reference_page_size: int = Field(
        default=100,
        ge=1,
        le=250,
        description="Page size for users, teams, labels and workflow states",
    )

    # Logging
    log_level: str = Field(default="WARNING", validation_alias="LNR_LOG_LEVEL")
    log_format: Literal["text", "json"] = Field(
        default="text", validation_alias="LNR_LOG_FORMAT"
    )

    def require_api_key(self) -> str:
        """Return the API key or fail before any network activity."""
        if not self.api_key:
            raise ConfigurationError(f"{API_KEY_ENV} environment variable is not set")
        return self.api_key


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings.

    Raises:
        ConfigurationError: An environment value is malformed or out of range.
    """
    try:
        return Settings()
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise ConfigurationError(f"invalid configuration ({problems})") from exc
