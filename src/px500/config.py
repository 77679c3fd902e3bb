"""Configuration management with pydantic-settings for the px500 client.

Loads from (in order of precedence):
1. Environment variables prefixed with PX500_ (highest priority)
2. .env file in the working directory
3. Default values (lowest priority)

The config is frozen after load and the consumer key is held as a SecretStr.
"""

import logging
from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("px500.config")

__all__ = [
    "DEFAULT_BASE_URL",
    "Px500Config",
    "get_config",
    "reset_config",
]

DEFAULT_BASE_URL = "https://api.500px.com/v1"


class Px500Config(BaseSettings):
    """Configuration for the px500 client.

    Attributes:
        consumer_key: Application consumer key, sent as the consumer_key query parameter
        base_url: API root URL
        connect_timeout: Connection establishment timeout (seconds)
        read_timeout: Response read timeout (seconds)
        write_timeout: Request body write timeout (seconds)
        pool_timeout: Connection pool acquisition timeout (seconds)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log format (json for production, text for development)
    """

    model_config = SettingsConfigDict(
        env_prefix="PX500_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        validate_default=True,
        frozen=True,
        extra="ignore",
    )

    consumer_key: SecretStr = Field(
        default=SecretStr(""),
        description="Application consumer key (PX500_CONSUMER_KEY)",
    )

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="API root URL",
    )

    connect_timeout: float = Field(default=5.0, gt=0, le=120)
    read_timeout: float = Field(default=30.0, gt=0, le=600)
    write_timeout: float = Field(default=30.0, gt=0, le=600)
    pool_timeout: float = Field(default=5.0, gt=0, le=120)

    log_level: str = Field(
        default="WARNING",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )

    log_format: str = Field(
        default="json",
        pattern="^(json|text)$",
        description="Log format: json (production), text (development)",
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base_url so paths can be appended with a leading slash."""
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {v!r}")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    def has_consumer_key(self) -> bool:
        return bool(self.consumer_key.get_secret_value().strip())


@lru_cache(maxsize=1)
def get_config() -> Px500Config:
    """Get the global configuration singleton.

    First call loads from environment + .env file, subsequent calls return
    the cached instance.

    Raises:
        pydantic.ValidationError: If configuration values are invalid.
    """
    return Px500Config()


def reset_config() -> None:
    """Clear the configuration singleton. Only meant for tests."""
    get_config.cache_clear()
