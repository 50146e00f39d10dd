"""
Pydantic models for engine configuration.
Provides robust validation for all settings.
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

BACKOFF_STRATEGIES = ("linear", "exponential")


class TransportConfig(BaseModel):
    """
    HTTP transport settings shared by manifest and segment requests.

    CDNs serving HLS under concurrent load have been observed to reset
    multiplexed streams, so requests are pinned to HTTP/1.x with one
    connection per in-flight request, bounded by the pool limits below.
    """

    http_version: str = "1.1"
    connection_limit: int | None = None  # None = 2 x max_workers
    keepalive_timeout: float = 90.0
    request_timeout: float = 300.0
    connect_timeout: float = 30.0

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True

    @field_validator("http_version")
    @classmethod
    def validate_http_version(cls, v: str) -> str:
        """Only the non-multiplexed protocol versions are accepted."""
        v = v.strip()
        if v not in ("1.0", "1.1"):
            raise ValueError("HTTP version must be '1.0' or '1.1'.")
        return v

    @field_validator("connection_limit")
    @classmethod
    def validate_connection_limit(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError("Connection limit must be at least 1.")
        return v

    @field_validator("keepalive_timeout", "request_timeout", "connect_timeout")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeouts must be positive.")
        return v


class DownloadConfig(BaseModel):
    """A validated configuration model for the download engine."""

    # Concurrency & retries
    max_workers: int = 8
    max_attempts: int = 5
    retry_delay: float = 1.0
    backoff: str = "linear"

    # Failure policy
    max_loss_ratio: float = 0.05

    # Requests
    user_agent: str = DEFAULT_USER_AGENT
    max_playlist_depth: int = 3
    transport: TransportConfig = Field(default_factory=TransportConfig)

    # Output
    output_dir: Path | None = None

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("max_workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        """Ensures a reasonable number of workers."""
        if v < 1 or v > 32:
            raise ValueError("Max workers must be between 1 and 32.")
        return v

    @field_validator("max_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Max attempts must be at least 1.")
        return v

    @field_validator("retry_delay")
    @classmethod
    def validate_retry_delay(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Retry delay cannot be negative.")
        return v

    @field_validator("backoff")
    @classmethod
    def validate_backoff(cls, v: str) -> str:
        v = v.lower()
        if v not in BACKOFF_STRATEGIES:
            raise ValueError(
                f"Backoff must be one of: {', '.join(BACKOFF_STRATEGIES)}."
            )
        return v

    @field_validator("max_loss_ratio")
    @classmethod
    def validate_loss_ratio(cls, v: float) -> float:
        """The tolerated loss is a fraction in [0, 1)."""
        if v < 0 or v >= 1:
            raise ValueError("Max loss ratio must be between 0 and 1 (exclusive).")
        return v

    @field_validator("max_playlist_depth")
    @classmethod
    def validate_depth(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Max playlist depth must be at least 1.")
        return v

    @model_validator(mode="after")
    def validate_user_agent(self) -> "DownloadConfig":
        """An empty user agent would defeat the default-header fallback."""
        if not self.user_agent:
            raise ValueError("User agent cannot be empty.")
        return self

    @property
    def connection_limit(self) -> int:
        """Total pool size, derived from the worker count when unset."""
        return self.transport.connection_limit or self.max_workers * 2

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns the flat keys that are expected in the INI file."""
        return {key for key in cls.model_fields if key != "transport"} | {
            f"transport_{key}" for key in TransportConfig.model_fields
        }
