"""
Configuration settings for the Canvas client.

One ``CanvasSettings`` instance is created per client and shared by reference
with its transport. There is no module-level singleton, so two clients
pointing at different Canvas instances can live side by side.
"""

from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from canvas_client.exceptions import (
    ConfigurationError,
    MissingApiKeyError,
    MissingBaseUrlError,
)


def mask_secret(value: Optional[str]) -> Optional[str]:
    """Mask a secret, keeping only its last four characters."""
    if not value:
        return value
    return "***" + value[-4:]


class CanvasSettings(BaseSettings):
    """
    Configuration for the Canvas API client.

    Settings are loaded from keyword arguments, then environment variables
    with the CANVAS_ prefix, then a ``.env`` file.
    Example: CANVAS_BASE_URL, CANVAS_API_KEY, CANVAS_ACCOUNT_ID.
    """

    model_config = SettingsConfigDict(
        env_prefix="CANVAS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Connection
    base_url: Optional[str] = Field(
        default=None,
        description="Canvas instance URL, e.g. https://school.instructure.com"
    )
    api_key: Optional[str] = Field(
        default=None,
        repr=False,
        description="Canvas API access token"
    )
    api_version: str = Field(
        default="v1",
        description="API version segment"
    )
    account_id: int = Field(
        default=1,
        description="Default account for account-scoped resources"
    )

    # HTTP client settings
    timeout: float = Field(
        default=30.0,
        description="HTTP request timeout in seconds"
    )
    per_page: int = Field(
        default=100,
        ge=1,
        description="Default page size for list requests"
    )

    # Retry settings
    max_retries: int = Field(
        default=3,
        ge=0,
        description="Maximum number of retries for transient failures"
    )
    retry_delay: float = Field(
        default=1.0,
        ge=0,
        description="Initial delay between retries in seconds"
    )
    retry_multiplier: float = Field(
        default=2.0,
        ge=1,
        description="Backoff multiplier applied after each retry"
    )
    retry_max_delay: float = Field(
        default=16.0,
        ge=0,
        description="Upper bound for a single retry delay"
    )
    retry_jitter: bool = Field(
        default=True,
        description="Add up to 25% random jitter to retry delays"
    )
    retry_on_status: List[int] = Field(
        default_factory=lambda: [500, 502, 503, 504],
        description="HTTP statuses that are retried"
    )

    # Rate limiting (Canvas leaky bucket)
    rate_limit_enabled: bool = Field(
        default=True,
        description="Throttle requests locally based on rate limit headers"
    )
    rate_limit_bucket_size: float = Field(
        default=3000,
        gt=0,
        description="Bucket capacity in cost units"
    )
    rate_limit_leak_rate: float = Field(
        default=50.0,
        gt=0,
        description="Cost units the bucket regains per second"
    )
    rate_limit_initial_cost: float = Field(
        default=50,
        ge=0,
        description="Cost pre-charged for every request"
    )
    rate_limit_min_remaining: float = Field(
        default=100,
        ge=0,
        description="Start waiting when fewer units remain"
    )
    rate_limit_max_wait: float = Field(
        default=60.0,
        ge=0,
        description="Longest wait before raising RateLimitError"
    )

    # Response cache
    cache_enabled: bool = Field(
        default=False,
        description="Cache successful GET responses in memory"
    )
    cache_ttl: float = Field(
        default=300.0,
        gt=0,
        description="Seconds a cached GET response stays valid"
    )
    cache_max_entries: int = Field(
        default=1000,
        ge=1,
        description="Maximum number of cached responses"
    )

    # Logging
    log_requests: bool = Field(
        default=True,
        description="Log each request and response at DEBUG level"
    )

    @field_validator("base_url")
    @classmethod
    def normalize_base_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None or value == "":
            return None
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid base URL: {value}")
        return value.rstrip("/")

    @field_validator("api_version")
    @classmethod
    def normalize_api_version(cls, value: str) -> str:
        return value.strip("/")

    @classmethod
    def from_env(cls, **overrides: Any) -> "CanvasSettings":
        """
        Load settings from the environment.

        Keyword arguments that are not None take precedence over the
        environment.
        """
        return cls(**{k: v for k, v in overrides.items() if v is not None})

    @property
    def api_root(self) -> str:
        """Root URL that relative API paths are joined to."""
        if not self.base_url:
            raise MissingBaseUrlError()
        return f"{self.base_url}/api/{self.api_version}/"

    def validate_complete(self) -> "CanvasSettings":
        """
        Check that the settings are usable for API calls.

        Raises:
            MissingBaseUrlError: If no base URL is configured
            MissingApiKeyError: If no API key is configured
            ConfigurationError: If numeric limits are inconsistent
        """
        if not self.base_url:
            raise MissingBaseUrlError()
        if not self.api_key:
            raise MissingApiKeyError()
        if self.retry_max_delay < self.retry_delay:
            raise ConfigurationError(
                "retry_max_delay must not be smaller than retry_delay"
            )
        return self

    def debug_config(self) -> Dict[str, Any]:
        """Return the settings as a dict with the API key masked."""
        data = self.model_dump()
        data["api_key"] = mask_secret(self.api_key)
        return data
