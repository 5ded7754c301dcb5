import logging
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = 300
DEFAULT_QUOTE_URL = "https://query1.finance.yahoo.com/v8/finance/chart"
DEFAULT_SEARCH_URL = "https://query1.finance.yahoo.com/v1/finance/search"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def normalize_redirect_url(value: Optional[str]) -> Optional[str]:
    """Return `value` as an absolute http(s) URL, or None if it is not one.

    A bare origin gets a trailing slash so `https://example.com` and
    `https://example.com/` redirect to the same place.
    """
    if not value:
        return None
    try:
        parts = urlsplit(value.strip())
    except ValueError:
        return None
    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        return None
    return urlunsplit((parts.scheme.lower(), parts.netloc, parts.path or "/", parts.query, parts.fragment))


def parse_cache_ttl(value) -> Optional[int]:
    """Parse a TTL in whole seconds; None when the value is unusable."""
    try:
        ttl = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    if ttl < 0:
        return None
    return ttl


class Settings(BaseSettings):
    app_name: str = "quote-gateway"
    # Seconds a successful quote may be served from cache
    cache_ttl: int = DEFAULT_CACHE_TTL
    # Optional target for GET /
    root_redirect_url: Optional[str] = None
    user_agent: str = DEFAULT_USER_AGENT
    # Upstream provider
    quote_api_base_url: str = DEFAULT_QUOTE_URL
    search_api_base_url: str = DEFAULT_SEARCH_URL
    upstream_timeout: float = 10.0
    # Response cache: "memory" or "redis"
    cache_backend: str = "memory"
    # Upper bound on entries held by the in-memory cache
    cache_max_entries: int = 1024
    redis_url: str = "redis://localhost:6379/0"
    # Logging
    log_level: str = "INFO"
    log_format: str = "text"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    @field_validator("cache_ttl", mode="before")
    @classmethod
    def _fallback_cache_ttl(cls, value):
        ttl = parse_cache_ttl(value)
        if ttl is None:
            logger.warning(f"Invalid CACHE_TTL {value!r}; using default of {DEFAULT_CACHE_TTL}s")
            return DEFAULT_CACHE_TTL
        return ttl

    @field_validator("user_agent", mode="before")
    @classmethod
    def _fallback_user_agent(cls, value):
        return value or DEFAULT_USER_AGENT

    @field_validator("cache_backend", "log_format", mode="before")
    @classmethod
    def _lowercase(cls, value):
        return str(value).strip().lower()

    @property
    def redirect_location(self) -> Optional[str]:
        return normalize_redirect_url(self.root_redirect_url)


def get_settings() -> Settings:
    """Resolve settings from the environment.

    Called once per request (as a FastAPI dependency) so each request sees a
    consistent, immutable snapshot of its configuration.
    """
    return Settings()
