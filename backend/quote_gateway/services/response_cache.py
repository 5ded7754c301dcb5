"""Response cache backends.

The cache is a pure accelerator: a failing backend behaves like an empty one
and never turns into an error for the caller.
"""

import logging
import time
from typing import Callable, Dict, Optional, Tuple

import redis.asyncio as aioredis
from pydantic import ValidationError
from redis.exceptions import RedisError

from quote_gateway.core.config import Settings
from quote_gateway.models.schemas import CachedResponse

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 1024


class ResponseCache:
    """Key/value store of HTTP responses, keyed by normalized request URL."""

    async def lookup(self, key: str) -> Optional[CachedResponse]:
        raise NotImplementedError

    async def store(self, key: str, response: CachedResponse) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        return None


class InMemoryResponseCache(ResponseCache):
    """Process-local cache honouring each entry's `max-age`.

    Each worker process has its own instance; entries are not shared between
    workers. Expired entries are swept on every store and at most
    `max_entries` are kept, oldest write evicted first.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, max_entries: int = DEFAULT_MAX_ENTRIES):
        self._clock = clock
        self.max_entries = max(1, max_entries)
        # Insertion order doubles as write order for eviction
        self._store: Dict[str, Tuple[Optional[float], CachedResponse]] = {}

    async def lookup(self, key: str) -> Optional[CachedResponse]:
        entry = self._store.get(key)
        if entry is None:
            return None
        expires_at, response = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._store[key]
            return None
        return response

    async def store(self, key: str, response: CachedResponse) -> None:
        max_age = response.max_age
        if max_age == 0:
            return
        now = self._clock()
        self._sweep(now)
        self._store.pop(key, None)
        while len(self._store) >= self.max_entries:
            oldest = next(iter(self._store))
            del self._store[oldest]
            logger.debug(f"Evicted {oldest} from response cache")
        expires_at = now + max_age if max_age is not None else None
        self._store[key] = (expires_at, response)

    def _sweep(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._store.items() if expires_at is not None and now >= expires_at]
        for k in expired:
            del self._store[k]

    def __len__(self) -> int:
        return len(self._store)


class RedisResponseCache(ResponseCache):
    """Redis-backed cache; entry expiry is delegated to Redis (`EX`)."""

    def __init__(self, redis_url: str, prefix: str = "quote-gateway:", client=None):
        self.redis_url = redis_url
        self.prefix = prefix
        self._client = client

    def _get_client(self):
        if self._client is None:
            self._client = aioredis.from_url(self.redis_url, decode_responses=True)
        return self._client

    async def lookup(self, key: str) -> Optional[CachedResponse]:
        try:
            raw = await self._get_client().get(self.prefix + key)
        except (RedisError, OSError) as e:
            logger.warning("Failed to read cached response from Redis: %s", e)
            return None
        if raw is None:
            return None
        try:
            return CachedResponse.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding malformed cache entry %s: %s", key, e)
            return None

    async def store(self, key: str, response: CachedResponse) -> None:
        max_age = response.max_age
        if max_age == 0:
            return
        try:
            await self._get_client().set(self.prefix + key, response.model_dump_json(), ex=max_age)
        except (RedisError, OSError) as e:
            logger.warning("Failed to write cached response to Redis: %s", e)

    async def close(self) -> None:
        if self._client is not None:
            try:
                await self._client.aclose()
            except (RedisError, OSError) as e:
                logger.warning(f"Error closing redis client: {e}")
            self._client = None


# Shared instances, one per backend configuration
_caches: Dict[str, ResponseCache] = {}


def get_response_cache(settings: Settings) -> ResponseCache:
    """Get or create the cache for the configured backend."""
    if settings.cache_backend == "redis":
        key = f"redis:{settings.redis_url}"
        if key not in _caches:
            _caches[key] = RedisResponseCache(settings.redis_url)
    else:
        if settings.cache_backend != "memory":
            logger.warning(f"Unknown CACHE_BACKEND {settings.cache_backend!r}; using in-memory cache")
        key = "memory"
        if key not in _caches:
            _caches[key] = InMemoryResponseCache(max_entries=settings.cache_max_entries)
    return _caches[key]


async def close_response_caches() -> None:
    for cache in list(_caches.values()):
        await cache.close()
    _caches.clear()
