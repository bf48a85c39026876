"""Cache implementations."""

import json
import time
from collections import OrderedDict

import redis.asyncio as aioredis
from loguru import logger
from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import RedisError

from ..models import LinkRecord


def cache_key(slug: str) -> str:
    """Namespaced cache key for a slug."""
    return f"link:{slug}"


class InMemoryCache:
    """Bounded in-process cache with per-entry TTL."""

    def __init__(self, max_size: int = 1000, ttl: int = 3600) -> None:
        """Initialize in-memory cache.

        Args:
            max_size: Maximum number of entries; the oldest is evicted first.
            ttl: Time to live in seconds.
        """
        self.entries: OrderedDict[str, tuple[LinkRecord, float]] = OrderedDict()
        self.max_size = max_size
        self.ttl = ttl

    async def startup(self) -> None:
        """No initialization needed."""
        logger.info(f"In-memory cache initialized (max_size={self.max_size}, ttl={self.ttl}s)")

    async def shutdown(self) -> None:
        """Drop all entries."""
        self.entries.clear()

    async def get(self, slug: str) -> LinkRecord | None:
        """Get cached record if present and not expired."""
        entry = self.entries.get(slug)
        if entry is None:
            return None

        record, expires_at = entry
        if time.monotonic() >= expires_at:
            del self.entries[slug]
            logger.debug(f"Cache expired for slug {slug}")
            return None
        return record

    async def set(self, slug: str, record: LinkRecord) -> None:
        """Cache a record, evicting the oldest entry when full."""
        self.entries.pop(slug, None)
        self.entries[slug] = (record, time.monotonic() + self.ttl)

        while len(self.entries) > self.max_size:
            oldest, _ = self.entries.popitem(last=False)
            logger.debug(f"Evicted slug {oldest} from cache")


class RedisCache:
    """Redis cache implementation."""

    def __init__(self, redis_url: str, ttl: int = 3600):
        """Initialize Redis cache.

        Args:
            redis_url: Redis connection URL.
            ttl: Time to live in seconds.
        """
        self.redis_url = redis_url
        self.ttl = ttl
        self.redis = None

    async def startup(self) -> None:
        """Initialize Redis connection."""
        try:
            self.redis = aioredis.from_url(self.redis_url, decode_responses=True)
            await self.redis.ping()
            logger.info("Redis cache connected")
        except RedisError as e:
            logger.warning(f"Redis connection failed: {e}. Cache disabled.")
            self.redis = None

    async def shutdown(self) -> None:
        """Close Redis connection."""
        if self.redis:
            await self.redis.aclose()

    async def get(self, slug: str) -> LinkRecord | None:
        """Get cached record.

        Returns:
            Cached record if found, None otherwise.
        """
        if not self.redis:
            return None

        try:
            data = await self.redis.get(cache_key(slug))
            return LinkRecord.model_validate(json.loads(data)) if data else None
        except (json.JSONDecodeError, PydanticValidationError, RedisError) as e:
            logger.debug(f"Cache get failed for slug {slug}: {e}")
            return None

    async def set(self, slug: str, record: LinkRecord) -> None:
        """Cache a record with the configured TTL."""
        if not self.redis:
            return

        try:
            await self.redis.setex(cache_key(slug), self.ttl, json.dumps(record.to_item()))
        except RedisError as e:
            logger.debug(f"Cache set failed for slug {slug}: {e}")


class NoOpCache:
    """No-op cache implementation when caching is disabled."""

    async def startup(self) -> None:
        """No initialization needed."""
        pass

    async def shutdown(self) -> None:
        """No cleanup needed."""
        pass

    async def get(self, slug: str) -> LinkRecord | None:
        """Always returns None (no caching)."""
        return None

    async def set(self, slug: str, record: LinkRecord) -> None:
        """Does nothing (no caching)."""
        pass
