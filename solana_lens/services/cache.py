"""Cache Service using Redis"""

import json
from typing import Optional, Any
import structlog
import redis.asyncio as redis

from solana_lens.utils.config import settings

logger = structlog.get_logger()


class CacheService:
    """
    Redis-based response cache

    Features:
    - Async operations
    - Automatic JSON serialization
    - TTL support

    Cache failures are logged and treated as misses so an
    unreachable Redis never breaks a request.
    """

    def __init__(self, url: Optional[str] = None):
        self.redis = redis.from_url(
            url or settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True
        )
        self.default_ttl = settings.CACHE_TTL_SECONDS

    async def get(self, key: str) -> Optional[Any]:
        """
        Get a value from cache

        Args:
            key: Cache key

        Returns:
            Cached value or None
        """
        try:
            value = await self.redis.get(key)
            if value:
                return json.loads(value)
            return None
        except Exception as e:
            logger.warning("cache_get_error", key=key, error=str(e))
            return None

    async def set(
        self,
        key: str,
        value: Any,
        ttl: Optional[int] = None
    ) -> bool:
        """
        Set a value in cache

        Args:
            key: Cache key
            value: Value to cache (will be JSON serialized)
            ttl: Time to live in seconds

        Returns:
            True if successful
        """
        try:
            serialized = json.dumps(value, default=str)
            await self.redis.set(
                key,
                serialized,
                ex=ttl or self.default_ttl
            )
            return True
        except Exception as e:
            logger.warning("cache_set_error", key=key, error=str(e))
            return False

    async def close(self):
        """Close Redis connection"""
        await self.redis.aclose()
