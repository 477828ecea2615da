"""
Caching layer for base fares.
Keeps fares in process memory and, when configured, in Redis so several
workers share lookups.
"""

import logging
import time
from datetime import datetime
from typing import Any, Dict, Optional

import redis

from train_estimator.config import settings

logger = logging.getLogger(__name__)


class BaseFareCache:
    """
    Two-level cache for base fares:
    1. In-memory dict with TTL (process level)
    2. Redis (shared across processes, optional)
    """

    def __init__(self, redis_url: Optional[str] = None, ttl: int = 3600):
        """
        Initialize cache with optional Redis connection.

        Args:
            redis_url: Redis connection URL (e.g., redis://localhost:6379)
            ttl: Time to live in seconds (default 1 hour)
        """
        self.ttl = ttl
        self.redis_client = None

        self._memory_cache: Dict[str, Any] = {}
        self._cache_timestamps: Dict[str, float] = {}

        if redis_url:
            try:
                self.redis_client = redis.from_url(redis_url)
                self.redis_client.ping()
                logger.info("Redis fare cache initialized")
            except (redis.RedisError, ValueError) as e:
                logger.warning("Redis connection failed: %s. Using in-memory cache only.", e)
                self.redis_client = None

    @staticmethod
    def _make_key(from_city: str, to_city: str, when: datetime) -> str:
        """Cache key for a city pair on a departure day."""
        # Base fares are assumed constant over a departure day, whatever the time
        return f"fare:{from_city.strip().lower()}:{to_city.strip().lower()}:{when.date().isoformat()}"

    def _is_memory_cache_valid(self, key: str) -> bool:
        if key not in self._cache_timestamps:
            return False
        return (time.time() - self._cache_timestamps[key]) < self.ttl

    def get(self, from_city: str, to_city: str, when: datetime) -> Optional[float]:
        """
        Get a cached fare.

        Lookup order: in-memory, then Redis. Returns None on a miss.
        """
        key = self._make_key(from_city, to_city, when)

        if key in self._memory_cache and self._is_memory_cache_valid(key):
            return self._memory_cache[key]

        if self.redis_client:
            try:
                cached_value = self.redis_client.get(key)
                if cached_value:
                    fare = float(cached_value)
                    self._memory_cache[key] = fare
                    self._cache_timestamps[key] = time.time()
                    return fare
            except redis.RedisError as e:
                logger.warning("Redis get error: %s", e)

        return None

    def set(self, from_city: str, to_city: str, when: datetime, fare: float):
        """Store a fare in all cache levels."""
        key = self._make_key(from_city, to_city, when)

        self._memory_cache[key] = fare
        self._cache_timestamps[key] = time.time()

        if self.redis_client:
            try:
                self.redis_client.setex(key, self.ttl, str(fare))
            except redis.RedisError as e:
                logger.warning("Redis set error: %s", e)

    def invalidate(
        self,
        from_city: Optional[str] = None,
        to_city: Optional[str] = None,
        when: Optional[datetime] = None
    ):
        """
        Invalidate cache entries.

        With a city pair, drops that pair (for one day when ``when`` is
        given, otherwise for every day, in both directions). Without
        arguments, clears everything.
        """
        if from_city and to_city:
            if when is not None:
                patterns = [self._make_key(from_city, to_city, when)]
            else:
                a, b = from_city.strip().lower(), to_city.strip().lower()
                patterns = [f"fare:{a}:{b}:", f"fare:{b}:{a}:"]
        else:
            patterns = ["fare:"]

        for key in list(self._memory_cache):
            if any(key.startswith(pattern) for pattern in patterns):
                self._memory_cache.pop(key, None)
                self._cache_timestamps.pop(key, None)

        if self.redis_client:
            try:
                if from_city and to_city and when is not None:
                    self.redis_client.delete(patterns[0])
                else:
                    for pattern in patterns:
                        for key in self.redis_client.scan_iter(f"{pattern}*"):
                            self.redis_client.delete(key)
            except redis.RedisError as e:
                logger.warning("Redis delete error: %s", e)


class CachedPriceLookup:
    """Price lookup that serves base fares from a BaseFareCache when it can."""

    def __init__(self, inner, cache: BaseFareCache):
        self.inner = inner
        self.cache = cache

    async def get_price(self, from_city: str, to_city: str, when: datetime) -> Optional[float]:
        fare = self.cache.get(from_city, to_city, when)
        if fare is not None:
            return fare

        fare = await self.inner.get_price(from_city, to_city, when)
        # Never cache a failed lookup
        if isinstance(fare, (int, float)) and not isinstance(fare, bool) and fare > 0:
            self.cache.set(from_city, to_city, when, fare)
        return fare


# Global cache instance (singleton pattern)
_fare_cache: Optional[BaseFareCache] = None


def get_fare_cache() -> BaseFareCache:
    """Get singleton fare cache instance."""
    global _fare_cache
    if _fare_cache is None:
        _fare_cache = BaseFareCache(redis_url=settings.REDIS_URL, ttl=settings.FARE_CACHE_TTL)
    return _fare_cache
