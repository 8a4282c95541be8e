"""
RecipeShare Rate Limiter
Sliding window counters kept in Redis when configured, in process memory otherwise
"""

import time
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional
import redis.asyncio as redis
import structlog

from core.config import get_settings

settings = get_settings()
logger = structlog.get_logger()


@dataclass
class RateLimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_seconds: int


class RateLimiter:
    def __init__(self, redis_url: Optional[str] = None):
        self.redis_url = redis_url if redis_url is not None else settings.REDIS_URL
        self.redis_client: Optional[redis.Redis] = None
        self._memory_store: Dict[str, List[float]] = {}
        self._cleanup_interval = 300  # 5 minutes
        self._last_cleanup = time.time()

    async def _get_redis_client(self) -> Optional[redis.Redis]:
        """Get or create Redis client when a URL is configured"""
        if not self.redis_url:
            return None
        if self.redis_client is None:
            self.redis_client = redis.Redis.from_url(
                self.redis_url,
                decode_responses=True,
                retry_on_timeout=True,
                health_check_interval=30
            )
        return self.redis_client

    async def hit(self, key: str, max_requests: int, window_seconds: int) -> RateLimitResult:
        """
        Record one request against key and report whether it is within the limit

        Args:
            key: Counter identity, e.g. "global:<ip>"
            max_requests: Requests allowed per window
            window_seconds: Sliding window length

        Storage failures allow the request.
        """
        try:
            redis_client = await self._get_redis_client()
            if redis_client:
                return await self._hit_redis(redis_client, key, max_requests, window_seconds)
            return self._hit_memory(key, max_requests, window_seconds)

        except Exception as e:
            logger.warning("Rate limiting unavailable, allowing request", key=key, error=str(e))
            return RateLimitResult(True, max_requests, max_requests, window_seconds)

    async def _hit_redis(
        self,
        redis_client: redis.Redis,
        key: str,
        max_requests: int,
        window_seconds: int
    ) -> RateLimitResult:
        """Redis-based sliding window using a sorted set of request times"""
        full_key = f"rate_limit:{key}"
        now = time.time()
        window_start = now - window_seconds

        member = f"{now}:{uuid.uuid4().hex}"

        # Trim, add and count in one MULTI/EXEC so concurrent hits see each other
        pipe = redis_client.pipeline(transaction=True)
        pipe.zremrangebyscore(full_key, 0, window_start)
        pipe.zadd(full_key, {member: now})
        pipe.zcard(full_key)
        pipe.zrange(full_key, 0, 0, withscores=True)
        pipe.expire(full_key, window_seconds + 60)
        results = await pipe.execute()
        current_count = results[2]
        oldest = results[3][0][1] if results[3] else now

        reset_seconds = max(1, int(oldest + window_seconds - now))
        if current_count > max_requests:
            # Rejected hits do not occupy the window
            await redis_client.zrem(full_key, member)
            return RateLimitResult(False, max_requests, 0, reset_seconds)

        return RateLimitResult(True, max_requests, max_requests - current_count, reset_seconds)

    def _hit_memory(self, key: str, max_requests: int, window_seconds: int) -> RateLimitResult:
        """Memory-based sliding window"""
        self._cleanup_memory_store(window_seconds)

        now = time.time()
        window_start = now - window_seconds

        attempts = [t for t in self._memory_store.get(key, []) if t > window_start]
        self._memory_store[key] = attempts

        oldest = attempts[0] if attempts else now
        reset_seconds = max(1, int(oldest + window_seconds - now))

        if len(attempts) >= max_requests:
            return RateLimitResult(False, max_requests, 0, reset_seconds)

        attempts.append(now)
        return RateLimitResult(True, max_requests, max_requests - len(attempts), reset_seconds)

    def _cleanup_memory_store(self, window_seconds: int) -> None:
        """Drop keys with no attempts inside the window"""
        now = time.time()
        if now - self._last_cleanup < self._cleanup_interval:
            return

        cutoff = now - window_seconds
        stale = [key for key, attempts in self._memory_store.items() if not attempts or attempts[-1] <= cutoff]
        for key in stale:
            del self._memory_store[key]

        self._last_cleanup = now

    async def reset(self, key: Optional[str] = None) -> None:
        """Forget one key, or every key when none is given"""
        redis_client = await self._get_redis_client()
        if redis_client:
            if key:
                await redis_client.delete(f"rate_limit:{key}")
            return

        if key:
            self._memory_store.pop(key, None)
        else:
            self._memory_store.clear()

    async def close(self):
        """Close Redis connection"""
        if self.redis_client:
            await self.redis_client.aclose()
            self.redis_client = None


# Create singleton instance
rate_limiter = RateLimiter()
