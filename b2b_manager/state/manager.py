"""Redis-backed state for caches and rate-limit counters."""

import json
from typing import Any

import redis.asyncio as redis

from b2b_manager.config import get_settings
from b2b_manager.utils.logging import get_logger

logger = get_logger(__name__)


class StateManager:
    """Shared short-lived state kept in Redis."""

    def __init__(self) -> None:
        settings = get_settings()
        self.redis_client: redis.Redis | None = None
        self.redis_url = settings.redis_url

    async def connect(self) -> None:
        """Establish Redis connection."""
        if self.redis_client is None:
            self.redis_client = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            logger.info("redis_connected", url=self.redis_url)

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()
            self.redis_client = None
            logger.info("redis_disconnected")

    async def set(
        self,
        key: str,
        value: Any,
        ttl: int | None = None,
    ) -> None:
        """Set a value in Redis with optional TTL."""
        if not self.redis_client:
            await self.connect()

        # Serialize complex objects to JSON
        if isinstance(value, (dict, list)):
            value = json.dumps(value)

        await self.redis_client.set(key, value, ex=ttl)

        logger.debug("state_set", key=key, ttl=ttl)

    async def get(self, key: str) -> Any:
        """Get a value from Redis."""
        if not self.redis_client:
            await self.connect()

        value = await self.redis_client.get(key)

        if value:
            # Try to deserialize JSON
            try:
                return json.loads(value)
            except (json.JSONDecodeError, TypeError):
                return value

        return None

    async def delete(self, key: str) -> None:
        """Delete a key from Redis."""
        if not self.redis_client:
            await self.connect()

        await self.redis_client.delete(key)
        logger.debug("state_deleted", key=key)

    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern."""
        if not self.redis_client:
            await self.connect()

        deleted = 0
        async for key in self.redis_client.scan_iter(match=pattern):
            deleted += await self.redis_client.delete(key)

        logger.info("state_pattern_deleted", pattern=pattern, deleted=deleted)
        return deleted

    async def increment(self, key: str, amount: int = 1) -> int:
        """Increment a counter."""
        if not self.redis_client:
            await self.connect()

        return await self.redis_client.incrby(key, amount)

    async def expire(self, key: str, ttl: int) -> None:
        """Set a key's time to live in seconds."""
        if not self.redis_client:
            await self.connect()

        await self.redis_client.expire(key, ttl)

    async def ttl(self, key: str) -> int:
        """Seconds until a key expires (negative if none)."""
        if not self.redis_client:
            await self.connect()

        return await self.redis_client.ttl(key)


# Global state manager instance
_state_manager: StateManager | None = None


async def get_state_manager() -> StateManager:
    """Get the global state manager instance."""
    global _state_manager
    if _state_manager is None:
        _state_manager = StateManager()
        await _state_manager.connect()
    return _state_manager
