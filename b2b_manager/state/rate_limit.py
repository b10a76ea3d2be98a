"""Fixed-window rate limiting over the shared state store."""

from dataclasses import dataclass

from b2b_manager.state.manager import StateManager
from b2b_manager.utils.errors import AppError, ErrorCode
from b2b_manager.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RateLimit:
    """At most ``max_requests`` per ``window_seconds`` for one identity."""

    scope: str
    max_requests: int
    window_seconds: int


class RateLimiter:
    """Counts requests per identity in fixed windows."""

    def __init__(self, state: StateManager, limit: RateLimit):
        self.state = state
        self.limit = limit

    def _key(self, identifier: str) -> str:
        return f"rate_limit:{self.limit.scope}:{identifier}"

    async def is_allowed(self, identifier: str) -> bool:
        """Record a request and report whether it is within the limit."""
        key = self._key(identifier)
        count = await self.state.increment(key)

        # First hit opens the window
        if count == 1:
            await self.state.expire(key, self.limit.window_seconds)

        return count <= self.limit.max_requests

    async def check(self, identifier: str) -> None:
        """Raise ``RATE_LIMIT_EXCEEDED`` when the identity is over its limit."""
        if await self.is_allowed(identifier):
            return

        retry_after = await self.state.ttl(self._key(identifier))
        logger.warning(
            "rate_limit_exceeded",
            scope=self.limit.scope,
            identifier=identifier,
            retry_after=retry_after,
        )
        raise AppError(
            "Rate limit exceeded. Please try again later.",
            ErrorCode.RATE_LIMIT_EXCEEDED,
            429,
            details={"retry_after": max(retry_after, 0)},
        )
