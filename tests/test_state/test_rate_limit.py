"""Tests for fixed-window rate limiting."""

import pytest

from b2b_manager.state.rate_limit import RateLimit, RateLimiter
from b2b_manager.utils.errors import AppError, ErrorCode
from tests.conftest import InMemoryStateManager


@pytest.mark.asyncio
async def test_requests_within_limit_are_allowed() -> None:
    state = InMemoryStateManager()
    limiter = RateLimiter(state, RateLimit("api", max_requests=2, window_seconds=60))

    assert await limiter.is_allowed("shop-a")
    assert await limiter.is_allowed("shop-a")
    assert not await limiter.is_allowed("shop-a")
    assert await limiter.is_allowed("shop-b")
    assert state.ttls["rate_limit:api:shop-a"] == 60


@pytest.mark.asyncio
async def test_check_raises_with_retry_after() -> None:
    limiter = RateLimiter(
        InMemoryStateManager(), RateLimit("form", max_requests=1, window_seconds=300)
    )
    await limiter.check("127.0.0.1")

    with pytest.raises(AppError) as exc_info:
        await limiter.check("127.0.0.1")

    assert exc_info.value.status_code == 429
    assert exc_info.value.code == ErrorCode.RATE_LIMIT_EXCEEDED
    assert exc_info.value.details == {"retry_after": 300}
