"""Tests for error types and retries."""

import pytest

from b2b_manager.utils.errors import AppError, ErrorCode, ShopifyAPIError, with_retry


def test_error_response_body() -> None:
    error = AppError("Too many", ErrorCode.RATE_LIMIT_EXCEEDED, 429, {"retry_after": 30})

    assert error.to_response() == {
        "success": False,
        "error": "Too many",
        "code": "RATE_LIMIT_EXCEEDED",
        "details": {"retry_after": 30},
    }


@pytest.mark.asyncio
async def test_with_retry_recovers_from_server_errors() -> None:
    attempts = []

    async def flaky() -> str:
        attempts.append(1)
        if len(attempts) < 3:
            raise ShopifyAPIError("Shopify returned 503")
        return "ok"

    assert await with_retry(flaky, max_retries=3, delay=0) == "ok"
    assert len(attempts) == 3


@pytest.mark.asyncio
async def test_with_retry_gives_up_after_max_retries() -> None:
    attempts = []

    async def failing() -> None:
        attempts.append(1)
        raise ConnectionError("down")

    with pytest.raises(ConnectionError):
        await with_retry(failing, max_retries=2, delay=0)

    assert len(attempts) == 2


@pytest.mark.asyncio
async def test_with_retry_does_not_retry_client_errors() -> None:
    attempts = []

    async def rejected() -> None:
        attempts.append(1)
        raise ShopifyAPIError("bad request", status_code=400)

    with pytest.raises(ShopifyAPIError):
        await with_retry(rejected, max_retries=3, delay=0)

    assert len(attempts) == 1


@pytest.mark.asyncio
async def test_with_retry_runs_once_when_retries_disabled() -> None:
    attempts = []

    async def operation() -> str:
        attempts.append(1)
        return "ok"

    assert await with_retry(operation, max_retries=0, delay=0) == "ok"
    assert len(attempts) == 1
