"""Tests for the Shopify Admin GraphQL client."""

import json

import httpx
import pytest

from b2b_manager.services.shopify_client import ShopifyClient, customer_gid, parse_customer
from b2b_manager.utils.errors import ShopifyAPIError
from tests.conftest import SHOP


def customer_node(customer_id: int, spent: str, orders: int, tags: list[str]) -> dict:
    return {
        "id": f"gid://shopify/Customer/{customer_id}",
        "tags": tags,
        "numberOfOrders": orders,
        "amountSpent": {"amount": spent},
        "orders": {"edges": [{"node": {"createdAt": "2023-01-15T10:00:00Z"}}]},
    }


def client_for(handler) -> ShopifyClient:
    return ShopifyClient(SHOP, "shpat_test", transport=httpx.MockTransport(handler))


def test_customer_gid() -> None:
    assert customer_gid(42) == "gid://shopify/Customer/42"
    assert customer_gid("gid://shopify/Customer/42") == "gid://shopify/Customer/42"


def test_parse_customer_derives_metrics() -> None:
    metrics = parse_customer(customer_node(42, "1000.00", 3, ["vip"]))

    assert metrics.customer_id == "42"
    assert metrics.total_spent == 1000.0
    assert metrics.orders_count == 3
    assert metrics.average_order_value == 333.33
    assert metrics.first_order_date.year == 2023
    assert metrics.first_order_date.tzinfo is not None
    assert metrics.existing_tags == ["vip"]


def test_parse_customer_without_orders() -> None:
    node = {"id": "gid://shopify/Customer/7", "numberOfOrders": "0", "orders": {"edges": []}}

    metrics = parse_customer(node)

    assert metrics.average_order_value == 0.0
    assert metrics.first_order_date is None
    assert metrics.existing_tags == []


@pytest.mark.asyncio
async def test_get_customer_metrics_sends_token_and_gid() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            200, json={"data": {"customer": customer_node(42, "250.00", 1, [])}}
        )

    metrics = await client_for(handler).get_customer_metrics(42)

    assert metrics.total_spent == 250.0
    assert requests[0].headers["X-Shopify-Access-Token"] == "shpat_test"
    assert str(requests[0].url).endswith("/admin/api/2024-10/graphql.json")
    assert json.loads(requests[0].content)["variables"] == {"id": "gid://shopify/Customer/42"}


@pytest.mark.asyncio
async def test_get_customer_metrics_unknown_customer() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": {"customer": None}})

    assert await client_for(handler).get_customer_metrics(42) is None


@pytest.mark.asyncio
async def test_iter_customers_follows_cursors() -> None:
    pages = {
        None: {
            "edges": [{"node": customer_node(1, "10.00", 1, [])}],
            "pageInfo": {"hasNextPage": True, "endCursor": "cursor-1"},
        },
        "cursor-1": {
            "edges": [{"node": customer_node(2, "20.00", 2, [])}],
            "pageInfo": {"hasNextPage": False, "endCursor": "cursor-2"},
        },
    }

    def handler(request: httpx.Request) -> httpx.Response:
        variables = json.loads(request.content)["variables"]
        return httpx.Response(200, json={"data": {"customers": pages[variables.get("after")]}})

    customers = [m async for m in client_for(handler).iter_customers(page_size=1)]

    assert [m.customer_id for m in customers] == ["1", "2"]


@pytest.mark.asyncio
async def test_add_customer_tags_raises_on_user_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "data": {
                    "tagsAdd": {
                        "node": None,
                        "userErrors": [{"field": ["id"], "message": "Customer not found"}],
                    }
                }
            },
        )

    with pytest.raises(ShopifyAPIError) as exc_info:
        await client_for(handler).add_customer_tags(42, ["gold"])

    assert exc_info.value.status_code == 400
    assert exc_info.value.details[0]["message"] == "Customer not found"


@pytest.mark.asyncio
async def test_client_errors_are_not_retried() -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(403, text="Forbidden")

    with pytest.raises(ShopifyAPIError, match="Shopify returned 403"):
        await client_for(handler).get_customer_metrics(42)

    assert len(calls) == 1
