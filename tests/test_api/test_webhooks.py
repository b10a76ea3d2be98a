"""Tests for the orders/paid webhook."""

import json

import pytest
from httpx import AsyncClient

from b2b_manager.config import get_settings
from b2b_manager.models.tagging import CustomerMetrics
from b2b_manager.services.webhooks import compute_webhook_hmac
from tests.conftest import SHOP, StubShopifyClient

WEBHOOK_URL = "/webhooks/orders/paid"


def webhook_headers(body: bytes, topic: str = "orders/paid") -> dict[str, str]:
    return {
        "X-Shopify-Hmac-Sha256": compute_webhook_hmac(body, get_settings().shopify_api_secret),
        "X-Shopify-Topic": topic,
        "X-Shopify-Shop-Domain": SHOP,
        "Content-Type": "application/json",
    }


def order_body(customer_id: int | None = 1001) -> bytes:
    order = {"id": 5001, "total_price": "1200.00"}
    if customer_id is not None:
        order["customer"] = {"id": customer_id}
    return json.dumps(order).encode()


async def post_webhook(client: AsyncClient, body: bytes, **kwargs):
    return await client.post(WEBHOOK_URL, content=body, headers=webhook_headers(body, **kwargs))


@pytest.fixture
def gold_rule(admin_headers: dict, test_client: AsyncClient):
    async def create() -> None:
        response = await test_client.post(
            "/api/v1/auto-tagging/rules",
            json={
                "rule_name": "Gold customers",
                "criteria_type": "total_spend",
                "criteria_value": 1000,
                "target_tag": "gold",
            },
            headers=admin_headers,
        )
        assert response.status_code == 201

    return create


@pytest.mark.asyncio
async def test_invalid_signature_is_rejected(test_client: AsyncClient) -> None:
    body = order_body()
    headers = webhook_headers(body)
    headers["X-Shopify-Hmac-Sha256"] = "forged"

    response = await test_client.post(WEBHOOK_URL, content=body, headers=headers)

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_non_ascii_signature_is_rejected(test_client: AsyncClient) -> None:
    body = order_body()
    headers = webhook_headers(body)
    headers["X-Shopify-Hmac-Sha256"] = "ÿÿÿ".encode("latin-1")

    response = await test_client.post(WEBHOOK_URL, content=body, headers=headers)

    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [b"[]", b'"order"', b"1", b"{not json"])
async def test_payload_must_be_a_json_object(test_client: AsyncClient, body: bytes) -> None:
    response = await post_webhook(test_client, body)

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid payload"}


@pytest.mark.asyncio
async def test_wrong_topic_is_rejected(test_client: AsyncClient) -> None:
    response = await post_webhook(test_client, order_body(), topic="orders/create")

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid topic"}


@pytest.mark.asyncio
async def test_guest_checkout_is_acknowledged(
    test_client: AsyncClient, shopify: StubShopifyClient
) -> None:
    response = await post_webhook(test_client, order_body(customer_id=None))

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "No customer to process"}
    assert shopify.tag_calls == []


@pytest.mark.asyncio
async def test_unknown_customer(test_client: AsyncClient) -> None:
    response = await post_webhook(test_client, order_body(customer_id=404))

    assert response.status_code == 404
    assert response.json()["error"] == "Customer not found"


@pytest.mark.asyncio
async def test_paid_order_tags_customer(
    test_client: AsyncClient, shopify: StubShopifyClient, gold_rule
) -> None:
    await gold_rule()
    shopify.customers["1001"] = CustomerMetrics(
        customer_id="1001", total_spent=1200, orders_count=1, existing_tags=["newsletter"]
    )

    response = await post_webhook(test_client, order_body())

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "Applied tags: gold",
        "tags": ["gold"],
    }
    assert shopify.tag_calls == [("1001", ["gold"])]


@pytest.mark.asyncio
async def test_repeat_delivery_applies_nothing(
    test_client: AsyncClient, shopify: StubShopifyClient, gold_rule
) -> None:
    await gold_rule()
    shopify.customers["1001"] = CustomerMetrics(
        customer_id="1001", total_spent=1200, existing_tags=["gold"]
    )

    response = await post_webhook(test_client, order_body())

    assert response.json() == {"success": True, "message": "No new tags to apply"}
    assert shopify.tag_calls == []


@pytest.mark.asyncio
async def test_tag_write_failure_returns_500(
    test_client: AsyncClient, shopify: StubShopifyClient, gold_rule
) -> None:
    await gold_rule()
    shopify.fail_tagging = True
    shopify.customers["1001"] = CustomerMetrics(customer_id="1001", total_spent=1200)

    response = await post_webhook(test_client, order_body())

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Failed to apply tags to customer"}
