"""Tests for the pricing rule admin routes."""

import pytest
from httpx import AsyncClient

PRICING_URL = "/api/v1/pricing-rules"


@pytest.mark.asyncio
async def test_create_list_and_quote(test_client: AsyncClient, admin_headers: dict) -> None:
    response = await test_client.post(
        PRICING_URL,
        json={
            "customer_tags": ["Wholesale"],
            "discount_type": "percentage",
            "discount_value": 20,
        },
        headers=admin_headers,
    )
    assert response.status_code == 201
    rule = response.json()["pricing_rule"]
    assert rule["customer_tags"] == ["wholesale"]

    response = await test_client.get(PRICING_URL, headers=admin_headers)
    assert [r["id"] for r in response.json()["pricing_rules"]] == [rule["id"]]

    response = await test_client.get(
        f"{PRICING_URL}/quote",
        params={"price": "49.99", "customer_tags": ["wholesale", "vip"]},
        headers=admin_headers,
    )
    quote = response.json()
    assert quote["rule"]["id"] == rule["id"]
    assert quote["original_price"] == "49.99"
    assert quote["discounted_price"] == "39.99"


@pytest.mark.asyncio
async def test_quote_without_matching_rule(test_client: AsyncClient, admin_headers: dict) -> None:
    response = await test_client.get(
        f"{PRICING_URL}/quote",
        params={"price": "10.00", "customer_tags": ["retail"]},
        headers=admin_headers,
    )

    assert response.json()["rule"] is None
    assert response.json()["discounted_price"] == "10.00"


@pytest.mark.asyncio
async def test_duplicate_pricing_rule(test_client: AsyncClient, admin_headers: dict) -> None:
    payload = {"customer_tags": ["wholesale"], "discount_type": "fixed", "discount_value": 5}
    await test_client.post(PRICING_URL, json=payload, headers=admin_headers)

    response = await test_client.post(PRICING_URL, json=payload, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["code"] == "DUPLICATE_RULE"


@pytest.mark.asyncio
async def test_toggle_and_delete(test_client: AsyncClient, admin_headers: dict) -> None:
    response = await test_client.post(
        PRICING_URL,
        json={"customer_tags": "[\"wholesale\"]", "discount_type": "fixed", "discount_value": "2.5"},
        headers=admin_headers,
    )
    rule_id = response.json()["pricing_rule"]["id"]

    response = await test_client.post(
        f"{PRICING_URL}/{rule_id}/toggle", json={"is_active": False}, headers=admin_headers
    )
    assert response.json()["pricing_rule"]["is_active"] is False

    response = await test_client.delete(f"{PRICING_URL}/{rule_id}", headers=admin_headers)
    assert response.json() == {"success": True}

    response = await test_client.put(
        f"{PRICING_URL}/{rule_id}",
        json={"customer_tags": ["wholesale"], "discount_type": "fixed", "discount_value": 3},
        headers=admin_headers,
    )
    assert response.status_code == 404
    assert response.json()["error"] == "Pricing rule not found"
