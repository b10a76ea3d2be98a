"""Shopify webhook receivers."""

import json
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse

from b2b_manager.api.deps import (
    ShopifyClientFactory,
    get_rule_store,
    get_shopify_factory,
    rate_limit,
)
from b2b_manager.services.auto_tagging import AutoTaggingService
from b2b_manager.services.rule_store import CachedRuleStore
from b2b_manager.services.webhooks import verify_webhook
from b2b_manager.utils.logging import get_logger
from b2b_manager.utils.tracing import WebhookTracer
from b2b_manager.utils.validation import validate_shop_domain

logger = get_logger(__name__)

router = APIRouter(prefix="/webhooks", dependencies=[Depends(rate_limit("webhook"))])

ORDERS_PAID = "orders/paid"


@router.post("/orders/paid")
async def orders_paid(
    request: Request,
    rule_store: CachedRuleStore = Depends(get_rule_store),
    shopify_factory: ShopifyClientFactory = Depends(get_shopify_factory),
) -> Any:
    """Tag the paying customer according to the shop's auto-tagging rules."""
    body = await request.body()
    if not verify_webhook(body, request.headers.get("X-Shopify-Hmac-Sha256")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid webhook signature",
        )

    topic = request.headers.get("X-Shopify-Topic")
    if topic != ORDERS_PAID:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": "Invalid topic"},
        )

    shop = validate_shop_domain(request.headers.get("X-Shopify-Shop-Domain"))

    try:
        order = json.loads(body)
    except ValueError:
        order = None

    if not isinstance(order, dict):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": "Invalid payload"},
        )

    customer_id = (order.get("customer") or {}).get("id")
    if not customer_id:
        # Guest checkout
        return {"success": True, "message": "No customer to process"}

    tracer = WebhookTracer(topic, shop)
    shopify = shopify_factory(shop)

    with tracer.trace_step("fetch_customer", customer_id=str(customer_id)):
        metrics = await shopify.get_customer_metrics(customer_id)

    if metrics is None:
        logger.warning("webhook_customer_not_found", shop=shop, customer_id=str(customer_id))
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"success": False, "error": "Customer not found"},
        )

    with tracer.trace_step("tag_customer"):
        result = await AutoTaggingService(rule_store).tag_customer(shop, metrics, shopify)

    logger.info("webhook_processed", order_id=order.get("id"), **tracer.get_trace_summary())

    if result.error:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": "Failed to apply tags to customer"},
        )

    if result.applied:
        return {
            "success": True,
            "message": f"Applied tags: {', '.join(result.new_tags)}",
            "tags": result.new_tags,
        }

    return {"success": True, "message": "No new tags to apply"}
