"""Admin routes for wholesale pricing rules."""

from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from b2b_manager.api.auto_tagging import ToggleRequest
from b2b_manager.api.deps import get_shop, rate_limit
from b2b_manager.db.base import get_db
from b2b_manager.models.pricing import PricingRule, PricingRuleInput
from b2b_manager.services.pricing import PricingRuleService, apply_discount

router = APIRouter(prefix="/pricing-rules", dependencies=[Depends(rate_limit("api"))])


class PricingRuleResponse(BaseModel):
    success: bool = True
    pricing_rule: PricingRule


class QuoteResponse(BaseModel):
    """Price a wholesale customer would pay for one unit."""

    rule: PricingRule | None
    original_price: Decimal
    discounted_price: Decimal


def get_pricing_service(db: Session = Depends(get_db)) -> PricingRuleService:
    return PricingRuleService(db)


@router.get("")
async def list_pricing_rules(
    shop: str = Depends(get_shop),
    service: PricingRuleService = Depends(get_pricing_service),
) -> dict[str, Any]:
    """List the shop's pricing rules, highest priority first."""
    return {"pricing_rules": service.list_rules(shop)}


@router.post("", response_model=PricingRuleResponse, status_code=status.HTTP_201_CREATED)
async def create_pricing_rule(
    request: PricingRuleInput,
    shop: str = Depends(get_shop),
    service: PricingRuleService = Depends(get_pricing_service),
) -> PricingRuleResponse:
    return PricingRuleResponse(pricing_rule=service.create_rule(shop, request))


@router.put("/{rule_id}", response_model=PricingRuleResponse)
async def update_pricing_rule(
    rule_id: str,
    request: PricingRuleInput,
    shop: str = Depends(get_shop),
    service: PricingRuleService = Depends(get_pricing_service),
) -> PricingRuleResponse:
    return PricingRuleResponse(pricing_rule=service.update_rule(shop, rule_id, request))


@router.post("/{rule_id}/toggle", response_model=PricingRuleResponse)
async def toggle_pricing_rule(
    rule_id: str,
    request: ToggleRequest,
    shop: str = Depends(get_shop),
    service: PricingRuleService = Depends(get_pricing_service),
) -> PricingRuleResponse:
    rule = service.toggle_rule(shop, rule_id, request.is_active)
    return PricingRuleResponse(pricing_rule=rule)


@router.delete("/{rule_id}")
async def delete_pricing_rule(
    rule_id: str,
    shop: str = Depends(get_shop),
    service: PricingRuleService = Depends(get_pricing_service),
) -> dict[str, bool]:
    service.delete_rule(shop, rule_id)
    return {"success": True}


@router.get("/quote", response_model=QuoteResponse)
async def quote_price(
    price: Decimal = Query(..., ge=0),
    customer_tags: list[str] = Query(default=[]),
    product_id: str | None = None,
    collection_ids: list[str] = Query(default=[]),
    shop: str = Depends(get_shop),
    service: PricingRuleService = Depends(get_pricing_service),
) -> QuoteResponse:
    """Apply the best matching rule to a unit price."""
    rule = service.find_applicable_rule(shop, customer_tags, product_id, collection_ids)
    discounted = apply_discount(price, rule) if rule else price
    return QuoteResponse(rule=rule, original_price=price, discounted_price=discounted)
