"""Admin routes for auto-tagging rules."""

from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from b2b_manager.api.deps import (
    ShopifyClientFactory,
    get_rule_store,
    get_shop,
    get_shopify_factory,
    rate_limit,
)
from b2b_manager.db.base import get_db
from b2b_manager.models.tagging import (
    AutoTaggingRule,
    AutoTaggingRuleInput,
    BatchTaggingSummary,
    CustomerMetrics,
)
from b2b_manager.services.auto_tagging import AutoTaggingService
from b2b_manager.services.rule_store import CachedRuleStore
from b2b_manager.services.tagging_rules import AutoTaggingRuleService
from b2b_manager.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/auto-tagging", dependencies=[Depends(rate_limit("api"))])


class ToggleRequest(BaseModel):
    """Enable or disable a rule."""

    is_active: bool


class RuleResponse(BaseModel):
    success: bool = True
    auto_tagging_rule: AutoTaggingRule


class PreviewResponse(BaseModel):
    tags: list[str]


def get_rule_service(
    db: Session = Depends(get_db),
    rule_store: CachedRuleStore = Depends(get_rule_store),
) -> AutoTaggingRuleService:
    return AutoTaggingRuleService(db, rule_cache=rule_store)


@router.get("/rules")
async def list_rules(
    shop: str = Depends(get_shop),
    service: AutoTaggingRuleService = Depends(get_rule_service),
) -> dict[str, Any]:
    """List the shop's rules with human-readable descriptions."""
    rules = service.list_rules(shop)
    logger.debug("rules_fetched", shop=shop, count=len(rules))
    return {"auto_tagging_rules": rules}


@router.post("/rules", response_model=RuleResponse, status_code=status.HTTP_201_CREATED)
async def create_rule(
    request: AutoTaggingRuleInput,
    shop: str = Depends(get_shop),
    service: AutoTaggingRuleService = Depends(get_rule_service),
) -> RuleResponse:
    rule = await service.create_rule(shop, request)
    return RuleResponse(auto_tagging_rule=rule)


@router.put("/rules/{rule_id}", response_model=RuleResponse)
async def update_rule(
    rule_id: str,
    request: AutoTaggingRuleInput,
    shop: str = Depends(get_shop),
    service: AutoTaggingRuleService = Depends(get_rule_service),
) -> RuleResponse:
    rule = await service.update_rule(shop, rule_id, request)
    return RuleResponse(auto_tagging_rule=rule)


@router.post("/rules/{rule_id}/toggle", response_model=RuleResponse)
async def toggle_rule(
    rule_id: str,
    request: ToggleRequest,
    shop: str = Depends(get_shop),
    service: AutoTaggingRuleService = Depends(get_rule_service),
) -> RuleResponse:
    rule = await service.toggle_rule(shop, rule_id, request.is_active)
    return RuleResponse(auto_tagging_rule=rule)


@router.delete("/rules/{rule_id}")
async def delete_rule(
    rule_id: str,
    shop: str = Depends(get_shop),
    service: AutoTaggingRuleService = Depends(get_rule_service),
) -> dict[str, bool]:
    await service.delete_rule(shop, rule_id)
    return {"success": True}


@router.post("/preview", response_model=PreviewResponse)
async def preview_tags(
    metrics: CustomerMetrics,
    shop: str = Depends(get_shop),
    rule_store: CachedRuleStore = Depends(get_rule_store),
) -> PreviewResponse:
    """Show which tags a customer with these metrics would receive."""
    tags = await AutoTaggingService(rule_store).process_customer(shop, metrics)
    return PreviewResponse(tags=tags)


@router.post("/run", response_model=BatchTaggingSummary)
async def run_for_all_customers(
    shop: str = Depends(get_shop),
    rule_store: CachedRuleStore = Depends(get_rule_store),
    shopify_factory: ShopifyClientFactory = Depends(get_shopify_factory),
) -> BatchTaggingSummary:
    """Evaluate and tag every customer in the shop."""
    service = AutoTaggingService(rule_store)
    return await service.tag_all_customers(shop, shopify_factory(shop))
