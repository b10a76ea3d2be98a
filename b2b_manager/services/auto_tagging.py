"""Customer auto-tagging: rule evaluation and tag orchestration.

A rule matches when the customer's metric for the rule's criteria type is
at least the rule's threshold. The orchestrator evaluates a shop's active
rules in creation order and returns the target tags the customer does not
already carry. Writing those tags to Shopify is a separate step.
"""

import time
from datetime import datetime, timezone
from typing import Callable

from b2b_manager.models.tagging import (
    AutoTaggingRule,
    BatchTaggingSummary,
    CriteriaType,
    CustomerMetrics,
    TaggingResult,
)
from b2b_manager.services.rule_store import RuleStore
from b2b_manager.services.shopify_client import ShopifyClient
from b2b_manager.utils.errors import AppError
from b2b_manager.utils.logging import TaggingLogger, get_logger

logger = get_logger(__name__)


def days_since_first_order(metrics: CustomerMetrics, now: datetime) -> int | None:
    """Whole days from the first order to ``now``; None without a first order."""
    first_order = metrics.first_order_date
    if first_order is None:
        return None
    if first_order.tzinfo is None:
        first_order = first_order.replace(tzinfo=timezone.utc)
    return (now - first_order).days


_METRIC_GETTERS: dict[CriteriaType, Callable[[CustomerMetrics, datetime], float | None]] = {
    CriteriaType.TOTAL_SPEND: lambda m, now: m.total_spent,
    CriteriaType.ORDER_COUNT: lambda m, now: m.orders_count,
    CriteriaType.DAYS_SINCE_FIRST_ORDER: days_since_first_order,
    CriteriaType.AVERAGE_ORDER_VALUE: lambda m, now: m.average_order_value,
}


def evaluate_rule(
    rule: AutoTaggingRule,
    metrics: CustomerMetrics,
    now: datetime | None = None,
) -> bool:
    """Return True if ``metrics`` meets the rule's threshold.

    Unknown criteria types never match and are logged as warnings.
    """
    try:
        criteria = CriteriaType(rule.criteria_type)
    except ValueError:
        logger.warning(
            "unknown_criteria_type",
            rule_id=rule.id,
            shop=rule.shop,
            criteria_type=rule.criteria_type,
        )
        return False

    value = _METRIC_GETTERS[criteria](metrics, now or datetime.now(timezone.utc))
    if value is None:
        return False
    return value >= rule.criteria_value


class AutoTaggingService:
    """Decides and applies behavior-based customer tags."""

    def __init__(self, rule_store: RuleStore):
        self.rule_store = rule_store

    async def process_customer(self, shop: str, metrics: CustomerMetrics) -> list[str]:
        """Return the new tags earned by the customer, in rule order.

        Tags the customer already holds and repeats from later rules are
        skipped. Held tags are compared case-insensitively because Shopify
        treats "Gold" and "gold" as the same tag. Rule store failures
        propagate.
        """
        rules = await self.rule_store.get_active_rules(shop)
        now = datetime.now(timezone.utc)

        held = {tag.lower() for tag in metrics.existing_tags}
        new_tags: list[str] = []

        for rule in rules:
            if not evaluate_rule(rule, metrics, now):
                continue
            if rule.target_tag.lower() in held:
                continue
            held.add(rule.target_tag.lower())
            new_tags.append(rule.target_tag)

        TaggingLogger(shop).log_evaluation(
            customer_id=metrics.customer_id,
            rules_evaluated=len(rules),
            new_tags=new_tags,
        )
        return new_tags

    async def tag_customer(
        self,
        shop: str,
        metrics: CustomerMetrics,
        shopify: ShopifyClient,
    ) -> TaggingResult:
        """Evaluate a customer and write any new tags to Shopify.

        A failed write is reported in the result, not raised.
        """
        new_tags = await self.process_customer(shop, metrics)
        result = TaggingResult(customer_id=metrics.customer_id, new_tags=new_tags)
        if not new_tags:
            return result

        tagging_logger = TaggingLogger(shop)
        start_time = time.time()
        try:
            await shopify.add_customer_tags(metrics.customer_id, new_tags)
        except AppError as e:
            tagging_logger.log_error(
                error=e.message,
                customer_id=metrics.customer_id,
                tags=new_tags,
                details=e.details,
            )
            result.error = e.message
            return result

        tagging_logger.log_tags_applied(
            customer_id=metrics.customer_id,
            tags=new_tags,
            duration_ms=(time.time() - start_time) * 1000,
        )
        result.applied = True
        return result

    async def tag_all_customers(
        self, shop: str, shopify: ShopifyClient
    ) -> BatchTaggingSummary:
        """Run tagging over every customer in the shop."""
        summary = BatchTaggingSummary()

        logger.info("batch_tagging_started", shop=shop)
        async for metrics in shopify.iter_customers():
            result = await self.tag_customer(shop, metrics, shopify)
            summary.processed += 1
            if result.applied:
                summary.tagged += 1
            elif result.error:
                summary.failed += 1

        logger.info("batch_tagging_finished", shop=shop, **summary.model_dump())
        return summary
