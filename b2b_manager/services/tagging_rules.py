"""Merchant management of auto-tagging rules."""

from typing import Any

from sqlalchemy.orm import Session

from b2b_manager.db.repositories import AutoTaggingRuleRepository
from b2b_manager.db.tables import AutoTaggingRuleRow
from b2b_manager.models.tagging import AutoTaggingRule, AutoTaggingRuleInput, CriteriaType
from b2b_manager.services.rule_store import CachedRuleStore
from b2b_manager.utils.errors import NotFoundError, ValidationError, validate_required
from b2b_manager.utils.logging import get_logger
from b2b_manager.utils.validation import (
    validate_criteria_value,
    validate_rule_name,
    validate_target_tag,
)

logger = get_logger(__name__)


def _format_number(value: float, grouping: bool = True) -> str:
    text = f"{value:,.2f}" if grouping else f"{value:.2f}"
    return text.rstrip("0").rstrip(".")


def describe_rule(rule: AutoTaggingRule) -> str:
    """Human-readable summary of a rule's criteria."""
    value = rule.criteria_value

    if rule.criteria_type == CriteriaType.TOTAL_SPEND.value:
        return f"Total spend ≥ ${_format_number(value)}"
    if rule.criteria_type == CriteriaType.ORDER_COUNT.value:
        return f"Order count ≥ {_format_number(value, grouping=False)}"
    if rule.criteria_type == CriteriaType.DAYS_SINCE_FIRST_ORDER.value:
        return f"Customer for ≥ {_format_number(value, grouping=False)} days"
    if rule.criteria_type == CriteriaType.AVERAGE_ORDER_VALUE.value:
        return f"Average order value ≥ ${_format_number(value)}"
    return "Unknown criteria"


def validate_rule_input(data: AutoTaggingRuleInput) -> dict[str, Any]:
    """Validate submitted fields and return column values."""
    validate_required(data.rule_name, "Rule name")
    validate_required(data.criteria_type, "Criteria type")
    validate_required(data.criteria_value, "Criteria value")
    validate_required(data.target_tag, "Target tag")

    try:
        criteria_type = CriteriaType(data.criteria_type)
    except ValueError:
        raise ValidationError(
            "Invalid criteria type",
            details={"allowed": [c.value for c in CriteriaType]},
        ) from None

    return {
        "rule_name": validate_rule_name(data.rule_name),
        "criteria_type": criteria_type.value,
        "criteria_value": validate_criteria_value(data.criteria_value, criteria_type.value),
        "target_tag": validate_target_tag(data.target_tag),
        "is_active": data.is_active,
    }


class AutoTaggingRuleService:
    """CRUD over a shop's tagging rules, keeping the rule cache coherent."""

    def __init__(self, db: Session, rule_cache: CachedRuleStore | None = None):
        self.repository = AutoTaggingRuleRepository(db)
        self.rule_cache = rule_cache

    async def _invalidate(self, shop: str) -> None:
        if self.rule_cache is not None:
            await self.rule_cache.invalidate(shop)

    def _get_or_404(self, shop: str, rule_id: str) -> AutoTaggingRuleRow:
        row = self.repository.get(shop, rule_id)
        if row is None:
            raise NotFoundError("Auto-tagging rule not found")
        return row

    def list_rules(self, shop: str) -> list[dict[str, Any]]:
        """All rules, newest first, each with a ``description``."""
        rules = [AutoTaggingRule.model_validate(row) for row in self.repository.list_for_shop(shop)]
        return [
            {**rule.model_dump(mode="json"), "description": describe_rule(rule)}
            for rule in rules
        ]

    async def create_rule(self, shop: str, data: AutoTaggingRuleInput) -> AutoTaggingRule:
        fields = validate_rule_input(data)
        fields["is_active"] = True
        row = self.repository.create(shop, **fields)
        await self._invalidate(shop)

        logger.info(
            "rule_created",
            shop=shop,
            rule_id=row.id,
            criteria_type=row.criteria_type,
            target_tag=row.target_tag,
        )
        return AutoTaggingRule.model_validate(row)

    async def update_rule(
        self, shop: str, rule_id: str, data: AutoTaggingRuleInput
    ) -> AutoTaggingRule:
        row = self._get_or_404(shop, rule_id)
        row = self.repository.update(row, **validate_rule_input(data))
        await self._invalidate(shop)

        logger.info("rule_updated", shop=shop, rule_id=rule_id)
        return AutoTaggingRule.model_validate(row)

    async def toggle_rule(self, shop: str, rule_id: str, is_active: bool) -> AutoTaggingRule:
        row = self._get_or_404(shop, rule_id)
        row = self.repository.update(row, is_active=is_active)
        await self._invalidate(shop)

        logger.info("rule_toggled", shop=shop, rule_id=rule_id, is_active=is_active)
        return AutoTaggingRule.model_validate(row)

    async def delete_rule(self, shop: str, rule_id: str) -> None:
        row = self._get_or_404(shop, rule_id)
        self.repository.delete(row)
        await self._invalidate(shop)

        logger.info("rule_deleted", shop=shop, rule_id=rule_id)
