"""Tag-based wholesale pricing rules."""

import json
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy.orm import Session

from b2b_manager.db.repositories import PricingRuleRepository
from b2b_manager.db.tables import PricingRuleRow
from b2b_manager.models.pricing import DiscountType, PricingRule, PricingRuleInput
from b2b_manager.utils.errors import (
    AppError,
    ErrorCode,
    NotFoundError,
    ValidationError,
    validate_required,
)
from b2b_manager.utils.logging import get_logger
from b2b_manager.utils.validation import (
    validate_customer_tags,
    validate_discount_value,
    validate_ids,
    validate_priority,
)

logger = get_logger(__name__)

CENT = Decimal("0.01")


def _as_list(value: Any) -> Any:
    """Form posts send lists as JSON strings."""
    if isinstance(value, str):
        if not value.strip():
            return []
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            raise ValidationError("Invalid JSON list") from None
    return value


def validate_pricing_input(data: PricingRuleInput) -> dict[str, Any]:
    """Validate submitted fields and return column values."""
    validate_required(data.discount_type, "Discount type")
    validate_required(data.discount_value, "Discount value")

    try:
        discount_type = DiscountType(data.discount_type)
    except ValueError:
        raise AppError(
            "Discount type must be 'percentage' or 'fixed'",
            ErrorCode.INVALID_DISCOUNT_VALUE,
            400,
        ) from None

    return {
        "customer_tags": validate_customer_tags(_as_list(data.customer_tags)),
        "product_ids": validate_ids(_as_list(data.product_ids)),
        "collection_ids": validate_ids(_as_list(data.collection_ids)),
        "discount_type": discount_type.value,
        "discount_value": validate_discount_value(data.discount_value, discount_type.value),
        "priority": validate_priority(data.priority),
        "is_active": data.is_active,
    }


def rule_applies(
    rule: PricingRule,
    customer_tags: list[str],
    product_id: str | None = None,
    collection_ids: list[str] | None = None,
) -> bool:
    """Whether a rule covers this customer and product."""
    if not rule.is_active:
        return False

    tags = {tag.lower() for tag in customer_tags}
    if not tags.intersection(rule.customer_tags):
        return False

    # A rule without product or collection targets covers the whole catalog
    if not rule.product_ids and not rule.collection_ids:
        return True
    if product_id is not None and product_id in rule.product_ids:
        return True
    return bool(set(collection_ids or []).intersection(rule.collection_ids))


def apply_discount(price: Decimal | float | str, rule: PricingRule) -> Decimal:
    """Discounted unit price, never below zero, rounded to cents."""
    price = Decimal(str(price))
    value = Decimal(str(rule.discount_value))

    if rule.discount_type == DiscountType.PERCENTAGE:
        discounted = price * (Decimal(100) - value) / Decimal(100)
    else:
        discounted = price - value

    return max(discounted, Decimal(0)).quantize(CENT, rounding=ROUND_HALF_UP)


class PricingRuleService:
    """CRUD and lookup over a shop's pricing rules."""

    def __init__(self, db: Session):
        self.repository = PricingRuleRepository(db)

    def _get_or_404(self, shop: str, rule_id: str) -> PricingRuleRow:
        row = self.repository.get(shop, rule_id)
        if row is None:
            raise NotFoundError("Pricing rule not found")
        return row

    def _check_duplicate(
        self, shop: str, fields: dict[str, Any], exclude_id: str | None = None
    ) -> None:
        signature = (
            "customer_tags",
            "product_ids",
            "collection_ids",
            "discount_type",
            "discount_value",
        )
        for row in self.repository.list_for_shop(shop):
            if row.id == exclude_id:
                continue
            if all(getattr(row, key) == fields[key] for key in signature):
                raise AppError(
                    "A pricing rule with these exact settings already exists",
                    ErrorCode.DUPLICATE_RULE,
                    400,
                )

    def list_rules(self, shop: str) -> list[PricingRule]:
        return [PricingRule.model_validate(row) for row in self.repository.list_for_shop(shop)]

    def create_rule(self, shop: str, data: PricingRuleInput) -> PricingRule:
        fields = validate_pricing_input(data)
        self._check_duplicate(shop, fields)
        row = self.repository.create(shop, **fields)

        logger.info(
            "pricing_rule_created",
            shop=shop,
            rule_id=row.id,
            discount_type=row.discount_type,
            discount_value=row.discount_value,
        )
        return PricingRule.model_validate(row)

    def update_rule(self, shop: str, rule_id: str, data: PricingRuleInput) -> PricingRule:
        row = self._get_or_404(shop, rule_id)
        fields = validate_pricing_input(data)
        self._check_duplicate(shop, fields, exclude_id=rule_id)
        row = self.repository.update(row, **fields)

        logger.info("pricing_rule_updated", shop=shop, rule_id=rule_id)
        return PricingRule.model_validate(row)

    def toggle_rule(self, shop: str, rule_id: str, is_active: bool) -> PricingRule:
        row = self.repository.update(self._get_or_404(shop, rule_id), is_active=is_active)
        logger.info("pricing_rule_toggled", shop=shop, rule_id=rule_id, is_active=is_active)
        return PricingRule.model_validate(row)

    def delete_rule(self, shop: str, rule_id: str) -> None:
        self.repository.delete(self._get_or_404(shop, rule_id))
        logger.info("pricing_rule_deleted", shop=shop, rule_id=rule_id)

    def find_applicable_rule(
        self,
        shop: str,
        customer_tags: list[str],
        product_id: str | None = None,
        collection_ids: list[str] | None = None,
    ) -> PricingRule | None:
        """Highest-priority active rule covering the customer and product."""
        for row in self.repository.list_for_shop(shop, active_only=True):
            rule = PricingRule.model_validate(row)
            if rule_applies(rule, customer_tags, product_id, collection_ids):
                return rule
        return None
