"""Auto-tagging rule and customer metrics models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class CriteriaType(str, Enum):
    """Behavioral metric a rule thresholds against."""

    TOTAL_SPEND = "total_spend"
    ORDER_COUNT = "order_count"
    DAYS_SINCE_FIRST_ORDER = "days_since_first_order"
    AVERAGE_ORDER_VALUE = "average_order_value"


class AutoTaggingRule(BaseModel):
    """A merchant-defined tagging rule as read from the rule store.

    ``criteria_type`` is kept as a plain string: stored rows may carry
    values outside ``CriteriaType`` and evaluation must tolerate them.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    shop: str
    rule_name: str
    criteria_type: str
    criteria_value: float
    target_tag: str
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AutoTaggingRuleInput(BaseModel):
    """Raw rule fields submitted by the admin UI."""

    rule_name: str | None = None
    criteria_type: str | None = None
    criteria_value: float | str | None = None
    target_tag: str | None = None
    is_active: bool = True


class CustomerMetrics(BaseModel):
    """Snapshot of a customer's purchase behavior and current tags."""

    customer_id: str | None = None
    total_spent: float = 0.0
    orders_count: int = 0
    first_order_date: datetime | None = None
    average_order_value: float = 0.0
    existing_tags: list[str] = Field(default_factory=list)


class TaggingResult(BaseModel):
    """Outcome of tagging one customer."""

    customer_id: str | None
    new_tags: list[str] = Field(default_factory=list)
    applied: bool = False
    error: str | None = None


class BatchTaggingSummary(BaseModel):
    """Counts from a shop-wide tagging pass."""

    processed: int = 0
    tagged: int = 0
    failed: int = 0
