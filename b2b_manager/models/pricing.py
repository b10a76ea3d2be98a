"""Pricing rule models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DiscountType(str, Enum):
    """How a pricing rule reduces the price."""

    PERCENTAGE = "percentage"
    FIXED = "fixed"


class PricingRule(BaseModel):
    """Tag-based wholesale discount."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    shop: str
    customer_tags: list[str]
    product_ids: list[str] = Field(default_factory=list)
    collection_ids: list[str] = Field(default_factory=list)
    discount_type: DiscountType
    discount_value: float
    priority: int = 0
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PricingRuleInput(BaseModel):
    """Raw pricing rule fields submitted by the admin UI."""

    customer_tags: list[str] | str = Field(default_factory=list)
    product_ids: list[str | int] | str = Field(default_factory=list)
    collection_ids: list[str | int] | str = Field(default_factory=list)
    discount_type: str | None = None
    discount_value: float | str | None = None
    priority: int | str = 0
    is_active: bool = True
