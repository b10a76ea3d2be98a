"""Data models for the B2B wholesale manager."""

from b2b_manager.models.application import (
    ApplicationStatus,
    WholesaleApplication,
    WholesaleApplicationForm,
)
from b2b_manager.models.pricing import DiscountType, PricingRule, PricingRuleInput
from b2b_manager.models.tagging import (
    AutoTaggingRule,
    AutoTaggingRuleInput,
    BatchTaggingSummary,
    CriteriaType,
    CustomerMetrics,
    TaggingResult,
)

__all__ = [
    # Tagging
    "AutoTaggingRule",
    "AutoTaggingRuleInput",
    "BatchTaggingSummary",
    "CriteriaType",
    "CustomerMetrics",
    "TaggingResult",
    # Pricing
    "DiscountType",
    "PricingRule",
    "PricingRuleInput",
    # Applications
    "ApplicationStatus",
    "WholesaleApplication",
    "WholesaleApplicationForm",
]
