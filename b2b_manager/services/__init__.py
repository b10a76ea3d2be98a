"""Domain services."""

from b2b_manager.services.applications import WholesaleApplicationService
from b2b_manager.services.auto_tagging import AutoTaggingService, evaluate_rule
from b2b_manager.services.pricing import PricingRuleService, apply_discount
from b2b_manager.services.rule_store import CachedRuleStore, DatabaseRuleStore, RuleStore
from b2b_manager.services.shopify_client import ShopifyClient
from b2b_manager.services.tagging_rules import AutoTaggingRuleService, describe_rule

__all__ = [
    "AutoTaggingService",
    "evaluate_rule",
    "AutoTaggingRuleService",
    "describe_rule",
    "PricingRuleService",
    "apply_discount",
    "WholesaleApplicationService",
    "RuleStore",
    "DatabaseRuleStore",
    "CachedRuleStore",
    "ShopifyClient",
]
