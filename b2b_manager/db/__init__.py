"""Relational persistence."""

from b2b_manager.db.base import Base, SessionLocal, get_db, init_db
from b2b_manager.db.repositories import (
    AutoTaggingRuleRepository,
    PricingRuleRepository,
    WholesaleApplicationRepository,
)

__all__ = [
    "Base",
    "SessionLocal",
    "get_db",
    "init_db",
    "AutoTaggingRuleRepository",
    "PricingRuleRepository",
    "WholesaleApplicationRepository",
]
