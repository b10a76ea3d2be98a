"""
ORM tables for rules and wholesale applications.
All rows are scoped by ``shop``.
"""
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String

from b2b_manager.db.base import Base


def _uuid() -> str:
    return str(uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PricingRuleRow(Base):
    __tablename__ = "pricing_rules"

    id = Column(String(36), primary_key=True, default=_uuid)
    shop = Column(String, nullable=False, index=True)
    customer_tags = Column(JSON, nullable=False)
    product_ids = Column(JSON, nullable=False, default=list)
    collection_ids = Column(JSON, nullable=False, default=list)
    discount_type = Column(String, nullable=False)  # percentage, fixed
    discount_value = Column(Float, nullable=False)
    priority = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)


class AutoTaggingRuleRow(Base):
    __tablename__ = "auto_tagging_rules"

    id = Column(String(36), primary_key=True, default=_uuid)
    shop = Column(String, nullable=False, index=True)
    rule_name = Column(String, nullable=False)
    criteria_type = Column(String, nullable=False)
    criteria_value = Column(Float, nullable=False)
    target_tag = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)


class WholesaleApplicationRow(Base):
    __tablename__ = "wholesale_applications"

    id = Column(String(36), primary_key=True, default=_uuid)
    shop = Column(String, nullable=False, index=True)
    customer_id = Column(String)
    customer_email = Column(String, nullable=False, index=True)
    business_name = Column(String)
    application_data = Column(JSON)
    status = Column(String, nullable=False, default="pending", index=True)
    reviewed_at = Column(DateTime(timezone=True))
    reviewed_by = Column(String)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)
