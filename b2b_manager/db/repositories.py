"""
Shop-scoped data access for rules and applications
"""
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from b2b_manager.db.tables import AutoTaggingRuleRow, PricingRuleRow, WholesaleApplicationRow


class _ShopRepository:
    """Common lookups for tables keyed by shop."""

    model: Any

    def __init__(self, db: Session):
        self.db = db

    def get(self, shop: str, record_id: str):
        return (
            self.db.query(self.model)
            .filter(self.model.shop == shop, self.model.id == record_id)
            .first()
        )

    def create(self, shop: str, **fields: Any):
        row = self.model(shop=shop, **fields)
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def update(self, row, **fields: Any):
        for key, value in fields.items():
            setattr(row, key, value)
        self.db.commit()
        self.db.refresh(row)
        return row

    def delete(self, row) -> None:
        self.db.delete(row)
        self.db.commit()


class AutoTaggingRuleRepository(_ShopRepository):
    model = AutoTaggingRuleRow

    def list_for_shop(self, shop: str) -> list[AutoTaggingRuleRow]:
        """All rules, newest first (admin listing order)."""
        return (
            self.db.query(AutoTaggingRuleRow)
            .filter(AutoTaggingRuleRow.shop == shop)
            .order_by(AutoTaggingRuleRow.created_at.desc())
            .all()
        )

    def list_active(self, shop: str) -> list[AutoTaggingRuleRow]:
        """Active rules in creation order (evaluation order)."""
        return (
            self.db.query(AutoTaggingRuleRow)
            .filter(AutoTaggingRuleRow.shop == shop, AutoTaggingRuleRow.is_active.is_(True))
            .order_by(AutoTaggingRuleRow.created_at.asc(), AutoTaggingRuleRow.id.asc())
            .all()
        )


class PricingRuleRepository(_ShopRepository):
    model = PricingRuleRow

    def list_for_shop(self, shop: str, active_only: bool = False) -> list[PricingRuleRow]:
        """Rules by priority, highest first."""
        query = self.db.query(PricingRuleRow).filter(PricingRuleRow.shop == shop)
        if active_only:
            query = query.filter(PricingRuleRow.is_active.is_(True))
        return query.order_by(
            PricingRuleRow.priority.desc(), PricingRuleRow.created_at.asc()
        ).all()


class WholesaleApplicationRepository(_ShopRepository):
    model = WholesaleApplicationRow

    def list_for_shop(
        self, shop: str, status: str | None = None
    ) -> list[WholesaleApplicationRow]:
        """Applications newest first, optionally filtered by status."""
        query = self.db.query(WholesaleApplicationRow).filter(
            WholesaleApplicationRow.shop == shop
        )
        if status:
            query = query.filter(WholesaleApplicationRow.status == status)
        return query.order_by(WholesaleApplicationRow.created_at.desc()).all()

    def mark_reviewed(self, row: WholesaleApplicationRow, status: str, reviewer: str):
        return self.update(
            row,
            status=status,
            reviewed_at=datetime.now(timezone.utc),
            reviewed_by=reviewer,
        )
