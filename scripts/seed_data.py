"""Seed demo rules and applications for a development shop."""

import asyncio
import sys

from b2b_manager.config import get_settings
from b2b_manager.db.base import SessionLocal, init_db
from b2b_manager.models.application import WholesaleApplicationForm
from b2b_manager.models.pricing import PricingRuleInput
from b2b_manager.models.tagging import AutoTaggingRuleInput
from b2b_manager.services.applications import WholesaleApplicationService
from b2b_manager.services.pricing import PricingRuleService
from b2b_manager.services.rule_store import CachedRuleStore, DatabaseRuleStore
from b2b_manager.services.tagging_rules import AutoTaggingRuleService
from b2b_manager.state.manager import StateManager
from b2b_manager.utils.errors import AppError

DEFAULT_SHOP = "demo-wholesale.myshopify.com"


async def seed_tagging_rules(shop: str) -> None:
    """Seed behavior-based tagging rules."""
    print("Seeding auto-tagging rules...")

    state_manager = StateManager()
    await state_manager.connect()

    with SessionLocal() as db:
        rule_cache = CachedRuleStore(
            DatabaseRuleStore(db), state_manager, ttl=get_settings().rule_cache_ttl
        )
        service = AutoTaggingRuleService(db, rule_cache=rule_cache)

        rules = [
            AutoTaggingRuleInput(
                rule_name="Gold spenders",
                criteria_type="total_spend",
                criteria_value=1000,
                target_tag="gold",
            ),
            AutoTaggingRuleInput(
                rule_name="VIP spenders",
                criteria_type="total_spend",
                criteria_value=5000,
                target_tag="vip",
            ),
            AutoTaggingRuleInput(
                rule_name="Repeat buyers",
                criteria_type="order_count",
                criteria_value=5,
                target_tag="repeat-buyer",
            ),
            AutoTaggingRuleInput(
                rule_name="Long-time customers",
                criteria_type="days_since_first_order",
                criteria_value=365,
                target_tag="loyal",
            ),
            AutoTaggingRuleInput(
                rule_name="Big baskets",
                criteria_type="average_order_value",
                criteria_value=250,
                target_tag="big-basket",
            ),
        ]

        for data in rules:
            rule = await service.create_rule(shop, data)
            print(f"  ✓ Added {rule.rule_name} -> {rule.target_tag}")

    await state_manager.disconnect()
    print("✓ Auto-tagging rules seeded successfully\n")


def seed_pricing_rules(shop: str) -> None:
    """Seed wholesale discounts."""
    print("Seeding pricing rules...")

    with SessionLocal() as db:
        service = PricingRuleService(db)

        rules = [
            PricingRuleInput(
                customer_tags=["wholesale"],
                discount_type="percentage",
                discount_value=20,
                priority=10,
            ),
            PricingRuleInput(
                customer_tags=["vip", "wholesale"],
                discount_type="percentage",
                discount_value=30,
                priority=20,
            ),
            PricingRuleInput(
                customer_tags=["big-basket"],
                discount_type="fixed",
                discount_value=5,
            ),
        ]

        for data in rules:
            try:
                rule = service.create_rule(shop, data)
            except AppError as e:
                print(f"  - Skipped: {e.message}")
                continue
            print(f"  ✓ Added {rule.discount_value} {rule.discount_type.value} for {rule.customer_tags}")

    print("✓ Pricing rules seeded successfully\n")


def seed_applications(shop: str) -> None:
    """Seed pending wholesale applications."""
    print("Seeding wholesale applications...")

    with SessionLocal() as db:
        service = WholesaleApplicationService(db)

        forms = [
            WholesaleApplicationForm(
                shop=shop,
                customer_email="orders@harborcafe.com",
                business_name="Harbor Cafe",
                company_size="11-50",
                industry="Hospitality",
                expected_volume="$2,000/month",
            ),
            WholesaleApplicationForm(
                shop=shop,
                customer_email="buying@northwindgoods.com",
                business_name="Northwind Goods",
                company_size="51-200",
                industry="Retail",
                expected_volume="$10,000/month",
                notes="Interested in seasonal collections",
            ),
        ]

        for form in forms:
            application = service.submit(form)
            print(f"  ✓ Added {application.business_name} ({application.status.value})")

    print("✓ Wholesale applications seeded successfully\n")


async def main(shop: str) -> None:
    """Run all seed functions."""
    print("\n" + "=" * 50)
    print(f"  Seeding {shop}")
    print("=" * 50 + "\n")

    init_db()
    await seed_tagging_rules(shop)
    seed_pricing_rules(shop)
    seed_applications(shop)

    print("=" * 50)
    print("  ✓ All data seeded successfully!")
    print("=" * 50 + "\n")


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_SHOP))
