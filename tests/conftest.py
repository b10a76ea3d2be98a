"""Pytest configuration and fixtures."""

import fnmatch
import json
import os
from typing import Any, AsyncGenerator, AsyncIterator, Generator

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SHOPIFY_API_SECRET", "test-webhook-secret")
os.environ.setdefault("SHOPIFY_ACCESS_TOKEN", "shpat_test")
os.environ.setdefault("LOG_FORMAT", "text")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from b2b_manager.api.deps import get_shopify_factory, get_state
from b2b_manager.db.base import Base, get_db, init_db
from b2b_manager.main import app
from b2b_manager.models.tagging import AutoTaggingRule, CustomerMetrics
from b2b_manager.services.rule_store import RuleStore
from b2b_manager.state.manager import StateManager
from b2b_manager.utils.errors import ShopifyAPIError

SHOP = "acme-wholesale.myshopify.com"


class InMemoryStateManager(StateManager):
    """State manager keeping values in a dict instead of Redis."""

    def __init__(self) -> None:
        self.values: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        self.values[key] = json.dumps(value)
        if ttl:
            self.ttls[key] = ttl

    async def get(self, key: str) -> Any:
        value = self.values.get(key)
        return json.loads(value) if value is not None else None

    async def delete(self, key: str) -> None:
        self.values.pop(key, None)
        self.ttls.pop(key, None)

    async def delete_pattern(self, pattern: str) -> int:
        keys = [key for key in self.values if fnmatch.fnmatch(key, pattern)]
        for key in keys:
            await self.delete(key)
        return len(keys)

    async def increment(self, key: str, amount: int = 1) -> int:
        count = int(json.loads(self.values.get(key, "0"))) + amount
        self.values[key] = json.dumps(count)
        return count

    async def expire(self, key: str, ttl: int) -> None:
        self.ttls[key] = ttl

    async def ttl(self, key: str) -> int:
        return self.ttls.get(key, -1)


class InMemoryRuleStore(RuleStore):
    """Rule store over a fixed list, counting reads."""

    def __init__(self, rules: list[AutoTaggingRule]):
        self.rules = rules
        self.reads = 0

    async def get_active_rules(self, shop: str) -> list[AutoTaggingRule]:
        self.reads += 1
        return [rule for rule in self.rules if rule.shop == shop and rule.is_active]


class StubShopifyClient:
    """Stands in for the Admin API client."""

    def __init__(self) -> None:
        self.customers: dict[str, CustomerMetrics] = {}
        self.tag_calls: list[tuple[str, list[str]]] = []
        self.fail_tagging = False

    async def get_customer_metrics(self, customer_id: str | int) -> CustomerMetrics | None:
        return self.customers.get(str(customer_id))

    async def iter_customers(self, page_size: int | None = None) -> AsyncIterator[CustomerMetrics]:
        for metrics in self.customers.values():
            yield metrics

    async def add_customer_tags(self, customer_id: str | int, tags: list[str]) -> None:
        if self.fail_tagging:
            raise ShopifyAPIError("Shopify returned 503")
        self.tag_calls.append((str(customer_id), list(tags)))


def make_rule(
    target_tag: str,
    criteria_value: float,
    criteria_type: str = "total_spend",
    rule_id: str | None = None,
    shop: str = SHOP,
    is_active: bool = True,
) -> AutoTaggingRule:
    return AutoTaggingRule(
        id=rule_id or f"rule-{target_tag}",
        shop=shop,
        rule_name=f"{target_tag} customers",
        criteria_type=criteria_type,
        criteria_value=criteria_value,
        target_tag=target_tag,
        is_active=is_active,
    )


@pytest.fixture
def shop() -> str:
    return SHOP


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False)()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def state_manager() -> InMemoryStateManager:
    return InMemoryStateManager()


@pytest.fixture
def shopify() -> StubShopifyClient:
    return StubShopifyClient()


@pytest.fixture
def sample_metrics() -> CustomerMetrics:
    """A customer who has spent $6,000 over 8 orders."""
    return CustomerMetrics(
        customer_id="1001",
        total_spent=6000.0,
        orders_count=8,
        average_order_value=750.0,
        existing_tags=["customer"],
    )


@pytest_asyncio.fixture
async def test_client(
    db_session: Session,
    state_manager: InMemoryStateManager,
    shopify: StubShopifyClient,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with database, state and Shopify replaced."""

    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    async def override_get_state() -> StateManager:
        return state_manager

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_state] = override_get_state
    app.dependency_overrides[get_shopify_factory] = lambda: (lambda shop: shopify)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(shop: str) -> dict[str, str]:
    return {"X-Shopify-Shop-Domain": shop}
