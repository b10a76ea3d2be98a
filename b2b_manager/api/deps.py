"""Request dependencies shared by the API routers."""

from typing import Callable

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from b2b_manager.config import get_settings
from b2b_manager.db.base import get_db
from b2b_manager.services.rule_store import CachedRuleStore, DatabaseRuleStore
from b2b_manager.services.shopify_client import ShopifyClient
from b2b_manager.state.manager import StateManager, get_state_manager
from b2b_manager.state.rate_limit import RateLimit, RateLimiter
from b2b_manager.utils.validation import validate_shop_domain

ShopifyClientFactory = Callable[[str], ShopifyClient]


async def get_state() -> StateManager:
    """Shared state store."""
    return await get_state_manager()


def get_shop(x_shopify_shop_domain: str | None = Header(default=None)) -> str:
    """Shop identity set by the embedding admin session."""
    return validate_shop_domain(x_shopify_shop_domain)


def get_shopify_factory() -> ShopifyClientFactory:
    """Build Admin API clients for a shop using the offline access token."""
    settings = get_settings()

    def factory(shop: str) -> ShopifyClient:
        return ShopifyClient(shop, settings.shopify_access_token)

    return factory


def get_rule_store(
    db: Session = Depends(get_db),
    state: StateManager = Depends(get_state),
) -> CachedRuleStore:
    """Active-rule source for the tagging engine."""
    return CachedRuleStore(
        DatabaseRuleStore(db), state, ttl=get_settings().rule_cache_ttl
    )


def _rate_limits() -> dict[str, RateLimit]:
    settings = get_settings()
    return {
        "api": RateLimit("api", settings.api_rate_limit, settings.api_rate_window),
        "webhook": RateLimit(
            "webhook", settings.webhook_rate_limit, settings.webhook_rate_window
        ),
        "form": RateLimit("form", settings.form_rate_limit, settings.form_rate_window),
    }


def rate_limit(scope: str) -> Callable:
    """Dependency enforcing the named rate limit per shop or client address."""

    async def dependency(
        request: Request,
        state: StateManager = Depends(get_state),
    ) -> None:
        identifier = request.headers.get("X-Shopify-Shop-Domain") or (
            request.client.host if request.client else "unknown"
        )
        await RateLimiter(state, _rate_limits()[scope]).check(identifier)

    return dependency
