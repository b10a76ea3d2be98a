"""Sources of active auto-tagging rules for the tagging engine."""

from abc import ABC, abstractmethod

from sqlalchemy.orm import Session

from b2b_manager.db.repositories import AutoTaggingRuleRepository
from b2b_manager.models.tagging import AutoTaggingRule
from b2b_manager.state.manager import StateManager
from b2b_manager.utils.logging import get_logger

logger = get_logger(__name__)


def rule_cache_key(shop: str) -> str:
    return f"auto_tagging_rules:{shop}"


class RuleStore(ABC):
    """Read access to a shop's active rules, in creation order."""

    @abstractmethod
    async def get_active_rules(self, shop: str) -> list[AutoTaggingRule]:
        """Return active rules for ``shop`` ordered by creation time ascending."""


class DatabaseRuleStore(RuleStore):
    """Reads rules straight from the relational store."""

    def __init__(self, db: Session):
        self.repository = AutoTaggingRuleRepository(db)

    async def get_active_rules(self, shop: str) -> list[AutoTaggingRule]:
        rows = self.repository.list_active(shop)
        return [AutoTaggingRule.model_validate(row) for row in rows]


class CachedRuleStore(RuleStore):
    """Caches another store's results per shop in the shared state store."""

    def __init__(self, inner: RuleStore, state: StateManager, ttl: int):
        self.inner = inner
        self.state = state
        self.ttl = ttl

    async def get_active_rules(self, shop: str) -> list[AutoTaggingRule]:
        key = rule_cache_key(shop)
        cached = await self.state.get(key)
        if cached is not None:
            logger.debug("rule_cache_hit", shop=shop, rules=len(cached))
            return [AutoTaggingRule.model_validate(item) for item in cached]

        rules = await self.inner.get_active_rules(shop)
        await self.state.set(
            key,
            [rule.model_dump(mode="json") for rule in rules],
            ttl=self.ttl,
        )
        logger.debug("rule_cache_filled", shop=shop, rules=len(rules))
        return rules

    async def invalidate(self, shop: str) -> None:
        await self.state.delete(rule_cache_key(shop))
