"""Shared state modules."""

from b2b_manager.state.manager import StateManager
from b2b_manager.state.rate_limit import RateLimit, RateLimiter

__all__ = ["StateManager", "RateLimit", "RateLimiter"]
