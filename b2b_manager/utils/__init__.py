"""Utility modules."""

from b2b_manager.utils.errors import AppError, ErrorCode
from b2b_manager.utils.logging import setup_logging
from b2b_manager.utils.tracing import WebhookTracer

__all__ = ["setup_logging", "AppError", "ErrorCode", "WebhookTracer"]
