"""Structured logging configuration."""

import logging
import sys
from typing import Any

import structlog
from pythonjsonlogger import jsonlogger

from b2b_manager.config import get_settings


def setup_logging() -> None:
    """Configure structured logging for the application."""
    settings = get_settings()

    # Configure standard library logging
    log_level = getattr(logging, settings.log_level)

    handler = logging.StreamHandler(sys.stdout)
    if settings.log_format == "json":
        formatter = jsonlogger.JsonFormatter(
            fmt="%(timestamp)s %(level)s %(name)s %(message)s",
            rename_fields={"levelname": "level", "asctime": "timestamp"},
        )
    else:
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # SQLAlchemy echoes through stdlib logging; keep it quiet unless debugging
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if log_level == logging.DEBUG else logging.WARNING
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer() if settings.log_format == "json"
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


class TaggingLogger:
    """Logger for auto-tagging activity within a single shop."""

    def __init__(self, shop: str):
        self.shop = shop
        self.logger = get_logger("b2b_manager.tagging")

    def log_evaluation(
        self,
        customer_id: str | None,
        rules_evaluated: int,
        new_tags: list[str],
        **kwargs: Any,
    ) -> None:
        """Log the outcome of evaluating a customer against the shop's rules."""
        self.logger.info(
            "customer_evaluated",
            shop=self.shop,
            customer_id=customer_id,
            rules_evaluated=rules_evaluated,
            new_tags=new_tags,
            **kwargs,
        )

    def log_tags_applied(
        self,
        customer_id: str,
        tags: list[str],
        duration_ms: float | None = None,
        **kwargs: Any,
    ) -> None:
        """Log tags successfully written to a customer."""
        log_data: dict[str, Any] = {
            "shop": self.shop,
            "customer_id": customer_id,
            "tags": tags,
        }

        if duration_ms is not None:
            log_data["duration_ms"] = duration_ms

        log_data.update(kwargs)
        self.logger.info("tags_applied", **log_data)

    def log_error(
        self,
        error: str,
        customer_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Log a tagging failure."""
        self.logger.error(
            "tagging_error",
            shop=self.shop,
            customer_id=customer_id,
            error=error,
            **kwargs,
        )
