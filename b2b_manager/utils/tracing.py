"""Step timing for webhook processing."""

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Generator

from b2b_manager.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class TraceEvent:
    """Individual step in a webhook delivery."""

    timestamp: datetime
    step: str
    duration_ms: float | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class WebhookTracer:
    """Traces the steps of a single webhook delivery."""

    def __init__(self, topic: str, shop: str):
        self.topic = topic
        self.shop = shop
        self.events: list[TraceEvent] = []
        self.start_time = time.time()

    def add_event(
        self,
        step: str,
        duration_ms: float | None = None,
        **metadata: Any,
    ) -> None:
        """Record a step."""
        self.events.append(
            TraceEvent(
                timestamp=datetime.now(timezone.utc),
                step=step,
                duration_ms=duration_ms,
                metadata=metadata,
            )
        )

        logger.debug(
            "trace_event",
            topic=self.topic,
            shop=self.shop,
            step=step,
            duration_ms=duration_ms,
            **metadata,
        )

    @contextmanager
    def trace_step(self, step: str, **metadata: Any) -> Generator[None, None, None]:
        """Context manager to time a step."""
        start = time.time()
        try:
            yield
        finally:
            duration_ms = (time.time() - start) * 1000
            self.add_event(step, duration_ms=duration_ms, **metadata)

    def get_trace_summary(self) -> dict[str, Any]:
        """Summarize the delivery for logging."""
        return {
            "topic": self.topic,
            "shop": self.shop,
            "total_duration_ms": (time.time() - self.start_time) * 1000,
            "steps": [
                {
                    "step": event.step,
                    "duration_ms": event.duration_ms,
                    **event.metadata,
                }
                for event in self.events
            ],
        }
