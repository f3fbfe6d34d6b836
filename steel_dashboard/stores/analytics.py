"""Analytics event logging. Never blocks or fails the calling operation."""

import logging
from datetime import datetime, timezone
from typing import Any

from .cards import CardStore

logger = logging.getLogger(__name__)


class AnalyticsLogger:
    def __init__(self, store: CardStore, enabled: bool = True) -> None:
        self.store = store
        self.enabled = enabled

    async def log_event(self, event_type: str, event_data: dict[str, Any]) -> None:
        """Record an event; any failure is logged and swallowed."""
        if not self.enabled:
            return
        try:
            await self.store.log_event(event_type, event_data)
        except Exception as e:
            logger.warning("Error logging analytics event '%s': %s", event_type, e)

    async def log_card_interaction(
        self,
        card_id: str,
        action: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        await self.log_event("card_interaction", {
            "cardId": card_id,
            "action": action,
            "metadata": metadata,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    async def log_performance_metric(self, metric_name: str, value: float, unit: str) -> None:
        await self.log_event("performance_metric", {
            "metricName": metric_name,
            "value": value,
            "unit": unit,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })
