"""
Value objects for the dashboard: KPI data points, cards, offline changes
and dashboard settings.
"""

import secrets
import string
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from .config import DEFAULT_PERIOD, REFRESH_INTERVAL_MS, SETTINGS_DOCUMENT_ID, THEMES

_ID_ALPHABET = string.digits + string.ascii_lowercase


@dataclass(frozen=True)
class KPIDataPoint:
    """One simulated snapshot of a card, at hourly granularity."""

    actual: float
    benchmark: float
    percentage: float

    def to_dict(self) -> dict:
        return {"actual": self.actual, "benchmark": self.benchmark, "percentage": self.percentage}


# Substituted whenever generation fails or produces out-of-contract values
FALLBACK_POINT = KPIDataPoint(actual=0, benchmark=1, percentage=0)

# Carried by cards read back from persistence until data is regenerated
PLACEHOLDER_POINT = KPIDataPoint(actual=0, benchmark=0, percentage=0)


def new_card_id() -> str:
    """Return ``card_<epoch ms>_<9 base-36 chars>``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"card_{int(time.time() * 1000)}_{suffix}"


@dataclass(frozen=True)
class KPICard:
    """A dashboard card.

    Cards are immutable values; the lifecycle manager replaces them with
    ``dataclasses.replace`` rather than editing fields in place.
    """

    id: str
    title: str
    type: str
    position: int
    data: KPIDataPoint = PLACEHOLDER_POINT

    def to_metadata(self) -> dict:
        """Persisted shape of the card. Data points are never stored."""
        return {
            "id": self.id,
            "title": self.title,
            "type": self.type,
            "position": self.position,
        }

    @classmethod
    def from_metadata(cls, meta: dict) -> "KPICard":
        return cls(
            id=str(meta["id"]),
            title=str(meta["title"]),
            type=str(meta["type"]),
            position=int(meta["position"]),
        )

    def with_data(self, data: KPIDataPoint) -> "KPICard":
        return replace(self, data=data)


@dataclass
class OfflineChange:
    """A change recorded while offline, replayed when connectivity returns."""

    action: str
    cards: list[dict] | None = None
    card_id: str | None = None
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def to_dict(self) -> dict:
        payload: dict = {"action": self.action, "timestamp": self.timestamp}
        if self.cards is not None:
            payload["cards"] = self.cards
        if self.card_id is not None:
            payload["cardId"] = self.card_id
        return payload

    @classmethod
    def from_dict(cls, payload: dict) -> "OfflineChange":
        return cls(
            action=payload.get("action", ""),
            cards=payload.get("cards"),
            card_id=payload.get("cardId"),
            timestamp=payload.get("timestamp", ""),
        )


@dataclass
class DashboardSettings:
    id: str = SETTINGS_DOCUMENT_ID
    default_period: str = DEFAULT_PERIOD
    refresh_rate: int = REFRESH_INTERVAL_MS
    theme: str = "light"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "defaultPeriod": self.default_period,
            "refreshRate": self.refresh_rate,
            "theme": self.theme,
        }

    @classmethod
    def from_dict(cls, payload: dict) -> "DashboardSettings":
        return cls(
            id=payload.get("id", SETTINGS_DOCUMENT_ID),
            default_period=payload.get("defaultPeriod", DEFAULT_PERIOD),
            refresh_rate=int(payload.get("refreshRate", REFRESH_INTERVAL_MS)),
            theme=payload.get("theme") if payload.get("theme") in THEMES else "light",
        )
