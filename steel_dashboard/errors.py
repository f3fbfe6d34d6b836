"""Error types raised across the card lifecycle and persistence layers."""

from datetime import datetime, timezone
from typing import Any

from .config import ERROR_SEVERITY

SAVE_CARDS_ERROR = "SAVE_CARDS_ERROR"
LOAD_CARDS_ERROR = "LOAD_CARDS_ERROR"
CREATE_CARD_ERROR = "CREATE_CARD_ERROR"
UPDATE_CARD_ERROR = "UPDATE_CARD_ERROR"
DELETE_CARD_ERROR = "DELETE_CARD_ERROR"


class DashboardError(Exception):
    """A card lifecycle operation that failed after exhausting its retries.

    Carries the error code, a human-readable message, a details payload
    (always including ``original_error`` when there is an underlying cause),
    a fixed severity and the time the error was raised.
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
        severity: str = ERROR_SEVERITY,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.severity = severity
        self.timestamp = datetime.now(timezone.utc)

    @property
    def original_error(self) -> BaseException | None:
        return self.details.get("original_error")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "details": {k: repr(v) if isinstance(v, BaseException) else v for k, v in self.details.items()},
            "severity": self.severity,
            "timestamp": self.timestamp.isoformat(),
        }

    def __repr__(self) -> str:
        return f"DashboardError(code={self.code!r}, message={self.message!r})"


class StoreError(Exception):
    """Raised by a card store when a remote operation fails."""


class StoreUnavailableError(StoreError):
    """Raised by a card store that cannot currently be reached."""
