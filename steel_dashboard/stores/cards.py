"""
Card store: the document database that mirrors card metadata.

CardStore is the contract the lifecycle manager depends on.
InMemoryCardStore implements it with three document collections
(kpi_cards, dashboard_settings, analytics_data), soft deletes via an
``isActive`` flag and realtime push to subscribers.

To back the dashboard with a hosted document database:
    Subclass CardStore and map each coroutine onto the database client.
    Keep the filtering (isActive) and ordering (position ascending) rules so
    load_cards and subscribe_to_cards return the same shape.
"""

import abc
import copy
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable

from ..config import COLLECTIONS, SETTINGS_DOCUMENT_ID
from ..errors import StoreError, StoreUnavailableError
from ..models import DashboardSettings, KPICard, new_card_id

logger = logging.getLogger(__name__)

CardsCallback = Callable[[list[KPICard]], None]


class CardStore(abc.ABC):
    """Asynchronous document store for card metadata, settings and events."""

    @abc.abstractmethod
    async def save_cards(self, cards: list[KPICard]) -> None:
        """Upsert {id, title, type, position, isActive: True}, merged by id."""

    @abc.abstractmethod
    async def load_cards(self) -> list[KPICard]:
        """Active cards ordered by position, with placeholder data."""

    @abc.abstractmethod
    async def create_card(self, meta: dict) -> str:
        """Create a card document and return its id."""

    @abc.abstractmethod
    async def update_card_title(self, card_id: str, title: str) -> None: ...

    @abc.abstractmethod
    async def update_card_position(self, card_id: str, position: int) -> None: ...

    @abc.abstractmethod
    async def delete_card(self, card_id: str) -> None:
        """Soft delete: mark the card inactive."""

    @abc.abstractmethod
    async def permanently_delete_card(self, card_id: str) -> None: ...

    @abc.abstractmethod
    def subscribe_to_cards(self, callback: CardsCallback) -> Callable[[], None]:
        """Push the active card list on every change; returns an unsubscribe."""

    @abc.abstractmethod
    async def save_settings(self, settings: DashboardSettings) -> None: ...

    @abc.abstractmethod
    async def load_settings(self) -> DashboardSettings | None: ...

    @abc.abstractmethod
    async def log_event(self, event_type: str, event_data: dict) -> None: ...

    @abc.abstractmethod
    async def test_connection(self) -> bool: ...


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryCardStore(CardStore):
    """Process-local document store.

    ``set_available(False)`` makes every remote call raise
    StoreUnavailableError, which is how outages are simulated.
    """

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict]] = {name: {} for name in COLLECTIONS.values()}
        self.available = True
        self._subscribers: dict[int, CardsCallback] = {}
        self._next_token = 0

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @property
    def _cards(self) -> dict[str, dict]:
        return self.collections[COLLECTIONS["cards"]]

    def set_available(self, available: bool) -> None:
        self.available = available

    def _check_available(self) -> None:
        if not self.available:
            raise StoreUnavailableError("Card store is unavailable")

    def _require(self, card_id: str) -> dict:
        doc = self._cards.get(card_id)
        if doc is None:
            raise StoreError(f"No card document with id '{card_id}'")
        return doc

    def _active_cards(self) -> list[KPICard]:
        docs = [d for d in self._cards.values() if d.get("isActive") is not False]
        docs.sort(key=lambda d: d["position"])
        return [KPICard.from_metadata(d) for d in docs]

    def _notify(self) -> None:
        if not self._subscribers:
            return
        cards = self._active_cards()
        for callback in list(self._subscribers.values()):
            try:
                callback(list(cards))
            except Exception:
                logger.exception("Error in cards subscription callback")

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------
    async def save_cards(self, cards: list[KPICard]) -> None:
        self._check_available()
        stamp = _now()
        for card in cards:
            doc = self._cards.setdefault(card.id, {"createdAt": stamp})
            doc.update(card.to_metadata())
            doc["updatedAt"] = stamp
            doc["isActive"] = True
        logger.info("Saved %d cards to the card store", len(cards))
        self._notify()

    async def load_cards(self) -> list[KPICard]:
        self._check_available()
        cards = self._active_cards()
        logger.info("Loaded %d cards from the card store", len(cards))
        return cards

    async def create_card(self, meta: dict) -> str:
        self._check_available()
        card_id = meta.get("id") or new_card_id()
        stamp = _now()
        self._cards[card_id] = {
            "id": card_id,
            "title": meta["title"],
            "type": meta["type"],
            "position": meta["position"],
            "createdAt": stamp,
            "updatedAt": stamp,
            "isActive": True,
        }
        logger.info("Card created: %s", card_id)
        self._notify()
        return card_id

    async def update_card_title(self, card_id: str, title: str) -> None:
        self._check_available()
        doc = self._require(card_id)
        doc["title"] = title
        doc["updatedAt"] = _now()
        self._notify()

    async def update_card_position(self, card_id: str, position: int) -> None:
        self._check_available()
        doc = self._require(card_id)
        doc["position"] = position
        doc["updatedAt"] = _now()
        self._notify()

    async def delete_card(self, card_id: str) -> None:
        self._check_available()
        doc = self._require(card_id)
        doc["isActive"] = False
        doc["updatedAt"] = _now()
        logger.info("Card deleted: %s", card_id)
        self._notify()

    async def permanently_delete_card(self, card_id: str) -> None:
        self._check_available()
        self._require(card_id)
        del self._cards[card_id]
        logger.info("Card permanently deleted: %s", card_id)
        self._notify()

    def subscribe_to_cards(self, callback: CardsCallback) -> Callable[[], None]:
        token = self._next_token
        self._next_token += 1
        self._subscribers[token] = callback

        def unsubscribe() -> None:
            self._subscribers.pop(token, None)

        return unsubscribe

    # ------------------------------------------------------------------
    # Settings and analytics
    # ------------------------------------------------------------------
    async def save_settings(self, settings: DashboardSettings) -> None:
        self._check_available()
        collection = self.collections[COLLECTIONS["settings"]]
        doc = collection.setdefault(SETTINGS_DOCUMENT_ID, {})
        doc.update(settings.to_dict())
        doc["updatedAt"] = _now()

    async def load_settings(self) -> DashboardSettings | None:
        self._check_available()
        doc = self.collections[COLLECTIONS["settings"]].get(SETTINGS_DOCUMENT_ID)
        if doc is None:
            return None
        return DashboardSettings.from_dict(doc)

    async def log_event(self, event_type: str, event_data: dict) -> None:
        self._check_available()
        event_id = uuid.uuid4().hex
        self.collections[COLLECTIONS["analytics"]][event_id] = {
            "eventType": event_type,
            "eventData": copy.deepcopy(event_data),
            "timestamp": _now(),
        }

    async def test_connection(self) -> bool:
        return self.available

    @property
    def events(self) -> list[dict]:
        """Analytics documents in insertion order."""
        return list(self.collections[COLLECTIONS["analytics"]].values())
