"""
Card data lifecycle manager.

CardDataManager owns the in-memory card collection and keeps it in step
with the card store and local storage. Local state is the source of truth:
every mutation is applied locally first and the remote store is updated
afterwards as an eventually-consistent mirror. Remote calls are retried a
fixed number of times with a fixed delay; when they are exhausted the error
is raised to the caller and local state is left as it is.

The collection is a tuple of frozen KPICard values and is only ever
replaced as a whole, so a reader never observes a half-applied change.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable

from . import simulator
from .config import (
    CLOCK_INTERVAL_MS,
    DEFAULT_CARDS,
    DEFAULT_PERIOD,
    REFRESH_INTERVAL_MS,
    RETRY_ATTEMPTS,
    RETRY_DELAY_MS,
    STORAGE_KEYS,
)
from .errors import (
    CREATE_CARD_ERROR,
    DELETE_CARD_ERROR,
    LOAD_CARDS_ERROR,
    SAVE_CARDS_ERROR,
    UPDATE_CARD_ERROR,
    DashboardError,
)
from .models import (
    FALLBACK_POINT,
    PLACEHOLDER_POINT,
    DashboardSettings,
    KPICard,
    KPIDataPoint,
    OfflineChange,
    new_card_id,
)
from .scheduler import DashboardScheduler
from .stores import AnalyticsLogger, CardStore, LocalStorage
from .validation import (
    is_valid_card_title,
    is_valid_card_type,
    is_valid_kpi_value,
    is_valid_period,
)

logger = logging.getLogger(__name__)


@dataclass
class KPIDataConfig:
    """Per-manager overrides of the timer, storage and retry defaults."""

    refresh_interval_ms: int = REFRESH_INTERVAL_MS
    clock_interval_ms: int = CLOCK_INTERVAL_MS
    enable_local_storage: bool = True
    enable_analytics: bool = True
    retry_attempts: int = RETRY_ATTEMPTS
    retry_delay_ms: int = RETRY_DELAY_MS

    def __post_init__(self) -> None:
        if self.retry_attempts < 1:
            raise ValueError(f"retry_attempts must be at least 1, got {self.retry_attempts}")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def renumber(cards: Iterable[KPICard]) -> tuple[KPICard, ...]:
    """Return the cards with dense positions 0..n-1 in their current order."""
    return tuple(
        card if card.position == index else replace(card, position=index)
        for index, card in enumerate(cards)
    )


class CardDataManager:
    """Lifecycle facade over the card collection.

    Parameters
    ----------
    store : CardStore mirroring card metadata.
    local_storage : LocalStorage fallback. An in-memory one is created when
        omitted.
    config : KPIDataConfig overrides.
    period : Initially selected time period.
    """

    def __init__(
        self,
        store: CardStore,
        local_storage: LocalStorage | None = None,
        config: KPIDataConfig | None = None,
        period: str = DEFAULT_PERIOD,
    ) -> None:
        self.store = store
        self.local = local_storage if local_storage is not None else LocalStorage()
        self.config = config or KPIDataConfig()
        self.analytics = AnalyticsLogger(store, enabled=self.config.enable_analytics)

        self.cards: tuple[KPICard, ...] = ()
        self.loading = "idle"
        self.error: DashboardError | None = None
        self.is_online = True
        self.last_sync_time: datetime | None = None
        self.period = period
        self.previous_actuals: dict[str, float] = {}

        self.scheduler = DashboardScheduler(
            self.refresh_data,
            refresh_interval_ms=self.config.refresh_interval_ms,
            clock_interval_ms=self.config.clock_interval_ms,
        )
        self._unsubscribe: Callable[[], None] | None = None
        self._retry_sleeps: set[asyncio.Future] = set()
        # ids the card store is known to hold; anything else exists only locally
        self._remote_ids: set[str] = set()
        self._own_writes = 0
        self._closed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Start the refresh and clock timers. Requires a running loop."""
        if self._closed:
            raise RuntimeError("CardDataManager has been closed")
        self.scheduler.start()

    async def close(self) -> None:
        """Stop timers, drop the subscription and cancel pending retries."""
        self._closed = True
        await self.scheduler.stop()
        self.unsubscribe()
        for sleep in list(self._retry_sleeps):
            sleep.cancel()
        self._retry_sleeps.clear()

    async def __aenter__(self) -> "CardDataManager":
        self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------
    def generate_kpi_data(self, card_type: str, period: str) -> KPIDataPoint:
        """Generate a data point, substituting the fallback on any failure."""
        try:
            if not is_valid_card_type(card_type):
                raise ValueError(f"Invalid card type: {card_type}")
            if not is_valid_period(period):
                raise ValueError(f"Invalid period: {period}")

            data = simulator.generate_kpi_data(card_type)

            if not (
                is_valid_kpi_value(data.actual)
                and is_valid_kpi_value(data.benchmark)
                and is_valid_kpi_value(data.percentage)
            ) or data.benchmark == 0:
                raise ValueError(f"Generated invalid KPI data: {data}")
            return data
        except Exception as e:
            logger.warning("Error generating KPI data for '%s': %s; using fallback", card_type, e)
            return FALLBACK_POINT

    def _with_fresh_data(self, cards: Iterable[KPICard]) -> tuple[KPICard, ...]:
        return tuple(card.with_data(self.generate_kpi_data(card.type, self.period)) for card in cards)

    def refresh_data(self) -> None:
        """Regenerate every card's data point for the current period."""
        self.previous_actuals = {card.id: card.data.actual for card in self.cards}
        self.cards = self._with_fresh_data(self.cards)

    def set_period(self, period: str) -> None:
        if not is_valid_period(period):
            raise ValueError(f"Invalid period: {period}")
        self.period = period
        self.refresh_data()

    # ------------------------------------------------------------------
    # Retry
    # ------------------------------------------------------------------
    async def _sleep_before_retry(self) -> None:
        sleep = asyncio.ensure_future(asyncio.sleep(self.config.retry_delay_ms / 1000))
        self._retry_sleeps.add(sleep)
        try:
            await sleep
        finally:
            self._retry_sleeps.discard(sleep)

    async def with_retry(
        self,
        operation: Callable[[], Awaitable[Any]],
        context: str,
        attempts: int | None = None,
    ) -> Any:
        """Await `operation`, retrying sequentially with a fixed delay."""
        if attempts is None:
            attempts = self.config.retry_attempts
        if attempts < 1:
            raise ValueError(f"attempts must be at least 1, got {attempts}")
        for remaining in range(attempts, 0, -1):
            # pushes raised by our own write are echoes of local state
            self._own_writes += 1
            try:
                return await operation()
            except Exception as e:
                if remaining <= 1:
                    raise
                logger.warning(
                    "%s failed (%s), retrying in %d ms. Attempts remaining: %d",
                    context, e, self.config.retry_delay_ms, remaining - 1,
                )
            finally:
                self._own_writes -= 1
            await self._sleep_before_retry()

    # ------------------------------------------------------------------
    # Local storage
    # ------------------------------------------------------------------
    def _save_local_snapshot(self, cards: Iterable[KPICard] | None = None) -> None:
        if not self.config.enable_local_storage:
            return
        cards = self.cards if cards is None else cards
        self.local.save(STORAGE_KEYS["cards"], [card.to_metadata() for card in cards])
        self.local.save(STORAGE_KEYS["last_sync"], _utcnow().isoformat())

    def _load_local_snapshot(self) -> list[KPICard]:
        if not self.config.enable_local_storage:
            return []
        cards = []
        for meta in self.local.load(STORAGE_KEYS["cards"], []) or []:
            try:
                cards.append(KPICard.from_metadata(meta))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed card in local storage: %s", e)
        cards.sort(key=lambda card: card.position)
        return cards

    def pending_offline_changes(self) -> list[OfflineChange]:
        raw = self.local.load(STORAGE_KEYS["offline_changes"], []) or []
        return [OfflineChange.from_dict(change) for change in raw]

    def _queue_offline_change(self, change: OfflineChange) -> None:
        raw = self.local.load(STORAGE_KEYS["offline_changes"], []) or []
        raw.append(change.to_dict())
        self.local.save(STORAGE_KEYS["offline_changes"], raw)
        logger.info("Queued offline '%s' change (%d pending)", change.action, len(raw))

    # ------------------------------------------------------------------
    # Load / save
    # ------------------------------------------------------------------
    async def load_cards(self) -> list[KPICard]:
        """Load cards from the store, degrading to local storage, then empty.

        Never raises: a remote failure is recorded on ``self.error``.
        """
        self.loading = "loading"
        self.error = None

        try:
            if self.is_online:
                loaded = await self.with_retry(self.store.load_cards, "Load cards from card store")
                self.last_sync_time = _utcnow()
                self._save_local_snapshot(loaded)
                self._remote_ids = {card.id for card in loaded}
            else:
                loaded = self._load_local_snapshot()
                logger.info("Loaded %d cards from local storage (offline mode)", len(loaded))
        except Exception as e:
            self.error = DashboardError(
                LOAD_CARDS_ERROR,
                "Failed to load cards from card store",
                {"original_error": e},
            )
            self.loading = "failed"
            logger.error("Loading cards failed: %s", e)

            loaded = self._load_local_snapshot()
            if loaded:
                logger.warning("Using local storage fallback data (%d cards)", len(loaded))
            self.cards = renumber(self._with_fresh_data(loaded))
            return list(self.cards)

        self.cards = renumber(self._with_fresh_data(loaded))
        self.loading = "succeeded"

        if self.is_online:
            await self.analytics.log_event("cards_loaded", {
                "cardCount": len(self.cards),
                "timestamp": _utcnow().isoformat(),
            })
        return list(self.cards)

    async def save_cards(self, cards: Iterable[KPICard] | None = None) -> None:
        """Persist card metadata.

        Cards failing validation are dropped from the persisted batch only.
        While offline the batch is queued in local storage for replay.
        """
        cards = list(self.cards if cards is None else cards)
        self.loading = "loading"
        self.error = None

        valid = [c for c in cards if is_valid_card_title(c.title) and is_valid_card_type(c.type)]
        if len(valid) != len(cards):
            logger.warning("%d cards were filtered out due to validation errors", len(cards) - len(valid))

        try:
            self._save_local_snapshot(valid)

            if self.is_online:
                await self.with_retry(lambda: self.store.save_cards(valid), "Save cards to card store")
                self.last_sync_time = _utcnow()
                self._remote_ids.update(card.id for card in valid)
                if self.config.enable_local_storage:
                    self.local.remove(STORAGE_KEYS["offline_changes"])
                await self.analytics.log_event("cards_saved", {
                    "cardCount": len(valid),
                    "timestamp": _utcnow().isoformat(),
                })
            elif self.config.enable_local_storage:
                self._queue_offline_change(
                    OfflineChange(action="save", cards=[c.to_metadata() for c in valid])
                )
            self.loading = "succeeded"
        except Exception as e:
            error = DashboardError(
                SAVE_CARDS_ERROR,
                "Failed to save cards to card store",
                {"original_error": e, "card_count": len(cards)},
            )
            self.error = error
            self.loading = "failed"
            raise error from e

    # ------------------------------------------------------------------
    # Create / update / delete
    # ------------------------------------------------------------------
    def bootstrap_default_cards(self) -> list[KPICard]:
        """Populate an empty collection with the default cards (local only)."""
        if self.cards:
            return list(self.cards)
        self.cards = renumber(
            KPICard(
                id=new_card_id(),
                title=spec["title"],
                type=spec["type"],
                position=0,
                data=self.generate_kpi_data(spec["type"], self.period),
            )
            for spec in DEFAULT_CARDS
        )
        return list(self.cards)

    async def create_card(self, title: str, card_type: str) -> str:
        """Append a new card and mirror it to the store. Returns the card id."""
        card_data = {"title": title, "type": card_type}
        try:
            if not is_valid_card_title(title):
                raise ValueError("Invalid card title")
            if not is_valid_card_type(card_type):
                raise ValueError("Invalid card type")

            card = KPICard(
                id=new_card_id(),
                title=title.strip(),
                type=card_type,
                position=len(self.cards),
                data=self.generate_kpi_data(card_type, self.period),
            )
            self.cards = self.cards + (card,)
            self._save_local_snapshot()

            if self.is_online:
                await self.with_retry(
                    lambda: self.store.create_card(card.to_metadata()),
                    "Create new card",
                )
                self._remote_ids.add(card.id)
        except Exception as e:
            error = DashboardError(
                CREATE_CARD_ERROR,
                "Failed to create new card",
                {"original_error": e, "card_data": card_data},
            )
            self.error = error
            raise error from e

        await self.analytics.log_card_interaction(card.id, "created", {
            "cardType": card_type,
            "cardTitle": card.title,
        })
        return card.id

    def get_card(self, card_id: str) -> KPICard | None:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None

    def _index_of(self, card_id: str) -> int:
        for index, card in enumerate(self.cards):
            if card.id == card_id:
                return index
        raise KeyError(f"Unknown card id: {card_id}")

    async def update_card(
        self,
        card_id: str,
        title: str | None = None,
        position: int | None = None,
    ) -> None:
        """Edit a card's title and/or move it to `position`.

        Moving a card shifts its neighbours so positions stay dense; every
        card whose position changed is mirrored to the store.
        """
        updates = {k: v for k, v in (("title", title), ("position", position)) if v is not None}
        try:
            index = self._index_of(card_id)
            if title is not None and not is_valid_card_title(title):
                raise ValueError("Invalid card title")

            before = {card.id: card.position for card in self.cards}
            cards = list(self.cards)
            if title is not None:
                cards[index] = replace(cards[index], title=title.strip())
            if position is not None:
                target = min(max(int(position), 0), len(cards) - 1)
                cards.insert(target, cards.pop(index))
            self.cards = renumber(cards)
            self._save_local_snapshot()

            if self.is_online:
                if title is not None:
                    await self.with_retry(
                        lambda: self.store.update_card_title(card_id, title.strip()),
                        "Update card title",
                    )
                for card in self.cards:
                    if before.get(card.id) != card.position:
                        await self.with_retry(
                            lambda card=card: self.store.update_card_position(card.id, card.position),
                            "Update card position",
                        )
        except Exception as e:
            error = DashboardError(
                UPDATE_CARD_ERROR,
                "Failed to update card",
                {"original_error": e, "card_id": card_id, "updates": updates},
            )
            self.error = error
            raise error from e

        await self.analytics.log_card_interaction(card_id, "updated", {"updates": updates})

    async def delete_card(self, card_id: str) -> None:
        """Remove a card, renumber the rest and mirror both to the store."""
        try:
            index = self._index_of(card_id)
            self.cards = renumber(self.cards[:index] + self.cards[index + 1:])
            self.previous_actuals.pop(card_id, None)
            self._save_local_snapshot()

            if self.is_online:
                await self.with_retry(lambda: self.store.delete_card(card_id), "Delete card")
                self._remote_ids.discard(card_id)
        except Exception as e:
            error = DashboardError(
                DELETE_CARD_ERROR,
                "Failed to delete card",
                {"original_error": e, "card_id": card_id},
            )
            self.error = error
            raise error from e

        await self.save_cards()
        await self.analytics.log_card_interaction(card_id, "deleted")

    # ------------------------------------------------------------------
    # Reorder
    # ------------------------------------------------------------------
    async def swap_cards(self, first_id: str, second_id: str) -> None:
        """Swap two cards' positions and persist the new order."""
        first, second = self._index_of(first_id), self._index_of(second_id)
        cards = list(self.cards)
        cards[first], cards[second] = cards[second], cards[first]
        self.cards = renumber(cards)
        await self.save_cards()

    async def move_card_up(self, card_id: str) -> bool:
        index = self._index_of(card_id)
        if index == 0:
            return False
        await self.swap_cards(card_id, self.cards[index - 1].id)
        return True

    async def move_card_down(self, card_id: str) -> bool:
        index = self._index_of(card_id)
        if index >= len(self.cards) - 1:
            return False
        await self.swap_cards(card_id, self.cards[index + 1].id)
        return True

    # ------------------------------------------------------------------
    # Connectivity
    # ------------------------------------------------------------------
    def go_offline(self) -> None:
        self.is_online = False
        logger.info("Dashboard is offline; saves will be queued")

    async def go_online(self) -> int:
        """Mark the dashboard online and replay queued changes."""
        self.is_online = True
        return await self.sync_offline_changes()

    async def sync_offline_changes(self) -> int:
        """Replay queued saves in enqueue order and clear the queue.

        Only ``save`` changes are replayed; other actions are logged and
        dropped. Returns the number of changes replayed successfully.
        """
        if not self.config.enable_local_storage:
            return 0
        changes = self.pending_offline_changes()
        if not changes:
            return 0

        logger.info("Syncing %d offline changes", len(changes))
        replayed = 0
        for change in changes:
            if change.action != "save" or change.cards is None:
                logger.warning(
                    "Offline '%s' change from %s is not replayed", change.action, change.timestamp
                )
                continue
            try:
                cards = [KPICard.from_metadata(meta) for meta in change.cards]
                await self.save_cards(cards)
                replayed += 1
            except (DashboardError, KeyError, TypeError, ValueError) as e:
                logger.error("Failed to replay offline save from %s: %s", change.timestamp, e)

        self.local.remove(STORAGE_KEYS["offline_changes"])
        return replayed

    async def check_connection(self) -> bool:
        try:
            return bool(await self.store.test_connection())
        except Exception as e:
            logger.error("Card store connection test failed: %s", e)
            return False

    # ------------------------------------------------------------------
    # Realtime subscription
    # ------------------------------------------------------------------
    def subscribe(self) -> None:
        """Follow remote metadata changes. Idempotent."""
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe_to_cards(self._on_remote_cards)

    def unsubscribe(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_remote_cards(self, remote_cards: list[KPICard]) -> None:
        """Merge pushed metadata into the local collection.

        Pushes arriving while one of our own remote calls is in flight are
        ignored. Remote cards take their pushed title and order and keep the
        data already shown. Cards the store has never held (created offline,
        or filtered out of a save) stay at their local position; cards it
        held and no longer lists were deleted remotely and are dropped.
        """
        if self._closed or self._own_writes:
            return
        existing = {card.id: card for card in self.cards}
        remote_ids = {card.id for card in remote_cards}

        merged = []
        for card in sorted(remote_cards, key=lambda c: c.position):
            known = existing.get(card.id)
            if known is not None and known.data != PLACEHOLDER_POINT:
                merged.append(card.with_data(known.data))
            else:
                merged.append(card.with_data(self.generate_kpi_data(card.type, self.period)))

        for card in self.cards:
            if card.id not in remote_ids and card.id not in self._remote_ids:
                merged.insert(min(card.position, len(merged)), card)

        self._remote_ids = remote_ids
        self.cards = renumber(merged)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------
    async def load_settings(self) -> DashboardSettings | None:
        """Load and apply stored settings (default period, refresh rate)."""
        try:
            settings = await self.store.load_settings()
        except Exception as e:
            logger.error("Error loading settings: %s", e)
            return None
        if settings is None:
            return None

        if is_valid_period(settings.default_period):
            self.period = settings.default_period
        if settings.refresh_rate > 0 and settings.refresh_rate != self.scheduler.refresh_timer.interval_ms:
            self.scheduler.set_refresh_interval(settings.refresh_rate)
        return settings

    async def save_settings(self, settings: DashboardSettings) -> bool:
        try:
            await self.store.save_settings(settings)
        except Exception as e:
            logger.error("Error saving settings: %s", e)
            return False
        return True

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------
    def clear_error(self) -> None:
        self.error = None

    async def retry_last_operation(self) -> list[KPICard] | None:
        """Re-run a failed load. Other failures are not retried."""
        if self.error is not None and self.error.code == LOAD_CARDS_ERROR:
            return await self.load_cards()
        return None
