import json

import pytest

from steel_dashboard.errors import StoreError, StoreUnavailableError
from steel_dashboard.models import PLACEHOLDER_POINT, DashboardSettings, KPICard
from steel_dashboard.stores import AnalyticsLogger, InMemoryCardStore, LocalStorage


def _card(card_id: str, position: int, title: str = "Card", card_type: str = "coils") -> KPICard:
    return KPICard(id=card_id, title=title, type=card_type, position=position)


# ---------------------------------------------------------------------------
# Card store
# ---------------------------------------------------------------------------
async def test_save_then_load_orders_by_position(store):
    await store.save_cards([_card("b", 1), _card("a", 0), _card("c", 2)])
    loaded = await store.load_cards()
    assert [c.id for c in loaded] == ["a", "b", "c"]
    assert all(c.data == PLACEHOLDER_POINT for c in loaded)


async def test_save_merges_by_id(store):
    await store.save_cards([_card("a", 0, title="Old")])
    await store.save_cards([_card("a", 3, title="New")])
    doc = store.collections["kpi_cards"]["a"]
    assert doc["title"] == "New"
    assert doc["position"] == 3
    assert doc["isActive"] is True
    assert "createdAt" in doc and "updatedAt" in doc


async def test_soft_delete_hides_card(store):
    await store.save_cards([_card("a", 0), _card("b", 1)])
    await store.delete_card("a")
    assert [c.id for c in await store.load_cards()] == ["b"]
    assert store.collections["kpi_cards"]["a"]["isActive"] is False


async def test_permanent_delete_removes_document(store):
    await store.save_cards([_card("a", 0)])
    await store.permanently_delete_card("a")
    assert "a" not in store.collections["kpi_cards"]


async def test_create_keeps_given_id(store):
    card_id = await store.create_card({"id": "card_1", "title": "T", "type": "tons", "position": 0})
    assert card_id == "card_1"
    assert (await store.load_cards())[0].type == "tons"


async def test_create_assigns_id_when_missing(store):
    card_id = await store.create_card({"title": "T", "type": "tons", "position": 0})
    assert card_id.startswith("card_")


async def test_updates_require_existing_card(store):
    with pytest.raises(StoreError):
        await store.update_card_title("missing", "x")


async def test_title_and_position_updates(store):
    await store.save_cards([_card("a", 0)])
    await store.update_card_title("a", "Renamed")
    await store.update_card_position("a", 4)
    doc = store.collections["kpi_cards"]["a"]
    assert (doc["title"], doc["position"]) == ("Renamed", 4)


async def test_unavailable_store_raises(store):
    store.set_available(False)
    with pytest.raises(StoreUnavailableError):
        await store.load_cards()
    assert await store.test_connection() is False


async def test_subscription_pushes_active_cards_until_unsubscribed(store):
    pushes = []
    unsubscribe = store.subscribe_to_cards(pushes.append)

    await store.save_cards([_card("a", 1), _card("b", 0)])
    await store.delete_card("b")
    unsubscribe()
    await store.save_cards([_card("c", 2)])

    assert [[c.id for c in push] for push in pushes] == [["b", "a"], ["a"]]


async def test_subscriber_errors_do_not_break_writes(store):
    def broken(cards):
        raise RuntimeError("boom")

    store.subscribe_to_cards(broken)
    await store.save_cards([_card("a", 0)])
    assert len(await store.load_cards()) == 1


async def test_settings_round_trip(store):
    assert await store.load_settings() is None
    await store.save_settings(DashboardSettings(default_period="weekly", refresh_rate=2000, theme="dark"))
    settings = await store.load_settings()
    assert (settings.default_period, settings.refresh_rate, settings.theme) == ("weekly", 2000, "dark")


# ---------------------------------------------------------------------------
# Local storage
# ---------------------------------------------------------------------------
def test_local_storage_namespaces_keys():
    storage = LocalStorage(prefix="steel-dashboard-")
    storage.save("cards", [{"id": "a"}])
    assert storage.load("cards") == [{"id": "a"}]
    assert storage.keys() == ["cards"]
    assert "steel-dashboard-cards" in storage._items


def test_local_storage_default_and_remove(local_storage):
    assert local_storage.load("missing", []) == []
    local_storage.save("x", 1)
    local_storage.remove("x")
    assert local_storage.load("x") is None


def test_local_storage_clear_only_touches_namespace(tmp_path):
    path = tmp_path / "storage.json"
    LocalStorage(path, prefix="other-").save("keep", True)

    ours = LocalStorage(path, prefix="steel-dashboard-")
    ours.save("cards", [])
    ours.clear()

    raw = json.loads(path.read_text())
    assert list(raw) == ["other-keep"]


def test_local_storage_persists_to_file(tmp_path):
    path = tmp_path / "nested" / "storage.json"
    LocalStorage(path).save("last-sync", "2026-10-18T00:00:00+00:00")
    assert LocalStorage(path).load("last-sync") == "2026-10-18T00:00:00+00:00"


def test_local_storage_tolerates_corrupt_file(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("{not json")
    storage = LocalStorage(path)
    assert storage.load("cards", []) == []


def test_unserialisable_values_are_not_raised(local_storage):
    local_storage.save("bad", object())
    assert local_storage.load("bad") is None


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------
async def test_analytics_records_events(store):
    analytics = AnalyticsLogger(store)
    await analytics.log_card_interaction("a", "created", {"cardType": "coils"})
    await analytics.log_performance_metric("render", 12.5, "ms")
    assert [e["eventType"] for e in store.events] == ["card_interaction", "performance_metric"]
    assert store.events[0]["eventData"]["action"] == "created"


async def test_analytics_failures_are_swallowed(store):
    store.set_available(False)
    await AnalyticsLogger(store).log_event("cards_saved", {"cardCount": 1})
    assert store.events == []


async def test_disabled_analytics_records_nothing(store):
    await AnalyticsLogger(store, enabled=False).log_event("cards_saved", {})
    assert store.events == []


def test_unknown_theme_falls_back_to_light():
    settings = DashboardSettings.from_dict({"defaultPeriod": "monthly", "theme": "neon"})
    assert (settings.default_period, settings.theme) == ("monthly", "light")
