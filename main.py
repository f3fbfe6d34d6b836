"""
Steel Production Dashboard — End-to-end lifecycle smoke test.

Runs the card lifecycle against an in-memory card store: bootstrap, save,
reload, create, reorder, delete, an outage with offline queueing, replay,
and a few timed refresh ticks, printing summaries along the way.

Usage:
    python main.py
"""

import asyncio
import logging
import time

from steel_dashboard.config import DASHBOARD_NAME, TIME_PERIODS
from steel_dashboard.dashboard import get_cards_frame, get_dashboard_overview
from steel_dashboard.formatting import format_duration, format_large_number
from steel_dashboard.lifecycle import CardDataManager, KPIDataConfig
from steel_dashboard.periods import convert_to_period
from steel_dashboard.simulator import generate_sample
from steel_dashboard.stores import InMemoryCardStore, LocalStorage

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def print_cards(manager: CardDataManager) -> None:
    df = get_cards_frame(manager.cards, manager.period)
    if df.empty:
        print("  (no cards)")
        return
    print(df[["position", "title", "type", "actual", "benchmark", "percentage", "status"]].to_string(index=False))


async def run() -> None:
    """Drive the full lifecycle and print smoke-test outputs."""

    print("=" * 70)
    print(f"  {DASHBOARD_NAME.upper()}")
    print("  Card Lifecycle Smoke Test")
    print("=" * 70)
    print()

    started = time.monotonic()
    store = InMemoryCardStore()
    local = LocalStorage()
    config = KPIDataConfig(refresh_interval_ms=200, clock_interval_ms=100, retry_delay_ms=50)

    # ------------------------------------------------------------------
    # 1. Simulator ranges
    # ------------------------------------------------------------------
    print("[ 1 ] SIMULATOR RANGES (50 draws per type)")
    print("-" * 40)
    for card_type in ("coils", "tons", "energy"):
        sample = generate_sample(card_type, 50)
        print(
            f"  {card_type:8s} actual {sample['actual'].min():>7} .. {sample['actual'].max():<7}"
            f" benchmark {sample['benchmark'].min():>6} .. {sample['benchmark'].max()}"
        )

    async with CardDataManager(store, local, config) as manager:
        # ------------------------------------------------------------------
        # 2. Bootstrap and persist
        # ------------------------------------------------------------------
        print("\n[ 2 ] BOOTSTRAP DEFAULT CARDS")
        print("-" * 40)
        print(f"  Card store reachable: {await manager.check_connection()}")
        manager.bootstrap_default_cards()
        await manager.save_cards()
        await manager.create_card("Energy Consumption", "energy")
        print_cards(manager)

        # ------------------------------------------------------------------
        # 3. Reload from the store
        # ------------------------------------------------------------------
        print("\n[ 3 ] RELOAD FROM CARD STORE")
        print("-" * 40)
        reloaded = await manager.load_cards()
        print(f"  Reloaded {len(reloaded)} cards, state={manager.loading}")

        # ------------------------------------------------------------------
        # 4. Reorder and delete
        # ------------------------------------------------------------------
        print("\n[ 4 ] REORDER AND DELETE")
        print("-" * 40)
        first = manager.cards[0]
        await manager.move_card_down(first.id)
        await manager.delete_card(manager.cards[-1].id)
        print_cards(manager)

        # ------------------------------------------------------------------
        # 5. Outage, offline queue, replay
        # ------------------------------------------------------------------
        print("\n[ 5 ] OFFLINE QUEUE")
        print("-" * 40)
        manager.go_offline()
        await manager.create_card("Line 2 Yield", "yield")
        await manager.save_cards()
        print(f"  Pending offline changes: {len(manager.pending_offline_changes())}")
        replayed = await manager.go_online()
        print(f"  Replayed {replayed} change(s); pending now {len(manager.pending_offline_changes())}")

        store.set_available(False)
        fallback = await manager.load_cards()
        print(f"  Store down: loaded {len(fallback)} cards from local storage, error={manager.error.code}")
        store.set_available(True)

        # ------------------------------------------------------------------
        # 6. Timed refresh
        # ------------------------------------------------------------------
        print("\n[ 6 ] TIMED REFRESH")
        print("-" * 40)
        await asyncio.sleep(0.65)
        print(f"  Refresh ticks: {manager.scheduler.refresh_timer.ticks}")
        print(f"  Clock: {manager.scheduler.clock.date_display} {manager.scheduler.clock.time_display}")

        # ------------------------------------------------------------------
        # 7. Dashboard outputs
        # ------------------------------------------------------------------
        print("\n[ 7 ] DASHBOARD OUTPUTS")
        print("-" * 40)
        for period in TIME_PERIODS:
            manager.set_period(period)
            overview = get_dashboard_overview(manager.cards, period, manager.previous_actuals)
            print(f"\n  {period} ({overview['period_info']['label']}) status={overview['status_counts']}")
            for view in overview["cards"]:
                print(
                    f"    {view['title']:22s} {view['actual_str']:>18s}  target {view['benchmark_str']:>18s}"
                    f"  {view['percentage_str']:>5s}  {view['status_text']}"
                )

        tons = next((c for c in manager.cards if c.type == "tons"), None)
        if tons is not None:
            monthly = convert_to_period(tons.data.actual, "monthly")
            print(f"\n  Monthly tonnage: {format_large_number(monthly)} tons")
        print(f"  Analytics events recorded: {len(store.events)}")

    print(f"\n  Scheduler running after close: {manager.scheduler.running}")
    print(f"  Elapsed: {format_duration(round(time.monotonic() - started))}")

    print("\n" + "=" * 70)
    print("  Lifecycle complete.")
    print("=" * 70)


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
