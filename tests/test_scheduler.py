import asyncio
from datetime import datetime

import pytest

from steel_dashboard.scheduler import DashboardClock, DashboardScheduler, PeriodicTimer


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        PeriodicTimer(0, lambda: None)


async def test_timer_ticks_until_stopped():
    calls = []
    timer = PeriodicTimer(10, lambda: calls.append(1), name="test")
    timer.start()
    await asyncio.sleep(0.08)
    await timer.wait_stopped()

    seen = len(calls)
    assert seen >= 2
    assert timer.ticks == seen
    assert not timer.running

    await asyncio.sleep(0.05)
    assert len(calls) == seen


async def test_timer_start_is_idempotent():
    timer = PeriodicTimer(10, lambda: None)
    timer.start()
    task = timer._task
    timer.start()
    assert timer._task is task
    await timer.wait_stopped()


async def test_failing_tick_does_not_stop_timer():
    def broken():
        raise RuntimeError("tick failed")

    timer = PeriodicTimer(10, broken)
    timer.start()
    await asyncio.sleep(0.06)
    assert timer.running
    assert timer.ticks >= 2
    await timer.wait_stopped()


async def test_coroutine_callback_is_awaited():
    calls = []

    async def refresh():
        await asyncio.sleep(0)
        calls.append(1)

    timer = PeriodicTimer(10, refresh)
    timer.start()
    await asyncio.sleep(0.05)
    await timer.wait_stopped()
    assert calls


async def test_scheduler_stop_leaves_no_tasks():
    refreshes = []
    scheduler = DashboardScheduler(lambda: refreshes.append(1), refresh_interval_ms=15, clock_interval_ms=10)
    scheduler.start()
    await asyncio.sleep(0.06)
    await scheduler.stop()

    assert refreshes
    assert not scheduler.running
    current = asyncio.current_task()
    assert [t for t in asyncio.all_tasks() if t is not current] == []


async def test_set_refresh_interval_restarts_running_timer():
    scheduler = DashboardScheduler(lambda: None, refresh_interval_ms=1000, clock_interval_ms=1000)
    scheduler.start()
    scheduler.set_refresh_interval(10)
    assert scheduler.refresh_timer.interval_ms == 10
    assert scheduler.refresh_timer.running
    await asyncio.sleep(0.05)
    assert scheduler.refresh_timer.ticks >= 1
    await scheduler.stop()


def test_set_refresh_interval_while_stopped():
    scheduler = DashboardScheduler(lambda: None)
    scheduler.set_refresh_interval(2500)
    assert scheduler.refresh_timer.interval_ms == 2500
    assert not scheduler.running


def test_clock_display_strings():
    clock = DashboardClock()
    clock.tick(datetime(2026, 10, 14, 15, 4, 9))
    assert clock.time_display == "03:04:09 PM"
    assert clock.date_display == "Wednesday, October 14, 2026"
