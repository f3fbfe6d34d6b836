import asyncio
import inspect

import pytest

from steel_dashboard.lifecycle import CardDataManager, KPIDataConfig
from steel_dashboard.stores import InMemoryCardStore, LocalStorage


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the suite."""

    config.addinivalue_line("markers", "asyncio: mark test as running in an asyncio event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute async test functions without requiring pytest-asyncio."""

    test_function = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_function):
        funcargs = {name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames}
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            loop.run_until_complete(test_function(**funcargs))
        finally:
            asyncio.set_event_loop(None)
            loop.close()
        return True
    return None


@pytest.fixture
def store() -> InMemoryCardStore:
    return InMemoryCardStore()


@pytest.fixture
def local_storage() -> LocalStorage:
    return LocalStorage()


@pytest.fixture
def fast_config() -> KPIDataConfig:
    return KPIDataConfig(refresh_interval_ms=20, clock_interval_ms=10, retry_delay_ms=1)


@pytest.fixture
def manager(store, local_storage, fast_config) -> CardDataManager:
    return CardDataManager(store, local_storage, fast_config)
