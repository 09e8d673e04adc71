"""Shared pytest fixtures for test modules."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from mapchirp.cache.location_cache import LocationCache
from mapchirp.cache.sqlite_store import SqliteKeyValueStore
from mapchirp.services.container import set_container
from tests.helpers import FakeClock

if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(tmp_path: Path) -> SqliteKeyValueStore:
    return SqliteKeyValueStore(tmp_path / "store.db")


@pytest.fixture
def cache(store: SqliteKeyValueStore, clock: FakeClock) -> LocationCache:
    return LocationCache(store, ttl_seconds=86400, clock=clock)


@pytest.fixture
def reset_service_container() -> Generator[None]:
    """Reset the global ServiceContainer after the test."""
    yield
    set_container(None)
