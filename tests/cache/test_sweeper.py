from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from mapchirp.cache.sweeper import EvictionSweeper

if TYPE_CHECKING:
    from mapchirp.cache.sqlite_store import SqliteKeyValueStore
    from tests.helpers import FakeClock

HOUR = 3600


class TestEvictionSweeper:
    def test_removes_only_expired(self, store: SqliteKeyValueStore, clock: FakeClock) -> None:
        store.set(
            {
                "loc_old": {"location": "Paris", "timestamp": clock.now - 25 * HOUR},
                "loc_new": {"location": "Rome", "timestamp": clock.now - 1 * HOUR},
            }
        )
        sweeper = EvictionSweeper(store, ttl_seconds=24 * HOUR, clock=clock)
        assert sweeper.sweep() == 1
        assert store.keys("loc_") == ["loc_new"]

    def test_ignores_other_keys_and_malformed_entries(self, store: SqliteKeyValueStore, clock: FakeClock) -> None:
        store.set(
            {
                "settings": {"timestamp": 0},
                "x_bearer_token": "Bearer abc",
                "loc_string": "Paris",
                "loc_no_timestamp": {"location": "Rome"},
                "loc_text_timestamp": {"location": "Rome", "timestamp": "yesterday"},
            }
        )
        sweeper = EvictionSweeper(store, ttl_seconds=24 * HOUR, clock=clock)
        assert sweeper.sweep() == 0
        assert len(store.keys()) == 5

    def test_failure_ends_pass_without_raising(self, clock: FakeClock) -> None:
        class BrokenStore:
            def items(self, prefix: str | None = None) -> list[tuple[str, object]]:
                raise RuntimeError("disk gone")

        sweeper = EvictionSweeper(BrokenStore(), clock=clock)  # type: ignore[arg-type]
        assert sweeper.sweep() == 0

    async def test_run_sweeps_immediately_and_keeps_going(self, store: SqliteKeyValueStore, clock: FakeClock) -> None:
        store.set({"loc_old": {"location": "Paris", "timestamp": clock.now - 25 * HOUR}})
        sweeper = EvictionSweeper(store, ttl_seconds=24 * HOUR, interval_seconds=0.01, clock=clock)

        task = asyncio.create_task(sweeper.run())
        await asyncio.sleep(0)
        assert store.keys("loc_") == []

        store.set({"loc_later": {"location": "Rome", "timestamp": clock.now - 25 * HOUR}})
        await asyncio.sleep(0.05)
        assert store.keys("loc_") == []

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    async def test_run_survives_failing_passes(self, clock: FakeClock) -> None:
        calls = 0

        class FlakyStore:
            def items(self, prefix: str | None = None) -> list[tuple[str, object]]:
                nonlocal calls
                calls += 1
                raise RuntimeError("locked")

        sweeper = EvictionSweeper(FlakyStore(), interval_seconds=0.01, clock=clock)  # type: ignore[arg-type]
        task = asyncio.create_task(sweeper.run())
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert calls >= 2
