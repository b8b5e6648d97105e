"""Tests for the two-tier score cache."""

from __future__ import annotations

import dataclasses
from datetime import timedelta
from pathlib import Path

import pytest

from readiness_engine.cache import (
    CacheCoordinator,
    CacheKey,
    InMemoryDurableStore,
    JsonFileDurableStore,
    MemoryCache,
)
from readiness_engine.models.enums import Fidelity, ScoreType, SleepBand
from readiness_engine.models.score import ComputationRecord, ScoreResult, SubScore


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def result(today, now) -> ScoreResult:
    return ScoreResult(
        score_type=ScoreType.SLEEP,
        day=today,
        score=82.0,
        band=SleepBand.OPTIMAL,
        sub_scores=(
            SubScore("performance", 90.0, 0.6, 54.0),
            SubScore("efficiency", 70.0, 0.4, 28.0),
        ),
        inputs_snapshot={"sleep_duration_s": 27000.0},
        computed_at=now,
        algorithm_version="1.0.0",
    )


@pytest.fixture
def coordinator(clock) -> CacheCoordinator:
    return CacheCoordinator(InMemoryDurableStore(), MemoryCache(ttl_s=60.0, clock=clock))


class TestCacheKey:
    def test_format(self, today) -> None:
        assert str(CacheKey(ScoreType.RECOVERY, today, "2.1")) == "score:recovery:2025-01-15:v2.1"

    def test_version_namespaces(self, today) -> None:
        assert CacheKey(ScoreType.SLEEP, today, "1") != CacheKey(ScoreType.SLEEP, today, "2")


class TestMemoryCache:
    def test_hit_and_miss_counted(self, clock, result, today) -> None:
        cache = MemoryCache(ttl_s=60.0, clock=clock)
        key = CacheKey(ScoreType.SLEEP, today, "1.0.0")
        assert cache.get(key) is None
        cache.put(key, result)
        assert cache.get(key) is result
        stats = cache.stats
        assert (stats.hits, stats.misses, stats.size) == (1, 1, 1)
        assert stats.hit_rate == 0.5

    def test_expired_entry_not_served(self, clock, result, today) -> None:
        cache = MemoryCache(ttl_s=60.0, clock=clock)
        key = CacheKey(ScoreType.SLEEP, today, "1.0.0")
        cache.put(key, result)
        clock.now += 60.0
        assert cache.get(key) is None
        assert cache.get_stale(key) is result

    def test_purge_expired(self, clock, result, today) -> None:
        cache = MemoryCache(ttl_s=60.0, clock=clock)
        cache.put(CacheKey(ScoreType.SLEEP, today, "1.0.0"), result)
        clock.now += 120.0
        assert cache.purge_expired() == 1
        assert cache.stats.evictions == 1
        assert cache.stats.size == 0

    def test_invalidate(self, clock, result, today) -> None:
        cache = MemoryCache(clock=clock)
        key = CacheKey(ScoreType.SLEEP, today, "1.0.0")
        cache.put(key, result)
        assert cache.invalidate(key)
        assert not cache.invalidate(key)
        assert cache.stats.invalidations == 1


class TestCoordinator:
    @pytest.mark.asyncio
    async def test_write_through_both_tiers(self, coordinator, result, today) -> None:
        await coordinator.put(result)
        assert coordinator.peek(ScoreType.SLEEP, today) is result
        assert await coordinator.durable.get(ScoreType.SLEEP, today) == result.to_dict()

    @pytest.mark.asyncio
    async def test_write_purges_expired_entries(self, coordinator, clock, result, today) -> None:
        await coordinator.put(result)
        clock.now += 120.0
        await coordinator.put(dataclasses.replace(result, day=today + timedelta(days=1)))

        stats = coordinator.stats
        assert stats.size == 1
        assert stats.evictions == 1
        # The durable tier still answers for the purged day
        last = await coordinator.last_good(ScoreType.SLEEP, today, lookback_days=0)
        assert last.score == 82.0

    @pytest.mark.asyncio
    async def test_durable_hit_is_promoted(self, coordinator, result, today) -> None:
        await coordinator.durable.put(ScoreType.SLEEP, today, result.to_dict())
        restored = await coordinator.get(ScoreType.SLEEP, today)
        assert restored.fidelity is Fidelity.RESTORED
        assert restored.score == 82.0
        assert restored.sub_scores == result.sub_scores
        assert coordinator.peek(ScoreType.SLEEP, today) == restored

    @pytest.mark.asyncio
    async def test_breakdownless_record_is_reconstructed(self, coordinator, result, today) -> None:
        bare = dict(result.to_dict(), sub_scores=[])
        await coordinator.durable.put(ScoreType.SLEEP, today, bare)
        restored = await coordinator.get(ScoreType.SLEEP, today)
        assert restored.fidelity is Fidelity.RECONSTRUCTED
        assert len(restored.sub_scores) == 5
        assert all(s.value == 82.0 for s in restored.sub_scores)
        assert restored.looks_reconstructed
        assert not restored.satisfies_throttle

    @pytest.mark.asyncio
    async def test_other_version_ignored(self, clock, result, today) -> None:
        coordinator = CacheCoordinator(
            InMemoryDurableStore(), MemoryCache(clock=clock), versions={ScoreType.SLEEP: "2.0.0"}
        )
        await coordinator.durable.put(ScoreType.SLEEP, today, result.to_dict())
        assert await coordinator.get(ScoreType.SLEEP, today) is None

    @pytest.mark.asyncio
    async def test_malformed_record_discarded(self, coordinator, result, today) -> None:
        await coordinator.durable.put(
            ScoreType.SLEEP, today, dict(result.to_dict(), band="NOT_A_BAND")
        )
        assert await coordinator.get(ScoreType.SLEEP, today) is None

    @pytest.mark.asyncio
    async def test_invalidate_leaves_durable_tier(self, coordinator, result, today) -> None:
        await coordinator.put(result)
        assert coordinator.invalidate(ScoreType.SLEEP, today)
        assert coordinator.peek(ScoreType.SLEEP, today) is None
        again = await coordinator.get(ScoreType.SLEEP, today)
        assert again.fidelity is Fidelity.RESTORED

    @pytest.mark.asyncio
    async def test_expired_not_served_as_fresh(self, coordinator, clock, result, today) -> None:
        await coordinator.put(result)
        clock.now += 3600.0
        assert coordinator.peek(ScoreType.SLEEP, today) is None

    @pytest.mark.asyncio
    async def test_last_good_is_degraded(self, coordinator, clock, result, today) -> None:
        yesterday = dataclasses.replace(result, day=today - timedelta(days=1))
        await coordinator.put(yesterday)
        clock.now += 3600.0
        fallback = await coordinator.last_good(ScoreType.SLEEP, today)
        assert fallback.day == yesterday.day
        assert fallback.fidelity is Fidelity.DEGRADED
        assert not fallback.satisfies_throttle

    @pytest.mark.asyncio
    async def test_last_good_respects_lookback(self, coordinator, result, today) -> None:
        old = dataclasses.replace(result, day=today - timedelta(days=9))
        await coordinator.put(old)
        assert await coordinator.last_good(ScoreType.SLEEP, today, lookback_days=7) is None

    @pytest.mark.asyncio
    async def test_last_good_skips_placeholders(self, coordinator, result, today) -> None:
        await coordinator.put(dataclasses.replace(result, is_placeholder=True))
        assert await coordinator.last_good(ScoreType.SLEEP, today) is None

    @pytest.mark.asyncio
    async def test_score_history_skips_placeholders(self, coordinator, result, today) -> None:
        await coordinator.put(dataclasses.replace(result, day=today - timedelta(days=1)))
        await coordinator.put(
            dataclasses.replace(result, day=today - timedelta(days=2), is_placeholder=True)
        )
        await coordinator.put(result)

        history = await coordinator.score_history(ScoreType.SLEEP, today, 3)
        assert history == {today - timedelta(days=1): 82.0}

    @pytest.mark.asyncio
    async def test_records(self, coordinator, today, now) -> None:
        assert await coordinator.get_record(ScoreType.SLEEP) is None
        record = ComputationRecord(ScoreType.SLEEP, today, now)
        await coordinator.put_record(record)
        assert await coordinator.get_record(ScoreType.SLEEP) == record


class TestJsonFileDurableStore:
    @pytest.mark.asyncio
    async def test_survives_new_instance(self, tmp_path: Path, result, today, now) -> None:
        store = JsonFileDurableStore(tmp_path)
        await store.put(ScoreType.SLEEP, today, result.to_dict())
        await store.put_record(ComputationRecord(ScoreType.SLEEP, today, now))

        reopened = JsonFileDurableStore(tmp_path)
        assert await reopened.get(ScoreType.SLEEP, today) == result.to_dict()
        record = await reopened.get_record(ScoreType.SLEEP)
        assert record.day == today
        assert record.computed_at == now

    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, tmp_path: Path, today) -> None:
        store = JsonFileDurableStore(tmp_path / "nested")
        assert await store.get(ScoreType.STRAIN, today) is None
        assert await store.get_record(ScoreType.STRAIN) is None

    @pytest.mark.asyncio
    async def test_corrupt_file_starts_empty(self, tmp_path: Path, today) -> None:
        (tmp_path / JsonFileDurableStore.FILE_NAME).write_text("{not json")
        assert await JsonFileDurableStore(tmp_path).get(ScoreType.SLEEP, today) is None
