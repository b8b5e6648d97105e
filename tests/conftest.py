"""Shared test fixtures: athlete profile, physiological samples, fake adapters."""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timedelta, timezone
from typing import Callable

import pytest

from readiness_engine.adapters.base import ActivitySource, PhysiologicalSource
from readiness_engine.calculators.base import ScoreInputs
from readiness_engine.models.activity import RawActivity
from readiness_engine.models.metrics import AthleteProfile, DailyMetricSample

TODAY = date(2025, 1, 15)
NOW = datetime(2025, 1, 15, 7, 30, tzinfo=timezone.utc)


class FakeActivitySource(ActivitySource):
    """In-memory workout history; can be told to fail or to deny access."""

    def __init__(
        self,
        name: str,
        activities: list[RawActivity] | None = None,
        error: Exception | None = None,
        authorized: bool = True,
    ) -> None:
        self.name = name
        self.activities = list(activities or [])
        self.error = error
        self.authorized = authorized
        self.calls = 0

    async def fetch_activities(self, days_back: int) -> list[RawActivity]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.activities)

    async def is_authorized(self) -> bool:
        return self.authorized


class FakePhysiologicalSource(PhysiologicalSource):
    """Samples keyed by day, with optional latency to exercise deadlines."""

    name = "fake"

    def __init__(
        self,
        samples: dict[date, DailyMetricSample] | None = None,
        authorized: bool = True,
        delay_s: float = 0.0,
    ) -> None:
        self.samples = dict(samples or {})
        self.authorized = authorized
        self.delay_s = delay_s
        self.daily_calls = 0

    async def fetch_daily_metrics(self, day: date) -> DailyMetricSample | None:
        self.daily_calls += 1
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        return self.samples.get(day)

    async def fetch_historical_metrics(self, days: int) -> list[DailyMetricSample]:
        return [s for d, s in self.samples.items() if d < TODAY]

    async def is_authorized(self) -> bool:
        return self.authorized


def _sample(day: date, **overrides) -> DailyMetricSample:
    """A typical night: 7.5 h asleep of 8 h in bed, bed 23:00, up 07:00."""
    bedtime = datetime.combine(day - timedelta(days=1), datetime.min.time(), tzinfo=timezone.utc)
    fields = dict(
        hrv_ms=55.0,
        rhr_bpm=50.0,
        respiratory_rate=14.0,
        sleep_duration_s=7.5 * 3600,
        time_in_bed_s=8 * 3600,
        deep_sleep_s=1.5 * 3600,
        rem_sleep_s=1.8 * 3600,
        wake_events=2,
        bedtime=bedtime + timedelta(hours=23),
        wake_time=bedtime + timedelta(days=1, hours=7),
        steps=9000,
        active_energy_kcal=450.0,
        recorded_at=datetime.combine(day, datetime.min.time(), tzinfo=timezone.utc)
        + timedelta(hours=8),
    )
    fields.update(overrides)
    return DailyMetricSample(day=day, **fields)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_sample() -> Callable[..., DailyMetricSample]:
    return _sample


@pytest.fixture
def profile() -> AthleteProfile:
    """Recreational cyclist/runner: max HR 190, resting 50, FTP 250 W, 70 kg."""
    return AthleteProfile(max_hr=190, resting_hr=50, ftp_watts=250.0, body_mass_kg=70.0, sex="M")


@pytest.fixture
def history() -> list[DailyMetricSample]:
    """Ten stable days before TODAY."""
    return [_sample(TODAY - timedelta(days=offset)) for offset in range(1, 11)]


@pytest.fixture
def samples(history) -> dict[date, DailyMetricSample]:
    """History plus today's sample."""
    by_day = {s.day: s for s in history}
    by_day[TODAY] = _sample(TODAY)
    return by_day


@pytest.fixture
def make_activity() -> Callable[..., RawActivity]:
    def _make(
        id: str = "1",
        source: str = "garmin",
        start: datetime | None = None,
        duration_s: float = 3600.0,
        **fields,
    ) -> RawActivity:
        return RawActivity(
            id=id,
            source=source,
            start_time=start or NOW - timedelta(hours=1),
            duration_s=duration_s,
            **fields,
        )

    return _make


@pytest.fixture
def fake_activity_source() -> type[FakeActivitySource]:
    return FakeActivitySource


@pytest.fixture
def fake_physio() -> type[FakePhysiologicalSource]:
    return FakePhysiologicalSource


@pytest.fixture
def base_inputs(profile) -> ScoreInputs:
    return ScoreInputs(day=TODAY, computed_at=NOW, profile=profile)
