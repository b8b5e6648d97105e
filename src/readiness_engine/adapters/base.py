"""Abstract interfaces for the platforms the engine reads from.

The engine never talks to a wearable or workout platform directly; a
concrete adapter (see ``garmin_client.sources``) implements these.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date

from readiness_engine.models.activity import RawActivity
from readiness_engine.models.metrics import AthleteProfile, DailyMetricSample


class ActivitySource(ABC):
    """A provider of workout history (e.g. Garmin, Strava, Intervals.icu)."""

    name: str = "base"

    @abstractmethod
    async def fetch_activities(self, days_back: int) -> list[RawActivity]:
        """Workouts that started within the last *days_back* days."""
        ...

    async def is_authorized(self) -> bool:
        return True


class PhysiologicalSource(ABC):
    """A provider of daily physiological samples (HRV, RHR, sleep, steps)."""

    name: str = "base"

    @abstractmethod
    async def fetch_daily_metrics(self, day: date) -> DailyMetricSample | None:
        """The sample for *day*, or None if the platform has nothing yet."""
        ...

    @abstractmethod
    async def fetch_historical_metrics(self, days: int) -> list[DailyMetricSample]:
        """Samples for the *days* days before today, in any order."""
        ...

    @abstractmethod
    async def is_authorized(self) -> bool:
        ...


class AthleteProfileProvider(ABC):
    @abstractmethod
    async def get_profile(self) -> AthleteProfile:
        ...


class StaticProfileProvider(AthleteProfileProvider):
    """Serves a fixed profile, for configured athletes or tests."""

    def __init__(self, profile: AthleteProfile | None = None) -> None:
        self._profile = profile or AthleteProfile()

    async def get_profile(self) -> AthleteProfile:
        return self._profile
