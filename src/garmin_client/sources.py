"""Engine adapters backed by GarminClient.

The client is blocking, so every call runs on a worker thread. Garmin
errors stop here: they surface to the engine as ``DataUnavailable`` or as
``is_authorized() == False``.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Callable

from garmin_client.client import GarminClient
from garmin_client.exceptions import GarminAPIError, GarminAuthError, GarminClientError
from garmin_client.metrics_mapper import map_activities, map_daily_metrics, map_profile
from readiness_engine.adapters.base import (
    ActivitySource,
    AthleteProfileProvider,
    PhysiologicalSource,
)
from readiness_engine.exceptions import DataUnavailable
from readiness_engine.models.activity import RawActivity
from readiness_engine.models.metrics import AthleteProfile, DailyMetricSample

logger = logging.getLogger(__name__)


async def _authorized(client: GarminClient) -> bool:
    try:
        return await asyncio.to_thread(client.is_authorized)
    except GarminClientError:
        logger.warning("Garmin authorization check failed", exc_info=True)
        return False


class GarminActivitySource(ActivitySource):
    name = "garmin"

    def __init__(self, client: GarminClient, today: Callable[[], date] = date.today) -> None:
        self._client = client
        self._today = today

    async def fetch_activities(self, days_back: int) -> list[RawActivity]:
        end = self._today()
        start = end - timedelta(days=days_back)
        try:
            raw = await asyncio.to_thread(self._client.pull_activities, start, end)
        except GarminClientError as exc:
            if isinstance(exc, GarminAPIError) and not exc.transient:
                logger.warning("Garmin rejected the activity request: %s", exc)
            raise DataUnavailable(f"Garmin activities unavailable: {exc}") from exc
        activities = map_activities(raw)
        logger.debug("Mapped %d of %d Garmin activities", len(activities), len(raw))
        return activities

    async def is_authorized(self) -> bool:
        return await _authorized(self._client)


class GarminMetricsSource(PhysiologicalSource):
    """Daily wellness samples from Garmin.

    Days before today are final once Garmin has them, so they are kept in
    memory and pulled only once.
    """

    name = "garmin"

    def __init__(self, client: GarminClient, today: Callable[[], date] = date.today) -> None:
        self._client = client
        self._today = today
        self._history: dict[date, DailyMetricSample] = {}

    async def fetch_daily_metrics(self, day: date) -> DailyMetricSample | None:
        return await asyncio.to_thread(self._pull_day, day)

    async def fetch_historical_metrics(self, days: int) -> list[DailyMetricSample]:
        today = self._today()
        wanted = [today - timedelta(days=offset) for offset in range(1, days + 1)]
        missing = [day for day in wanted if day not in self._history]
        if missing:
            await asyncio.to_thread(self._pull_history, missing)
        return [self._history[day] for day in wanted if day in self._history]

    async def is_authorized(self) -> bool:
        return await _authorized(self._client)

    def _pull_day(self, day: date) -> DailyMetricSample | None:
        try:
            raw = self._client.pull_daily_metrics(day)
        except GarminAuthError as exc:
            raise DataUnavailable(f"Garmin session unavailable: {exc}") from exc
        return map_daily_metrics(raw, day, recorded_at=datetime.now(timezone.utc))

    def _pull_history(self, days: list[date]) -> None:
        for day in days:
            try:
                sample = self._pull_day(day)
            except DataUnavailable:
                logger.warning("Stopping history pull at %s", day, exc_info=True)
                return
            if sample is not None:
                self._history[day] = sample
        logger.info("Pulled %d days of Garmin history", len(days))


class GarminProfileProvider(AthleteProfileProvider):
    """Athlete profile from Garmin, layered over configured defaults."""

    def __init__(self, client: GarminClient, defaults: AthleteProfile | None = None) -> None:
        self._client = client
        self._defaults = defaults or AthleteProfile()
        self._profile: AthleteProfile | None = None

    async def get_profile(self) -> AthleteProfile:
        if self._profile is None:
            try:
                raw = await asyncio.to_thread(self._client.pull_profile)
            except GarminClientError as exc:
                raise DataUnavailable(f"Garmin profile unavailable: {exc}") from exc
            self._profile = map_profile(raw, self._defaults)
        return self._profile
