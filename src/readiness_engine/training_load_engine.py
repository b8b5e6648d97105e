"""TrainingLoadEngine — CTL / ATL / TSB with a sanity-checked fallback."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import date, timedelta

from readiness_engine.adapters.base import ActivitySource
from readiness_engine.config import EngineSettings
from readiness_engine.exceptions import InconsistentTrainingLoad
from readiness_engine.math.training_load import (
    calculate_load_series,
    is_degenerate,
    sum_by_day,
)
from readiness_engine.models.activity import UnifiedActivity
from readiness_engine.models.metrics import AthleteProfile
from readiness_engine.models.training_load import TrainingLoadSeries, TrainingLoadState
from readiness_engine.unifier import ActivityUnifier, daily_tss

logger = logging.getLogger(__name__)


class TrainingLoadEngine:
    """Computes the rolling load series from the unified activity stream.

    When the newest state looks degenerate (near-zero fitness or fatigue,
    or CTL and ATL nearly equal) the unified stream is distrusted and the
    series is recomputed from the single authoritative workout history,
    if one is configured.
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        authoritative_source: ActivitySource | None = None,
        unifier: ActivityUnifier | None = None,
    ) -> None:
        self.settings = settings or EngineSettings()
        self.authoritative_source = authoritative_source
        self.unifier = unifier or ActivityUnifier(self.settings.estimated_tss_per_hour)

    def compute(
        self,
        tss_by_day: Mapping[date, float] | Iterable[tuple[date, float]],
        start: date,
        end: date,
    ) -> list[TrainingLoadState]:
        """One state per day in ``[start, end]``; same-day TSS is summed."""
        if not isinstance(tss_by_day, Mapping):
            tss_by_day = sum_by_day(tss_by_day)
        return calculate_load_series(tss_by_day, start, end)

    def is_degenerate(self, state: TrainingLoadState) -> bool:
        return is_degenerate(
            state,
            ctl_min=self.settings.degenerate_ctl_min,
            atl_min=self.settings.degenerate_atl_min,
            balance_min=self.settings.degenerate_balance_min,
        )

    async def resolve(
        self,
        activities: Sequence[UnifiedActivity],
        profile: AthleteProfile,
        end: date,
        window_days: int | None = None,
    ) -> TrainingLoadSeries:
        """Load series ending at *end*, falling back to the authoritative source."""
        window_days = window_days or self.settings.training_load_window_days
        start = end - timedelta(days=window_days - 1)
        states = self.compute(daily_tss(activities), start, end)
        if not states or not self.is_degenerate(states[-1]):
            return TrainingLoadSeries(states=tuple(states), origin="unified")

        latest = states[-1]
        logger.warning(
            "%s; recomputing from authoritative source",
            InconsistentTrainingLoad(latest.ctl, latest.atl),
        )
        fallback = await self._authoritative_states(profile, start, end, window_days)
        if fallback:
            return TrainingLoadSeries(
                states=tuple(fallback),
                origin="authoritative",
                degenerate=self.is_degenerate(fallback[-1]),
            )

        logger.warning("Authoritative fallback produced no data; keeping degenerate series")
        return TrainingLoadSeries(states=tuple(states), origin="unified", degenerate=True)

    async def _authoritative_states(
        self,
        profile: AthleteProfile,
        start: date,
        end: date,
        window_days: int,
    ) -> list[TrainingLoadState]:
        source = self.authoritative_source
        if source is None:
            return []
        try:
            raw = await source.fetch_activities(window_days)
        except Exception:
            logger.warning("Authoritative source %s failed", source.name, exc_info=True)
            return []
        if not raw:
            return []
        unified = self.unifier.unify([raw], profile)
        return self.compute(daily_tss(unified), start, end)


def yesterday_tss(activities: Iterable[UnifiedActivity], day: date) -> float:
    """Total TSS of activities on the day before *day*."""
    yesterday = day - timedelta(days=1)
    return sum(a.tss for a in activities if a.day == yesterday)
