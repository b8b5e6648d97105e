"""ReadinessEngine — the one object an application constructs at startup.

Holds the adapters, the cache, the calculator registry and one
ComputationOrchestrator per score type. Recovery's orchestrator depends on
Sleep's.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Iterable, Sequence
from datetime import date, datetime, timezone
from typing import Callable

from readiness_engine.adapters.base import (
    ActivitySource,
    AthleteProfileProvider,
    PhysiologicalSource,
    StaticProfileProvider,
)
from readiness_engine.cache import (
    CacheCoordinator,
    CacheStats,
    DurableStore,
    InMemoryDurableStore,
    JsonFileDurableStore,
    MemoryCache,
)
from readiness_engine.calculators.base import ScoreInputs
from readiness_engine.calculators.recovery import RecoveryCalculator
from readiness_engine.config import EngineSettings
from readiness_engine.exceptions import AuthorizationDenied, DataUnavailable
from readiness_engine.insights import InsightsCalculator
from readiness_engine.math.baselines import compute_baseline
from readiness_engine.models.activity import RawActivity, UnifiedActivity
from readiness_engine.models.enums import RECOVERY_DEBT_WINDOW_DAYS, ComputationState, ScoreType
from readiness_engine.models.insights import DailyInsights
from readiness_engine.models.metrics import AthleteProfile
from readiness_engine.models.score import ScoreOutcome, ScoreResult
from readiness_engine.models.training_load import TrainingLoadSeries
from readiness_engine.orchestration import ComputationOrchestrator, ObserverRegistry
from readiness_engine.orchestration.observers import ScoreCallback
from readiness_engine.registry import CalculatorRegistry
from readiness_engine.training_load_engine import TrainingLoadEngine, yesterday_tss
from readiness_engine.unifier import ActivityUnifier

logger = logging.getLogger(__name__)

# Strain can stand on logged workouts alone
SAMPLE_REQUIRED = frozenset({ScoreType.SLEEP, ScoreType.RECOVERY})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def activity_fingerprint(activities: Iterable[UnifiedActivity]) -> tuple[tuple[str, float], ...]:
    """Identity of an activity set; changes when any workout or its TSS changes."""
    return tuple(sorted((a.key, round(a.tss, 3)) for a in activities))


class ReadinessEngine:
    """Computes the daily Sleep, Recovery and Strain scores.

    Usage:
        engine = ReadinessEngine(
            activity_sources=[garmin_activities],
            physiological_source=garmin_metrics,
            profile_provider=garmin_profile,
            settings=EngineSettings.from_env(),
        )
        unsubscribe = engine.subscribe(print)
        outcomes = await engine.calculate_all()
    """

    def __init__(
        self,
        activity_sources: Sequence[ActivitySource],
        physiological_source: PhysiologicalSource,
        profile_provider: AthleteProfileProvider | None = None,
        durable_store: DurableStore | None = None,
        authoritative_source: ActivitySource | None = None,
        settings: EngineSettings | None = None,
        clock: Callable[[], datetime] = _utcnow,
        today: Callable[[], date] = date.today,
        registry: CalculatorRegistry | None = None,
    ) -> None:
        self.settings = settings or EngineSettings()
        self.activity_sources = list(activity_sources)
        self.physiological_source = physiological_source
        self.profile_provider = profile_provider or StaticProfileProvider()
        self._clock = clock
        self._today = today

        if registry is None:
            registry = CalculatorRegistry()
            registry.discover_calculators()
            registry.register(RecoveryCalculator(self.settings.recovery_weights))
        self.registry = registry

        if durable_store is None:
            if self.settings.store_dir is not None:
                durable_store = JsonFileDurableStore(self.settings.store_dir)
            else:
                durable_store = InMemoryDurableStore()
        calculators = registry.get_all_calculators()
        self.cache = CacheCoordinator(
            durable_store,
            MemoryCache(self.settings.cache_ttl_s),
            versions={c.score_type: c.version for c in calculators},
            sub_score_names={c.score_type: tuple(c.weights) for c in calculators},
        )

        self.observers = ObserverRegistry()
        self.unifier = ActivityUnifier(self.settings.estimated_tss_per_hour)
        self.insights_calculator = InsightsCalculator()
        self.training_load_engine = TrainingLoadEngine(
            self.settings, authoritative_source, self.unifier
        )
        self._load_lock = asyncio.Lock()
        self._load_cache: tuple[tuple, TrainingLoadSeries] | None = None

        self.orchestrators: dict[ScoreType, ComputationOrchestrator] = {}
        for score_type in (ScoreType.SLEEP, ScoreType.RECOVERY, ScoreType.STRAIN):
            self.orchestrators[score_type] = ComputationOrchestrator(
                score_type,
                functools.partial(self._compute, score_type),
                self.cache,
                self.observers,
                settings=self.settings,
                authorize=self._authorize,
                dependency=(
                    self.orchestrators[ScoreType.SLEEP]
                    if score_type is ScoreType.RECOVERY
                    else None
                ),
                clock=clock,
                today=today,
            )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def calculate(
        self, score_type: ScoreType, day: date | None = None, force: bool = False
    ) -> ScoreOutcome:
        return await self.orchestrators[score_type].calculate(day, force=force)

    async def calculate_all(
        self, day: date | None = None, force: bool = False
    ) -> dict[ScoreType, ScoreOutcome]:
        """Sleep first, then Recovery and Strain concurrently."""
        day = day or self._today()
        sleep = await self.calculate(ScoreType.SLEEP, day, force)
        recovery, strain = await asyncio.gather(
            self.calculate(ScoreType.RECOVERY, day, force),
            self.calculate(ScoreType.STRAIN, day, force),
        )
        return {ScoreType.SLEEP: sleep, ScoreType.RECOVERY: recovery, ScoreType.STRAIN: strain}

    async def insights(self, day: date | None = None, force: bool = False) -> DailyInsights:
        """Illness and wellness flags, recovery debt and training advice for *day*.

        Resolves the daily scores first so today's recovery feeds the
        assessment. Earlier recovery scores come from the cache tiers.
        """
        day = day or self._today()
        if not await self._authorize():
            raise AuthorizationDenied()
        outcomes = await self.calculate_all(day, force)
        inputs = await self.build_inputs(day, require_sample=False)
        inputs = inputs.with_upstream(
            sleep_result=outcomes[ScoreType.SLEEP].result,
            recovery_result=outcomes[ScoreType.RECOVERY].result,
        )
        recovery_history = await self.cache.score_history(
            ScoreType.RECOVERY, day, RECOVERY_DEBT_WINDOW_DAYS - 1
        )
        return await asyncio.to_thread(
            self.insights_calculator.calculate, inputs, recovery_history
        )

    def subscribe(self, callback: ScoreCallback) -> Callable[[], None]:
        return self.observers.subscribe(callback)

    def state(self, score_type: ScoreType) -> ComputationState:
        return self.orchestrators[score_type].state

    def clear_cache(self, score_type: ScoreType | None = None, day: date | None = None) -> None:
        """Drop in-memory entries so the next read goes to the durable store."""
        day = day or self._today()
        for st in [score_type] if score_type is not None else list(ScoreType):
            self.cache.invalidate(st, day)
        self._load_cache = None

    def cache_stats(self) -> CacheStats:
        return self.cache.stats

    async def training_load(
        self,
        day: date | None = None,
        activities: Sequence[UnifiedActivity] | None = None,
        profile: AthleteProfile | None = None,
    ) -> TrainingLoadSeries:
        """Load series ending at *day*; recomputed only when the activity set changes."""
        day = day or self._today()
        if profile is None:
            profile = await self._profile()
        if activities is None:
            activities = self.unifier.unify(await self._fetch_activity_lists(), profile)

        cache_key = (day, activity_fingerprint(activities))
        async with self._load_lock:
            if self._load_cache is not None and self._load_cache[0] == cache_key:
                return self._load_cache[1]
            series = await self.training_load_engine.resolve(activities, profile, day)
            self._load_cache = (cache_key, series)
        logger.info(
            "Training load for %s recomputed from %d activities (%s)",
            day,
            len(activities),
            series.origin,
        )
        return series

    # ------------------------------------------------------------------
    # Input bundles
    # ------------------------------------------------------------------

    async def build_inputs(self, day: date, require_sample: bool = True) -> ScoreInputs:
        """Fetch and derive everything the calculators need for *day*.

        Without *require_sample* a missing physiological sample is passed on
        as None and the calculator decides whether it can still score.
        """
        computed_at = self._clock()
        sample, history, profile, activity_lists = await asyncio.gather(
            self.physiological_source.fetch_daily_metrics(day),
            self.physiological_source.fetch_historical_metrics(self.settings.history_fetch_days),
            self._profile(),
            self._fetch_activity_lists(),
        )
        if sample is None and require_sample:
            raise DataUnavailable(f"No physiological sample for {day}")

        baseline = compute_baseline(history, day, self.settings.baseline_window_days)
        activities = self.unifier.unify(activity_lists, profile)
        series = await self.training_load(day, activities, profile)
        return ScoreInputs(
            day=day,
            computed_at=computed_at,
            sample=sample,
            history=tuple(history),
            baseline=baseline,
            profile=profile,
            activities=tuple(activities),
            training_load=series.on(day),
            yesterday_tss=yesterday_tss(activities, day),
        )

    async def _compute(
        self, score_type: ScoreType, day: date, upstream: ScoreResult | None
    ) -> ScoreResult:
        calculator = self.registry.get(score_type)
        if calculator is None:
            raise LookupError(f"No calculator registered for {score_type.name}")
        inputs = await self.build_inputs(day, require_sample=score_type in SAMPLE_REQUIRED)
        if score_type is ScoreType.RECOVERY:
            inputs = inputs.with_upstream(sleep_result=upstream)
        elif score_type is ScoreType.STRAIN:
            inputs = inputs.with_upstream(
                sleep_result=self.cache.peek(ScoreType.SLEEP, day),
                recovery_result=self.cache.peek(ScoreType.RECOVERY, day),
            )
        return await asyncio.to_thread(calculator.calculate, inputs)

    async def _authorize(self) -> bool:
        return await self.physiological_source.is_authorized()

    async def _profile(self) -> AthleteProfile:
        try:
            return await self.profile_provider.get_profile()
        except Exception:
            logger.warning("Profile provider failed; using defaults", exc_info=True)
            return AthleteProfile()

    async def _fetch_activity_lists(self) -> list[list[RawActivity]]:
        """Every source's activities, in priority order; failing sources are skipped."""
        days_back = self.settings.training_load_window_days
        return list(
            await asyncio.gather(
                *(self._fetch_source(source, days_back) for source in self.activity_sources)
            )
        )

    async def _fetch_source(self, source: ActivitySource, days_back: int) -> list[RawActivity]:
        try:
            if not await source.is_authorized():
                logger.info("Activity source %s not authorized; skipping", source.name)
                return []
            activities = await source.fetch_activities(days_back)
        except Exception:
            logger.warning("Activity source %s failed; skipping", source.name, exc_info=True)
            return []
        logger.debug("Fetched %d activities from %s", len(activities), source.name)
        return list(activities)
