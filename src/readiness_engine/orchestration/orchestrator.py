"""ComputationOrchestrator — per-score-type execution state machine.

IDLE → COMPUTING → {SUCCEEDED, TIMED_OUT, FAILED}. The terminal state
stays observable until the next call moves the machine through COMPUTING
again. Every failure mode is turned into a ScoreOutcome; the only thing
that can escape :meth:`ComputationOrchestrator.calculate` is cancellation
of the caller itself.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Callable

from readiness_engine.cache.coordinator import CacheCoordinator
from readiness_engine.calculators.base import placeholder_result
from readiness_engine.config import EngineSettings
from readiness_engine.exceptions import (
    AuthorizationDenied,
    ComputationTimeout,
    DataUnavailable,
    DependencyUnresolved,
)
from readiness_engine.models.enums import BAND_TYPES, ComputationState, Fidelity, ScoreType
from readiness_engine.models.score import (
    ComputationRecord,
    ScoreOutcome,
    ScoreResult,
    ScoreUpdate,
)
from readiness_engine.orchestration.observers import ObserverRegistry
from readiness_engine.orchestration.race import race

logger = logging.getLogger(__name__)

# (day, upstream result or None) -> result
ComputeFn = Callable[[date, "ScoreResult | None"], Awaitable[ScoreResult]]
AuthorizeFn = Callable[[], Awaitable[bool]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Flight:
    """One underlying computation; joiners await the same task."""

    day: date
    started_at: datetime
    task: asyncio.Task[ScoreOutcome]
    replaced_by: Flight | None = None

    @property
    def running(self) -> bool:
        return not self.task.done()


class ComputationOrchestrator:
    """Owns single-flight execution, daily throttling, deadlines and dependencies.

    Usage:
        sleep = ComputationOrchestrator(ScoreType.SLEEP, compute_sleep, cache, observers)
        recovery = ComputationOrchestrator(
            ScoreType.RECOVERY, compute_recovery, cache, observers, dependency=sleep
        )
        outcome = await recovery.calculate()
    """

    def __init__(
        self,
        score_type: ScoreType,
        compute: ComputeFn,
        cache: CacheCoordinator,
        observers: ObserverRegistry,
        *,
        settings: EngineSettings | None = None,
        authorize: AuthorizeFn | None = None,
        dependency: ComputationOrchestrator | None = None,
        clock: Callable[[], datetime] = _utcnow,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.score_type = score_type
        self.settings = settings or EngineSettings()
        self.dependency = dependency
        self._compute = compute
        self._cache = cache
        self._observers = observers
        self._authorize = authorize
        self._clock = clock
        self._today = today
        self._lock = asyncio.Lock()
        self._current: Flight | None = None

        self.state = ComputationState.IDLE
        self.last_outcome: ScoreOutcome | None = None
        self.computations_started = 0

    @property
    def label(self) -> str:
        return f"{self.score_type.slug} score"

    @property
    def in_flight(self) -> Flight | None:
        """The running computation, if any."""
        current = self._current
        return current if current is not None and current.running else None

    @property
    def is_computing(self) -> bool:
        return self.in_flight is not None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def calculate(self, day: date | None = None, *, force: bool = False) -> ScoreOutcome:
        """Return today's (or *day*'s) score, computing it at most once.

        A non-forced call joins a same-day computation already in flight and
        short-circuits when today's real result is already cached and access
        has not been revoked since. A forced call cancels whatever is in
        flight and starts over.
        """
        day = day or self._today()
        while True:
            async with self._lock:
                flight = self.in_flight
                if flight is None:
                    if not force:
                        cached = await self._throttled(day)
                        if cached is not None:
                            authorized = await self._still_authorized()
                            if authorized is False:
                                return self._revoke(day)
                            if authorized:
                                logger.debug("%s for %s already computed today", self.label, day)
                                return ScoreOutcome(
                                    self.score_type, day, ComputationState.SUCCEEDED, result=cached
                                )
                    joined = self._start(day)
                    break
                if force:
                    joined = self._start(day)
                    flight.replaced_by = joined
                    flight.task.cancel()
                    logger.info("Forced refresh cancelled in-flight %s for %s", self.label, flight.day)
                    break
                if flight.day == day:
                    joined = flight
                    break
            # Another day's computation is running; let it finish first.
            await asyncio.wait({flight.task})
        return await self._follow(joined)

    # ------------------------------------------------------------------
    # Flight management
    # ------------------------------------------------------------------

    def _start(self, day: date) -> Flight:
        started_at = self._clock()
        self.computations_started += 1
        self.state = ComputationState.COMPUTING
        task = asyncio.create_task(
            self._run(day, started_at), name=f"{self.score_type.slug}-{day.isoformat()}"
        )
        flight = Flight(day=day, started_at=started_at, task=task)
        self._current = flight
        return flight

    async def _follow(self, flight: Flight) -> ScoreOutcome:
        """Await a flight; if it is force-cancelled, follow its replacement."""
        while True:
            try:
                return await asyncio.shield(flight.task)
            except asyncio.CancelledError:
                replacement = flight.replaced_by
                if not flight.task.cancelled() or replacement is None:
                    raise
                if replacement.day != flight.day:
                    return ScoreOutcome(
                        self.score_type,
                        flight.day,
                        ComputationState.FAILED,
                        retryable=True,
                        started_at=flight.started_at,
                        message=f"Superseded by a forced refresh for {replacement.day}",
                    )
                flight = replacement

    def _owns(self, task: asyncio.Task | None) -> bool:
        return self._current is not None and self._current.task is task

    async def _run(self, day: date, started_at: datetime) -> ScoreOutcome:
        me = asyncio.current_task()
        outcome: ScoreOutcome | None = None
        try:
            outcome = await self._execute(day, started_at)
            return outcome
        finally:
            if self._owns(me):
                if outcome is None:
                    # Cancelled without a replacement
                    self.state = ComputationState.IDLE
                else:
                    self.state = outcome.state
                    self.last_outcome = outcome

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def _execute(self, day: date, started_at: datetime) -> ScoreOutcome:
        timeout_s = self.settings.timeout_for(self.score_type)
        try:
            result = await race(self._guarded_compute(day), timeout_s, self.label)
        except AuthorizationDenied as exc:
            return self._on_unauthorized(day, started_at, exc)
        except ComputationTimeout as exc:
            logger.warning("%s for %s timed out: %s", self.label, day, exc)
            return await self._fallback(day, started_at, ComputationState.TIMED_OUT, str(exc))
        except DataUnavailable as exc:
            logger.info("%s for %s has no data yet: %s", self.label, day, exc)
            return ScoreOutcome(
                self.score_type,
                day,
                ComputationState.FAILED,
                result=self._placeholder(day),
                retryable=True,
                no_data=True,
                started_at=started_at,
                message=str(exc),
            )
        except Exception as exc:
            logger.exception("%s for %s failed", self.label, day)
            return await self._fallback(day, started_at, ComputationState.FAILED, str(exc))
        return await self._on_success(day, started_at, result)

    async def _guarded_compute(self, day: date) -> ScoreResult:
        if self._authorize is not None and not await self._authorize():
            raise AuthorizationDenied(self.score_type.slug)
        upstream = await self._resolve_dependency(day) if self.dependency else None
        return await self._compute(day, upstream)

    async def _on_success(self, day: date, started_at: datetime, result: ScoreResult) -> ScoreOutcome:
        if not result.is_placeholder:
            try:
                await self._cache.put(result)
                await self._cache.put_record(
                    ComputationRecord(self.score_type, day, result.computed_at)
                )
            except Exception:
                logger.exception("Failed to persist %s for %s", self.label, day)
        self._observers.publish(
            ScoreUpdate(self.score_type, day, result, ComputationState.SUCCEEDED)
        )
        logger.info("%s for %s = %s", self.label, day, result.score)
        return ScoreOutcome(
            self.score_type,
            day,
            ComputationState.SUCCEEDED,
            result=result,
            retryable=result.is_placeholder,
            no_data=result.is_placeholder,
            started_at=started_at,
        )

    def _on_unauthorized(
        self, day: date, started_at: datetime, exc: AuthorizationDenied
    ) -> ScoreOutcome:
        logger.warning("%s for %s: %s", self.label, day, exc)
        self._cache.invalidate(self.score_type, day)
        self._observers.publish(ScoreUpdate(self.score_type, day, None, ComputationState.FAILED))
        return ScoreOutcome(
            self.score_type,
            day,
            ComputationState.FAILED,
            result=None,
            retryable=False,
            no_data=True,
            started_at=started_at,
            message=str(exc),
        )

    async def _fallback(
        self, day: date, started_at: datetime, state: ComputationState, message: str
    ) -> ScoreOutcome:
        try:
            result = await self._cache.last_good(
                self.score_type, day, self.settings.fallback_lookback_days
            )
        except Exception:
            logger.exception("Last-good lookup for %s failed", self.label)
            result = None
        return ScoreOutcome(
            self.score_type,
            day,
            state,
            result=result or self._placeholder(day),
            retryable=True,
            started_at=started_at,
            message=message,
        )

    async def _throttled(self, day: date) -> ScoreResult | None:
        """Today's cached real result, if the computation record says it exists."""
        try:
            record = await self._cache.get_record(self.score_type)
            if record is None or record.day != day:
                return None
            cached = await self._cache.get(self.score_type, day)
        except Exception:
            logger.warning("Throttle check for %s failed; computing", self.label, exc_info=True)
            return None
        if cached is not None and cached.satisfies_throttle:
            return cached
        return None

    async def _still_authorized(self) -> bool | None:
        """Re-check access before serving a cached score; None when the check is inconclusive."""
        if self._authorize is None:
            return True
        try:
            return await race(
                self._authorize(),
                self.settings.timeout_for(self.score_type),
                f"{self.label} authorization",
            )
        except Exception:
            logger.warning("Authorization check for %s failed; computing", self.label, exc_info=True)
            return None

    def _revoke(self, day: date) -> ScoreOutcome:
        """Access was withdrawn after today's score was cached."""
        outcome = self._on_unauthorized(
            day, self._clock(), AuthorizationDenied(self.score_type.slug)
        )
        self.state = outcome.state
        self.last_outcome = outcome
        return outcome

    def _placeholder(self, day: date) -> ScoreResult:
        return placeholder_result(
            self.score_type,
            day,
            self._clock(),
            self._cache.versions[self.score_type],
            BAND_TYPES[self.score_type],
        )

    # ------------------------------------------------------------------
    # Cross-score dependency
    # ------------------------------------------------------------------

    async def _resolve_dependency(self, day: date) -> ScoreResult | None:
        """Upstream result for *day*, or None if it cannot be had in time.

        A running upstream computation is polled with bounded backoff;
        otherwise the upstream is triggered inline. Only that one flight
        is ever observed, never one started later by someone else.
        """
        dependency = self.dependency
        if dependency is None:
            return None
        flight = dependency.in_flight
        if flight is not None and flight.day == day:
            outcome = await self._poll_flight(flight)
            if outcome is None:
                logger.warning(
                    "%s",
                    DependencyUnresolved(
                        f"{dependency.label} for {day} unresolved after "
                        f"{self.settings.dependency_wait_cap_s:.1f}s; continuing without it"
                    ),
                )
                return None
        else:
            outcome = await dependency.calculate(day)

        result = outcome.result
        if (
            result is None
            or result.day != day
            or result.is_placeholder
            or result.fidelity is Fidelity.DEGRADED
        ):
            logger.info("%s has no usable %s for %s", self.label, dependency.label, day)
            return None
        return result

    async def _poll_flight(self, flight: Flight) -> ScoreOutcome | None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.settings.dependency_wait_cap_s
        delay = self.settings.dependency_backoff_initial_s
        while True:
            if flight.task.done():
                if flight.task.cancelled():
                    return None
                return flight.task.result()
            remaining = deadline - loop.time()
            if remaining <= 0:
                return None
            await asyncio.wait({flight.task}, timeout=min(delay, remaining))
            delay = min(delay * 2, self.settings.dependency_backoff_max_s)
