"""CacheCoordinator — tiered read/write over the memory and durable tiers."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping, Sequence
from datetime import date, timedelta
from typing import Any

from readiness_engine.cache.durable import DurableStore
from readiness_engine.cache.keys import CacheKey
from readiness_engine.cache.memory import CacheStats, MemoryCache
from readiness_engine.models.enums import (
    FALLBACK_LOOKBACK_DAYS,
    RECOVERY_WEIGHTS,
    SLEEP_WEIGHTS,
    STRAIN_COMPONENT_WEIGHTS,
    Fidelity,
    ScoreType,
)
from readiness_engine.models.score import ComputationRecord, ScoreResult, SubScore

logger = logging.getLogger(__name__)

DEFAULT_VERSIONS: dict[ScoreType, str] = {score_type: "1.0.0" for score_type in ScoreType}
DEFAULT_SUB_SCORE_NAMES: dict[ScoreType, tuple[str, ...]] = {
    ScoreType.SLEEP: tuple(SLEEP_WEIGHTS),
    ScoreType.RECOVERY: tuple(RECOVERY_WEIGHTS),
    ScoreType.STRAIN: tuple(STRAIN_COMPONENT_WEIGHTS),
}


def reconstruct_breakdown(result: ScoreResult, names: Sequence[str]) -> ScoreResult:
    """Fill a breakdown-less result with every sub-score equal to the overall score.

    The equal-weights pattern is the recognizable signature of a
    reconstruction, which keeps it from ever satisfying the daily throttle.
    """
    share = 1.0 / len(names) if names else 0.0
    sub_scores = tuple(
        SubScore(name=name, value=result.score, weight=share, contribution=result.score * share)
        for name in names
    )
    return dataclasses.replace(
        result,
        sub_scores=sub_scores,
        reduced_confidence=True,
        fidelity=Fidelity.RECONSTRUCTED,
    )


class CacheCoordinator:
    """Read path: fresh Tier 1 → Tier 2 (promoted) → None.

    Write path: Tier 1 then Tier 2. Invalidation touches Tier 1 only; the
    durable tier is the system of record and is superseded, never erased.
    """

    def __init__(
        self,
        durable: DurableStore,
        memory: MemoryCache | None = None,
        versions: Mapping[ScoreType, str] | None = None,
        sub_score_names: Mapping[ScoreType, Sequence[str]] | None = None,
    ) -> None:
        self.durable = durable
        self.memory = memory or MemoryCache()
        self.versions = dict(DEFAULT_VERSIONS)
        self.versions.update(versions or {})
        self.sub_score_names = dict(DEFAULT_SUB_SCORE_NAMES)
        self.sub_score_names.update({k: tuple(v) for k, v in (sub_score_names or {}).items()})

    def key(self, score_type: ScoreType, day: date) -> CacheKey:
        return CacheKey(score_type, day, self.versions[score_type])

    async def get(self, score_type: ScoreType, day: date) -> ScoreResult | None:
        key = self.key(score_type, day)
        cached = self.memory.get(key)
        if cached is not None:
            return cached

        restored = self._restore(await self.durable.get(score_type, day), key)
        if restored is None:
            return None
        logger.debug("Promoted %s from durable tier (%s)", key, restored.fidelity.name)
        self.memory.put(key, restored)
        return restored

    def peek(self, score_type: ScoreType, day: date) -> ScoreResult | None:
        """Fresh Tier 1 entry only; never touches the durable tier."""
        return self.memory.get(self.key(score_type, day))

    async def put(self, result: ScoreResult) -> None:
        key = CacheKey(result.score_type, result.day, result.algorithm_version)
        purged = self.memory.purge_expired()
        if purged:
            logger.debug("Purged %d expired Tier 1 entries", purged)
        self.memory.put(key, result)
        await self.durable.put(result.score_type, result.day, result.to_dict())

    def invalidate(self, score_type: ScoreType, day: date) -> bool:
        return self.memory.invalidate(self.key(score_type, day))

    async def last_good(
        self,
        score_type: ScoreType,
        day: date,
        lookback_days: int = FALLBACK_LOOKBACK_DAYS,
    ) -> ScoreResult | None:
        """Newest real result within *lookback_days*, marked DEGRADED.

        This is the only path that may return an entry past its TTL.
        """
        for offset in range(lookback_days + 1):
            key = self.key(score_type, day - timedelta(days=offset))
            candidate = self.memory.get_stale(key)
            if candidate is None:
                candidate = self._restore(
                    await self.durable.get(score_type, key.day), key
                )
            if candidate is not None and not candidate.is_placeholder:
                logger.info("Falling back to %s for %s", key, day.isoformat())
                return dataclasses.replace(candidate, fidelity=Fidelity.DEGRADED)
        return None

    async def score_history(
        self, score_type: ScoreType, day: date, days: int
    ) -> dict[date, float]:
        """Real scores for the *days* days before *day*, placeholders skipped."""
        history: dict[date, float] = {}
        for offset in range(1, days + 1):
            result = await self.get(score_type, day - timedelta(days=offset))
            if result is not None and not result.is_placeholder:
                history[result.day] = result.score
        return history

    async def get_record(self, score_type: ScoreType) -> ComputationRecord | None:
        return await self.durable.get_record(score_type)

    async def put_record(self, record: ComputationRecord) -> None:
        await self.durable.put_record(record)

    @property
    def stats(self) -> CacheStats:
        return self.memory.stats

    def _restore(self, record: dict[str, Any] | None, key: CacheKey) -> ScoreResult | None:
        if not record:
            return None
        if str(record.get("algorithm_version", "")) != key.algorithm_version:
            logger.debug("Ignoring durable record for %s from another algorithm version", key)
            return None
        try:
            result = ScoreResult.from_dict(record, fidelity=Fidelity.RESTORED)
        except (KeyError, ValueError, TypeError):
            logger.warning("Discarding malformed durable record for %s", key)
            return None
        if not result.sub_scores and not result.is_placeholder:
            return reconstruct_breakdown(result, self.sub_score_names[key.score_type])
        return result
