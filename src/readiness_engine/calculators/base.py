"""Abstract base class and input bundle for all score calculators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import IntEnum
from typing import Any

from readiness_engine.models.activity import UnifiedActivity
from readiness_engine.models.enums import ScoreType
from readiness_engine.models.metrics import AthleteProfile, Baseline, DailyMetricSample
from readiness_engine.models.score import ScoreResult, SubScore
from readiness_engine.models.training_load import TrainingLoadState


@dataclass(frozen=True)
class ScoreInputs:
    """Everything a calculator may read for one day.

    ``computed_at`` is stamped by whoever builds the bundle so that the
    calculators themselves never read a clock.
    """

    day: date
    computed_at: datetime
    sample: DailyMetricSample | None = None
    history: tuple[DailyMetricSample, ...] = ()
    baseline: Baseline | None = None
    profile: AthleteProfile = AthleteProfile()
    activities: tuple[UnifiedActivity, ...] = ()
    training_load: TrainingLoadState | None = None
    yesterday_tss: float | None = None
    sleep_result: ScoreResult | None = None
    recovery_result: ScoreResult | None = None
    authorized: bool = True

    @property
    def day_activities(self) -> tuple[UnifiedActivity, ...]:
        return tuple(a for a in self.activities if a.day == self.day)

    def with_upstream(
        self,
        sleep_result: ScoreResult | None = None,
        recovery_result: ScoreResult | None = None,
    ) -> ScoreInputs:
        return replace(self, sleep_result=sleep_result, recovery_result=recovery_result)


class ScoreCalculator(ABC):
    """Base class for the daily score calculators.

    Calculators are pure and synchronous: identical inputs give an equal
    ScoreResult. They are discovered automatically by the
    CalculatorRegistry.

    Subclasses must define:
        score_type: which daily score this produces
        version: algorithm version, part of every cache key
        weights: sub-score name → nominal weight (sums to 1.0)
        core_inputs: sub-score names of which at least one must be present,
            otherwise the result is a flagged placeholder
        components(): per-sub-score values, None where an input is missing
        classify(): score → band
    """

    score_type: ScoreType
    version: str
    weights: dict[str, float]
    core_inputs: tuple[str, ...]
    band_type: type[IntEnum]
    precision: int = 0

    def has_core_inputs(self, components: dict[str, float | None]) -> bool:
        return any(components.get(name) is not None for name in self.core_inputs)

    @abstractmethod
    def components(self, inputs: ScoreInputs) -> dict[str, float | None]:
        """Compute each sub-score on its own 0-100 scale, None when missing."""
        ...

    @abstractmethod
    def classify(self, score: float) -> IntEnum:
        ...

    def snapshot(self, inputs: ScoreInputs) -> dict[str, Any]:
        """JSON-safe record of the inputs the score was derived from."""
        return {}

    def calculate(self, inputs: ScoreInputs) -> ScoreResult:
        components = self.components(inputs)
        if not self.has_core_inputs(components):
            return self.placeholder(inputs)
        return self.combine(inputs, components)

    def combine(self, inputs: ScoreInputs, components: dict[str, float | None]) -> ScoreResult:
        """Weighted blend with missing sub-scores excluded and weights renormalized."""
        present = {name: value for name, value in components.items() if value is not None}
        excluded = tuple(name for name in self.weights if components.get(name) is None)
        weights = renormalize(self.weights, present)

        sub_scores = tuple(
            SubScore(
                name=name,
                value=round(present[name], 2),
                weight=weights[name],
                contribution=present[name] * weights[name],
            )
            for name in self.weights
            if name in present
        )
        raw = sum(present[name] * weights[name] for name in present)
        score = round(max(0.0, min(100.0, raw)), self.precision)
        return ScoreResult(
            score_type=self.score_type,
            day=inputs.day,
            score=float(score),
            band=self.classify(score),
            sub_scores=sub_scores,
            inputs_snapshot=self.snapshot(inputs),
            computed_at=inputs.computed_at,
            algorithm_version=self.version,
            is_personalized=inputs.authorized,
            reduced_confidence=bool(excluded),
            excluded=excluded,
        )

    def placeholder(self, inputs: ScoreInputs) -> ScoreResult:
        return placeholder_result(
            self.score_type, inputs.day, inputs.computed_at, self.version, self.band_type
        )


def renormalize(weights: dict[str, float], present: dict[str, Any]) -> dict[str, float]:
    """Scale the weights of present sub-scores so they sum to 1.0."""
    total = sum(weights[name] for name in present if name in weights)
    if total <= 0:
        return {name: 0.0 for name in present}
    return {name: weights[name] / total for name in present if name in weights}


def placeholder_result(
    score_type: ScoreType,
    day: date,
    computed_at: datetime,
    version: str,
    band_type: type[IntEnum],
) -> ScoreResult:
    """A flagged stand-in used whenever no real score can be produced."""
    return ScoreResult(
        score_type=score_type,
        day=day,
        score=0.0,
        band=band_type["LIMITED_DATA"],
        sub_scores=(),
        inputs_snapshot={},
        computed_at=computed_at,
        algorithm_version=version,
        is_personalized=False,
        is_placeholder=True,
        reduced_confidence=True,
    )


def classify_by_cuts(score: float, cuts: tuple[tuple[float, IntEnum], ...], floor: IntEnum) -> IntEnum:
    """First band whose lower bound the score reaches; cuts are highest first."""
    for lower, band in cuts:
        if score >= lower:
            return band
    return floor
