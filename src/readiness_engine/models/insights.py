"""Derived daily insights: illness and wellness flags, recovery debt, training advice."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from readiness_engine.models.enums import (
    ILLNESS_MIN_CONFIDENCE,
    READINESS_INTENSITY_FACTORS,
    READINESS_TSS_RANGES,
    IllnessSeverity,
    IllnessSignalType,
    RecoveryDebtBand,
    TrainingRecommendation,
    WellnessAlertType,
    WellnessSeverity,
)


@dataclass(frozen=True)
class IllnessSignal:
    """One metric out of line with its baseline; deviation in percent."""

    kind: IllnessSignalType
    deviation_pct: float
    value: float
    baseline: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.name,
            "deviation_pct": self.deviation_pct,
            "value": self.value,
            "baseline": self.baseline,
        }


@dataclass(frozen=True)
class IllnessIndicator:
    day: date
    severity: IllnessSeverity
    confidence: float
    signals: tuple[IllnessSignal, ...]
    recommendation: str

    @property
    def primary_signal(self) -> IllnessSignal | None:
        if not self.signals:
            return None
        return max(self.signals, key=lambda s: abs(s.deviation_pct))

    @property
    def is_significant(self) -> bool:
        return (
            self.severity is not IllnessSeverity.LOW
            and self.confidence >= ILLNESS_MIN_CONFIDENCE
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day.isoformat(),
            "severity": self.severity.name,
            "confidence": self.confidence,
            "signals": [s.to_dict() for s in self.signals],
            "recommendation": self.recommendation,
        }


@dataclass(frozen=True)
class WellnessAlert:
    """Several metrics held outside their normal range for consecutive days."""

    day: date
    severity: WellnessSeverity
    kind: WellnessAlertType
    affected: tuple[str, ...]
    trend_days: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day.isoformat(),
            "severity": self.severity.name,
            "kind": self.kind.name,
            "affected": list(self.affected),
            "trend_days": self.trend_days,
        }


@dataclass(frozen=True)
class RecoveryDebt:
    as_of: date
    consecutive_days: int
    band: RecoveryDebtBand
    average_recovery: float | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "as_of": self.as_of.isoformat(),
            "consecutive_days": self.consecutive_days,
            "band": self.band.name,
            "average_recovery": self.average_recovery,
        }


@dataclass(frozen=True)
class ReadinessAssessment:
    """HRV-guided training advice.

    The four signals are on a -100..+100 scale where positive favors
    training; ``confidence`` is 0-100 and reflects both data coverage and
    how clearly the signals agree.
    """

    recommendation: TrainingRecommendation
    confidence: float
    hrv_trend_signal: float
    hrv_stability_signal: float
    recovery_signal: float
    form_signal: float
    reasoning: tuple[str, ...] = ()

    @property
    def tss_range(self) -> tuple[int, int]:
        return READINESS_TSS_RANGES[self.recommendation]

    @property
    def intensity_factor(self) -> float:
        return READINESS_INTENSITY_FACTORS[self.recommendation]

    def to_dict(self) -> dict[str, Any]:
        return {
            "recommendation": self.recommendation.name,
            "confidence": self.confidence,
            "tss_range": list(self.tss_range),
            "intensity_factor": self.intensity_factor,
            "hrv_trend_signal": self.hrv_trend_signal,
            "hrv_stability_signal": self.hrv_stability_signal,
            "recovery_signal": self.recovery_signal,
            "form_signal": self.form_signal,
            "reasoning": list(self.reasoning),
        }


@dataclass(frozen=True)
class DailyInsights:
    day: date
    computed_at: datetime
    illness: IllnessIndicator | None
    wellness: WellnessAlert | None
    recovery_debt: RecoveryDebt
    readiness: ReadinessAssessment

    def to_dict(self) -> dict[str, Any]:
        return {
            "day": self.day.isoformat(),
            "computed_at": self.computed_at.isoformat(),
            "illness": self.illness.to_dict() if self.illness else None,
            "wellness": self.wellness.to_dict() if self.wellness else None,
            "recovery_debt": self.recovery_debt.to_dict(),
            "readiness": self.readiness.to_dict(),
        }
