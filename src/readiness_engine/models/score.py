"""Score results, orchestration outcomes and the daily computation record."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import IntEnum
from typing import Any

from readiness_engine.models.enums import (
    BAND_TYPES,
    ComputationState,
    Fidelity,
    ScoreType,
)


@dataclass(frozen=True)
class SubScore:
    """One named component of a score.

    ``value`` is on the component's own 0..max_value scale; ``contribution``
    is what it adds to the overall score. Contributions of all sub-scores sum
    to the overall score (within rounding).
    """

    name: str
    value: float
    weight: float
    contribution: float
    max_value: float = 100.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "weight": self.weight,
            "contribution": self.contribution,
            "max_value": self.max_value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SubScore:
        return cls(
            name=str(data["name"]),
            value=float(data["value"]),
            weight=float(data["weight"]),
            contribution=float(data["contribution"]),
            max_value=float(data.get("max_value", 100.0)),
        )


@dataclass(frozen=True)
class ScoreResult:
    """A computed (or placeholder) daily score with its full breakdown."""

    score_type: ScoreType
    day: date
    score: float
    band: IntEnum
    sub_scores: tuple[SubScore, ...]
    inputs_snapshot: dict[str, Any]
    computed_at: datetime
    algorithm_version: str
    is_personalized: bool = True
    is_placeholder: bool = False
    reduced_confidence: bool = False
    excluded: tuple[str, ...] = ()
    fidelity: Fidelity = Fidelity.COMPUTED

    @property
    def looks_reconstructed(self) -> bool:
        """True when every sub-score equals the overall score.

        That pattern is what a breakdown-less record looks like after
        reconstruction, so it cannot be trusted as a real computation.
        """
        if not self.sub_scores:
            return False
        return all(sub.value == self.score for sub in self.sub_scores)

    @property
    def satisfies_throttle(self) -> bool:
        return (
            not self.is_placeholder
            and not self.looks_reconstructed
            and self.fidelity in (Fidelity.COMPUTED, Fidelity.RESTORED)
        )

    def sub_score(self, name: str) -> SubScore | None:
        for sub in self.sub_scores:
            if sub.name == name:
                return sub
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "score_type": self.score_type.name,
            "day": self.day.isoformat(),
            "score": self.score,
            "band": self.band.name,
            "sub_scores": [sub.to_dict() for sub in self.sub_scores],
            "inputs_snapshot": dict(self.inputs_snapshot),
            "computed_at": self.computed_at.isoformat(),
            "algorithm_version": self.algorithm_version,
            "is_personalized": self.is_personalized,
            "is_placeholder": self.is_placeholder,
            "reduced_confidence": self.reduced_confidence,
            "excluded": list(self.excluded),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], fidelity: Fidelity = Fidelity.RESTORED) -> ScoreResult:
        score_type = ScoreType[data["score_type"]]
        band_type = BAND_TYPES[score_type]
        return cls(
            score_type=score_type,
            day=date.fromisoformat(data["day"]),
            score=float(data["score"]),
            band=band_type[data["band"]],
            sub_scores=tuple(SubScore.from_dict(s) for s in data.get("sub_scores") or ()),
            inputs_snapshot=dict(data.get("inputs_snapshot") or {}),
            computed_at=datetime.fromisoformat(data["computed_at"]),
            algorithm_version=str(data.get("algorithm_version", "")),
            is_personalized=bool(data.get("is_personalized", True)),
            is_placeholder=bool(data.get("is_placeholder", False)),
            reduced_confidence=bool(data.get("reduced_confidence", False)),
            excluded=tuple(data.get("excluded") or ()),
            fidelity=fidelity,
        )


@dataclass(frozen=True)
class ComputationRecord:
    """Last calendar day a real (non-placeholder) score was computed."""

    score_type: ScoreType
    day: date
    computed_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "score_type": self.score_type.name,
            "day": self.day.isoformat(),
            "computed_at": self.computed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ComputationRecord:
        return cls(
            score_type=ScoreType[data["score_type"]],
            day=date.fromisoformat(data["day"]),
            computed_at=datetime.fromisoformat(data["computed_at"]),
        )


@dataclass(frozen=True)
class ScoreOutcome:
    """What a caller of ``ComputationOrchestrator.calculate()`` receives.

    ``no_data`` marks the explicit "no data" state (authorization revoked or
    data exhausted); it is never accompanied by a real numeric score.
    ``retryable`` is the soft retry signal for timeouts and transient failures.
    """

    score_type: ScoreType
    day: date
    state: ComputationState
    result: ScoreResult | None = None
    retryable: bool = False
    no_data: bool = False
    started_at: datetime | None = None
    message: str = ""


@dataclass(frozen=True)
class ScoreUpdate:
    """Pushed to subscribers whenever a score changes or is cleared."""

    score_type: ScoreType
    day: date
    result: ScoreResult | None
    state: ComputationState
