"""Cache keys namespaced by algorithm version."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from readiness_engine.models.enums import ScoreType


@dataclass(frozen=True)
class CacheKey:
    """(score type, day, algorithm version).

    Bumping a calculator's version changes every key it produces, so
    entries written by an older algorithm are simply never hit again.
    """

    score_type: ScoreType
    day: date
    algorithm_version: str

    def __str__(self) -> str:
        return f"score:{self.score_type.slug}:{self.day.isoformat()}:v{self.algorithm_version}"
