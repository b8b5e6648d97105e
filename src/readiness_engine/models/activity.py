"""Activity records: raw per-provider workouts and the unified stream."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime

from readiness_engine.models.enums import PROVENANCE_CONFIDENCE, TSSProvenance


@dataclass(frozen=True)
class RawActivity:
    """A workout exactly as one provider reported it.

    ``linked_ids`` carries explicit cross-source links, expressed as
    ``"<source>:<id>"`` keys of the same workout in other providers.
    """

    id: str
    source: str
    start_time: datetime
    duration_s: float
    activity_type: str = "other"

    avg_hr: float | None = None
    avg_power: float | None = None
    normalized_power: float | None = None
    provider_tss: float | None = None
    linked_ids: frozenset[str] = field(default_factory=frozenset)

    # Strength sessions
    rpe: float | None = None
    strength_volume_kg: float | None = None
    strength_sets: int | None = None

    @property
    def key(self) -> str:
        return f"{self.source}:{self.id}"

    @property
    def day(self) -> date:
        return self.start_time.date()

    @property
    def duration_min(self) -> float:
        return max(0.0, self.duration_s) / 60.0

    @property
    def is_strength(self) -> bool:
        return self.activity_type in ("strength", "strength_training", "weight_training")


@dataclass(frozen=True)
class UnifiedActivity:
    """A deduplicated activity annotated with its training stress."""

    activity: RawActivity
    tss: float
    provenance: TSSProvenance
    merged_from: tuple[str, ...] = ()

    @property
    def key(self) -> str:
        return self.activity.key

    @property
    def start_time(self) -> datetime:
        return self.activity.start_time

    @property
    def day(self) -> date:
        return self.activity.day

    @property
    def confidence(self) -> float:
        return PROVENANCE_CONFIDENCE[self.provenance]
