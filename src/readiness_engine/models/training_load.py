"""Rolling training-load state (CTL / ATL / TSB)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class TrainingLoadState:
    """Load state at the end of one calendar day.

    ``tsb`` is always exactly ``ctl - atl``; build instances with
    :meth:`from_loads` to keep it that way.
    """

    day: date
    tss: float
    ctl: float
    atl: float
    tsb: float

    @classmethod
    def from_loads(cls, day: date, tss: float, ctl: float, atl: float) -> TrainingLoadState:
        ctl = max(0.0, ctl)
        atl = max(0.0, atl)
        return cls(day=day, tss=tss, ctl=ctl, atl=atl, tsb=ctl - atl)


@dataclass(frozen=True)
class TrainingLoadSeries:
    """A day-by-day load series plus where it came from.

    ``origin`` is ``"unified"`` for the deduplicated multi-source stream or
    ``"authoritative"`` when the sanity check forced a recompute from the
    single authoritative workout history.
    """

    states: tuple[TrainingLoadState, ...] = field(default_factory=tuple)
    origin: str = "unified"
    degenerate: bool = False

    @property
    def latest(self) -> TrainingLoadState | None:
        return self.states[-1] if self.states else None

    def on(self, day: date) -> TrainingLoadState | None:
        for state in reversed(self.states):
            if state.day == day:
                return state
        return None
