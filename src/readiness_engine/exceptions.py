"""Exception hierarchy for the readiness engine.

All of these are handled inside the orchestrator or the training-load
engine; consumers only ever see their effect on a ``ScoreOutcome``.
"""

from __future__ import annotations


class ReadinessEngineError(Exception):
    """Base exception for all readiness_engine errors."""


class AuthorizationDenied(ReadinessEngineError):
    """A data source's authorization was revoked. Terminal, never retried."""

    def __init__(self, source: str = "physiological") -> None:
        super().__init__(f"Authorization denied for {source} data")
        self.source = source


class DataUnavailable(ReadinessEngineError):
    """Required inputs are missing for now; may resolve later."""


class ComputationTimeout(ReadinessEngineError):
    """A computation exceeded its per-type deadline and was cancelled."""

    def __init__(self, label: str, timeout_s: float) -> None:
        super().__init__(f"{label} exceeded {timeout_s:.1f}s deadline")
        self.timeout_s = timeout_s


class DependencyUnresolved(ReadinessEngineError):
    """An upstream score did not resolve within the bounded wait."""


class InconsistentTrainingLoad(ReadinessEngineError):
    """CTL/ATL look degenerate, usually from missing or garbled source data."""

    def __init__(self, ctl: float, atl: float) -> None:
        super().__init__(f"Degenerate training load: CTL={ctl:.2f} ATL={atl:.2f}")
        self.ctl = ctl
        self.atl = atl
