"""Environment-variable-based configuration for the readiness engine."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from readiness_engine.models.enums import (
    BASELINE_WINDOW_DAYS,
    CACHE_TTL_S,
    DEFAULT_TIMEOUTS_S,
    DEGENERATE_ATL_MIN,
    DEGENERATE_BALANCE_MIN,
    DEGENERATE_CTL_MIN,
    DEPENDENCY_BACKOFF_INITIAL_S,
    DEPENDENCY_BACKOFF_MAX_S,
    DEPENDENCY_WAIT_CAP_S,
    ESTIMATED_TSS_PER_HOUR,
    FALLBACK_LOOKBACK_DAYS,
    HISTORY_FETCH_DAYS,
    RECOVERY_WEIGHTS,
    TRAINING_LOAD_WINDOW_DAYS,
    ScoreType,
)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    return float(raw) if raw not in (None, "") else default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    return int(raw) if raw not in (None, "") else default


def _env_weights(name: str, default: dict[str, float]) -> dict[str, float]:
    """Parse ``"hrv=0.3,rhr=0.2"``; keys not named keep their default."""
    raw = os.environ.get(name, "")
    weights = dict(default)
    for pair in filter(None, (p.strip() for p in raw.split(","))):
        key, _, value = pair.partition("=")
        key = key.strip()
        if key not in weights:
            raise ValueError(f"{name}: unknown weight {key!r}")
        weights[key] = float(value)
    return weights


@dataclass(frozen=True)
class EngineSettings:
    """Tunables for the engine. Defaults are the calibrated constants."""

    timeouts_s: dict[ScoreType, float] = field(default_factory=lambda: dict(DEFAULT_TIMEOUTS_S))
    dependency_wait_cap_s: float = DEPENDENCY_WAIT_CAP_S
    dependency_backoff_initial_s: float = DEPENDENCY_BACKOFF_INITIAL_S
    dependency_backoff_max_s: float = DEPENDENCY_BACKOFF_MAX_S
    cache_ttl_s: float = CACHE_TTL_S
    fallback_lookback_days: int = FALLBACK_LOOKBACK_DAYS

    estimated_tss_per_hour: float = ESTIMATED_TSS_PER_HOUR
    degenerate_ctl_min: float = DEGENERATE_CTL_MIN
    degenerate_atl_min: float = DEGENERATE_ATL_MIN
    degenerate_balance_min: float = DEGENERATE_BALANCE_MIN
    training_load_window_days: int = TRAINING_LOAD_WINDOW_DAYS

    baseline_window_days: int = BASELINE_WINDOW_DAYS
    history_fetch_days: int = HISTORY_FETCH_DAYS
    recovery_weights: dict[str, float] = field(default_factory=lambda: dict(RECOVERY_WEIGHTS))

    store_dir: Path | None = None

    def timeout_for(self, score_type: ScoreType) -> float:
        return self.timeouts_s.get(score_type, DEFAULT_TIMEOUTS_S[score_type])

    @classmethod
    def from_env(cls) -> EngineSettings:
        """Build settings from ``READINESS_*`` environment variables."""
        timeouts = {
            score_type: _env_float(
                f"READINESS_{score_type.name}_TIMEOUT_S", DEFAULT_TIMEOUTS_S[score_type]
            )
            for score_type in ScoreType
        }
        store_dir = os.environ.get("READINESS_STORE_DIR")
        return cls(
            timeouts_s=timeouts,
            dependency_wait_cap_s=_env_float("READINESS_DEPENDENCY_WAIT_CAP_S", DEPENDENCY_WAIT_CAP_S),
            dependency_backoff_initial_s=_env_float(
                "READINESS_DEPENDENCY_BACKOFF_S", DEPENDENCY_BACKOFF_INITIAL_S
            ),
            dependency_backoff_max_s=_env_float(
                "READINESS_DEPENDENCY_BACKOFF_MAX_S", DEPENDENCY_BACKOFF_MAX_S
            ),
            cache_ttl_s=_env_float("READINESS_CACHE_TTL_S", CACHE_TTL_S),
            fallback_lookback_days=_env_int("READINESS_FALLBACK_LOOKBACK_DAYS", FALLBACK_LOOKBACK_DAYS),
            estimated_tss_per_hour=_env_float("READINESS_ESTIMATED_TSS_PER_HOUR", ESTIMATED_TSS_PER_HOUR),
            degenerate_ctl_min=_env_float("READINESS_DEGENERATE_CTL_MIN", DEGENERATE_CTL_MIN),
            degenerate_atl_min=_env_float("READINESS_DEGENERATE_ATL_MIN", DEGENERATE_ATL_MIN),
            degenerate_balance_min=_env_float(
                "READINESS_DEGENERATE_BALANCE_MIN", DEGENERATE_BALANCE_MIN
            ),
            training_load_window_days=_env_int(
                "READINESS_TRAINING_LOAD_WINDOW_DAYS", TRAINING_LOAD_WINDOW_DAYS
            ),
            baseline_window_days=_env_int("READINESS_BASELINE_WINDOW_DAYS", BASELINE_WINDOW_DAYS),
            history_fetch_days=_env_int("READINESS_HISTORY_FETCH_DAYS", HISTORY_FETCH_DAYS),
            recovery_weights=_env_weights("READINESS_RECOVERY_WEIGHTS", RECOVERY_WEIGHTS),
            store_dir=Path(store_dir).expanduser() if store_dir else None,
        )
