"""Physiological samples, personal baselines and the athlete profile."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from readiness_engine.models.enums import DEFAULT_SLEEP_NEED_S


@dataclass(frozen=True)
class DailyMetricSample:
    """Per-calendar-day physiological snapshot from a wearable.

    Durations are in seconds. ``recorded_at`` orders partial samples for the
    same day: the latest one wins.
    """

    day: date
    hrv_ms: float | None = None
    rhr_bpm: float | None = None
    respiratory_rate: float | None = None

    sleep_duration_s: float | None = None
    time_in_bed_s: float | None = None
    deep_sleep_s: float | None = None
    rem_sleep_s: float | None = None
    wake_events: int | None = None
    bedtime: datetime | None = None
    wake_time: datetime | None = None

    steps: int | None = None
    active_energy_kcal: float | None = None

    recorded_at: datetime | None = None

    @property
    def has_sleep(self) -> bool:
        return self.sleep_duration_s is not None and self.sleep_duration_s > 0


@dataclass(frozen=True)
class Baseline:
    """Trailing-window means of the metrics scored against personal norms.

    Clock times are minutes after noon, so a 23:30 bedtime is 690 and a
    00:30 bedtime is 750.
    """

    as_of: date
    window_days: int
    hrv_ms: float | None = None
    rhr_bpm: float | None = None
    sleep_duration_s: float | None = None
    respiratory_rate: float | None = None
    bedtime_min: float | None = None
    wake_time_min: float | None = None
    steps: float | None = None
    sample_count: int = 0


@dataclass(frozen=True)
class AthleteProfile:
    """Read-only athlete physiology used by the estimation tiers."""

    max_hr: int | None = None
    resting_hr: int | None = None
    ftp_watts: float | None = None
    body_mass_kg: float | None = None
    sex: str = "M"
    sleep_need_s: float = DEFAULT_SLEEP_NEED_S

    @property
    def has_hr_reserve(self) -> bool:
        return (
            self.max_hr is not None
            and self.resting_hr is not None
            and self.max_hr > self.resting_hr
        )
