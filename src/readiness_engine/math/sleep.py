"""Sleep component scores and cumulative sleep debt.

Each component returns a 0-100 value, or None when its inputs are
missing so the calculator can exclude it and renormalize the weights.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime, timedelta

from readiness_engine.math.baselines import clock_minutes_from_noon
from readiness_engine.models.enums import STAGE_FLOOR_SHARE, STAGE_TARGET_SHARE
from readiness_engine.models.metrics import DailyMetricSample


def performance_score(sleep_s: float | None, need_s: float | None) -> float | None:
    """Actual sleep against need, capped at 100."""
    if sleep_s is None or need_s is None or need_s <= 0:
        return None
    return max(0.0, min(100.0, sleep_s / need_s * 100.0))


def efficiency_score(sleep_s: float | None, in_bed_s: float | None) -> float | None:
    """Time asleep as a share of time in bed."""
    if sleep_s is None or in_bed_s is None or in_bed_s <= 0:
        return None
    return max(0.0, min(100.0, sleep_s / in_bed_s * 100.0))


def stage_quality_score(
    sleep_s: float | None, deep_s: float | None, rem_s: float | None
) -> float | None:
    """Deep + REM share of total sleep.

    At or above 40 % scores 100; 30-40 % scales linearly from 50 to 100;
    below 30 % scales from 0 to 50.
    """
    if sleep_s is None or sleep_s <= 0 or (deep_s is None and rem_s is None):
        return None
    share = ((deep_s or 0.0) + (rem_s or 0.0)) / sleep_s
    if share >= STAGE_TARGET_SHARE:
        return 100.0
    if share >= STAGE_FLOOR_SHARE:
        span = STAGE_TARGET_SHARE - STAGE_FLOOR_SHARE
        return 50.0 + (share - STAGE_FLOOR_SHARE) / span * 50.0
    return max(0.0, share / STAGE_FLOOR_SHARE * 50.0)


def disturbances_score(wake_events: int | None) -> float | None:
    if wake_events is None:
        return None
    if wake_events <= 2:
        return 100.0
    if wake_events <= 5:
        return 75.0
    if wake_events <= 8:
        return 50.0
    return 25.0


def timing_score(
    bedtime: datetime | None,
    wake_time: datetime | None,
    baseline_bedtime_min: float | None,
    baseline_wake_min: float | None,
) -> float | None:
    """Consistency of bed and wake times with the personal baseline.

    Average deviation up to 30 min scores 100, up to 60 min 75, up to
    90 min 50, beyond that 25.
    """
    if bedtime is None or wake_time is None or baseline_bedtime_min is None or baseline_wake_min is None:
        return None
    bed_dev = abs(clock_minutes_from_noon(bedtime) - baseline_bedtime_min)
    wake_dev = abs(clock_minutes_from_noon(wake_time) - baseline_wake_min)
    deviation = (bed_dev + wake_dev) / 2.0
    if deviation <= 30:
        return 100.0
    if deviation <= 60:
        return 75.0
    if deviation <= 90:
        return 50.0
    return 25.0


def sleep_debt(
    samples: Mapping[date, DailyMetricSample],
    need_s: float,
    as_of: date,
    days: int = 7,
) -> float:
    """Cumulative sleep debt in seconds over the *days* nights ending at *as_of*.

    Each night adds ``need − actual``; the running total never drops below
    zero, so a surplus only pays debt back. Nights without data are skipped.
    """
    debt = 0.0
    for offset in range(days - 1, -1, -1):
        sample = samples.get(as_of - timedelta(days=offset))
        if sample is None or not sample.has_sleep:
            continue
        debt = max(0.0, debt + need_s - float(sample.sleep_duration_s))  # type: ignore[arg-type]
    return debt


def classify_sleep_debt(debt_s: float) -> str:
    """Classify sleep debt into a severity category.

    Returns:
        One of: "minimal", "moderate", "significant", "severe"
    """
    hours = debt_s / 3600.0
    if hours < 2:
        return "minimal"
    if hours < 5:
        return "moderate"
    if hours < 10:
        return "significant"
    return "severe"
