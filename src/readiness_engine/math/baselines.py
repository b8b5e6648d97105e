"""Personal baselines: trailing-window means of daily physiological metrics.

Scores compare today against *your* recent norm, not a population one.
A metric gets a baseline only when the window holds at least
``BASELINE_MIN_SAMPLES`` valid values.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta

import numpy as np
import pandas as pd

from readiness_engine.models.enums import BASELINE_MIN_SAMPLES, BASELINE_WINDOW_DAYS
from readiness_engine.models.metrics import Baseline, DailyMetricSample

_MINUTES_PER_DAY = 24 * 60
_NOON_MINUTES = 12 * 60


def clock_minutes_from_noon(moment: datetime) -> float:
    """Minutes after noon, so an evening bedtime and one past midnight stay adjacent."""
    minutes = moment.hour * 60 + moment.minute + moment.second / 60.0
    return (minutes - _NOON_MINUTES) % _MINUTES_PER_DAY


def merge_samples(samples: Iterable[DailyMetricSample]) -> dict[date, DailyMetricSample]:
    """Keep one sample per day: the most recently recorded one wins.

    Samples without ``recorded_at`` rank below any timestamped sample for
    the same day; among equals the one seen last wins.
    """
    merged: dict[date, DailyMetricSample] = {}
    for sample in samples:
        current = merged.get(sample.day)
        if current is None or _recorded_rank(sample) >= _recorded_rank(current):
            merged[sample.day] = sample
    return merged


def _recorded_rank(sample: DailyMetricSample) -> float:
    if sample.recorded_at is None:
        return float("-inf")
    return sample.recorded_at.timestamp()


def _samples_frame(samples: dict[date, DailyMetricSample]) -> pd.DataFrame:
    rows = []
    for day, sample in samples.items():
        rows.append(
            {
                "day": pd.Timestamp(day),
                "hrv_ms": sample.hrv_ms,
                "rhr_bpm": sample.rhr_bpm,
                "sleep_duration_s": sample.sleep_duration_s if sample.has_sleep else None,
                "respiratory_rate": sample.respiratory_rate,
                "steps": sample.steps,
                "bedtime_min": (
                    clock_minutes_from_noon(sample.bedtime) if sample.bedtime else None
                ),
                "wake_time_min": (
                    clock_minutes_from_noon(sample.wake_time) if sample.wake_time else None
                ),
            }
        )
    frame = pd.DataFrame(rows)
    if frame.empty:
        return frame
    return frame.set_index("day").sort_index().astype(np.float64)


def compute_baseline(
    samples: Iterable[DailyMetricSample],
    as_of: date,
    window_days: int = BASELINE_WINDOW_DAYS,
    min_samples: int = BASELINE_MIN_SAMPLES,
) -> Baseline:
    """Mean of each metric over the *window_days* days before *as_of*.

    *as_of* itself is excluded so today's value is compared against
    history, never against itself.
    """
    merged = merge_samples(samples)
    frame = _samples_frame(merged)
    if frame.empty:
        return Baseline(as_of=as_of, window_days=window_days)

    start = pd.Timestamp(as_of - timedelta(days=window_days))
    end = pd.Timestamp(as_of - timedelta(days=1))
    window = frame.loc[(frame.index >= start) & (frame.index <= end)]

    counts = window.count()
    means = window.mean()

    def _metric(column: str) -> float | None:
        if int(counts.get(column, 0)) < min_samples:
            return None
        return float(means[column])

    return Baseline(
        as_of=as_of,
        window_days=window_days,
        hrv_ms=_metric("hrv_ms"),
        rhr_bpm=_metric("rhr_bpm"),
        sleep_duration_s=_metric("sleep_duration_s"),
        respiratory_rate=_metric("respiratory_rate"),
        bedtime_min=_metric("bedtime_min"),
        wake_time_min=_metric("wake_time_min"),
        steps=_metric("steps"),
        sample_count=len(window),
    )


def relative_change(current: float | None, baseline: float | None) -> float | None:
    """``(current − baseline) / baseline`` or None if either side is unusable."""
    if current is None or baseline is None or baseline <= 0:
        return None
    return (current - baseline) / baseline
