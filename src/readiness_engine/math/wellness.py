"""Illness and wellness detection from deviations against personal baselines.

Two detectors with different horizons:

* ``detect_illness`` looks at a single day and weighs how far each metric
  has moved, then lets a consistent multi-day trend raise its confidence.
* ``detect_wellness_alert`` only fires when several metrics have stayed
  outside a wide band for consecutive days.

Neither is a diagnosis; both only describe the data.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import date, timedelta

from readiness_engine.math.baselines import compute_baseline, merge_samples, relative_change
from readiness_engine.models.enums import (
    ILLNESS_ACTIVITY_DROP_PCT,
    ILLNESS_HRV_DROP_PCT,
    ILLNESS_HRV_SPIKE_PCT,
    ILLNESS_MIN_CONFIDENCE,
    ILLNESS_RESPIRATORY_CHANGE_PCT,
    ILLNESS_RHR_RISE_PCT,
    ILLNESS_SIGNAL_WEIGHTS,
    ILLNESS_SLEEP_DROP_PCT,
    ILLNESS_TREND_CONSISTENCY,
    ILLNESS_TREND_DAYS,
    WELLNESS_GOOD_RECOVERY,
    WELLNESS_HRV_DROP,
    WELLNESS_MIN_AFFECTED,
    WELLNESS_MIN_CONSECUTIVE_DAYS,
    WELLNESS_RESPIRATORY_RISE,
    WELLNESS_RHR_RISE,
    WELLNESS_SLEEP_DROP,
    WELLNESS_TREND_DAYS,
    IllnessSeverity,
    IllnessSignalType,
    WellnessAlertType,
    WellnessSeverity,
)
from readiness_engine.models.insights import IllnessIndicator, IllnessSignal, WellnessAlert
from readiness_engine.models.metrics import Baseline, DailyMetricSample

_SIGNAL_CONTEXT = {
    IllnessSignalType.HRV_SPIKE: "Elevated HRV detected. ",
    IllnessSignalType.HRV_DROP: "Suppressed HRV detected. ",
    IllnessSignalType.ELEVATED_RHR: "Elevated resting heart rate detected. ",
    IllnessSignalType.SLEEP_DISRUPTION: "Sleep disruption detected. ",
    IllnessSignalType.RESPIRATORY_CHANGE: "Respiratory changes detected. ",
    IllnessSignalType.ACTIVITY_DROP: "Activity levels reduced. ",
}

_SEVERITY_ADVICE = {
    IllnessSeverity.LOW: (
        "Monitor your recovery metrics. Consider taking it easy if symptoms persist."
    ),
    IllnessSeverity.MODERATE: (
        "Your body is showing stress signals. Prioritize rest and recovery today."
    ),
    IllnessSeverity.HIGH: (
        "Rest is strongly recommended. Consult a healthcare provider if you feel unwell."
    ),
}


def _percent(current: float | None, baseline: float | None) -> float | None:
    change = relative_change(current, baseline)
    return None if change is None else change * 100.0


def illness_signals(sample: DailyMetricSample, baseline: Baseline) -> list[IllnessSignal]:
    """Every metric of *sample* that crosses its illness threshold."""
    signals: list[IllnessSignal] = []

    def _add(kind: IllnessSignalType, deviation: float, value: float, base: float) -> None:
        signals.append(IllnessSignal(kind, round(deviation, 1), value, base))

    hrv = _percent(sample.hrv_ms, baseline.hrv_ms)
    if hrv is not None:
        if hrv < ILLNESS_HRV_DROP_PCT:
            _add(IllnessSignalType.HRV_DROP, hrv, sample.hrv_ms, baseline.hrv_ms)
        elif hrv > ILLNESS_HRV_SPIKE_PCT:
            _add(IllnessSignalType.HRV_SPIKE, hrv, sample.hrv_ms, baseline.hrv_ms)

    rhr = _percent(sample.rhr_bpm, baseline.rhr_bpm)
    if rhr is not None and rhr > ILLNESS_RHR_RISE_PCT:
        _add(IllnessSignalType.ELEVATED_RHR, rhr, sample.rhr_bpm, baseline.rhr_bpm)

    if sample.has_sleep:
        sleep = _percent(sample.sleep_duration_s, baseline.sleep_duration_s)
        if sleep is not None and sleep < ILLNESS_SLEEP_DROP_PCT:
            _add(
                IllnessSignalType.SLEEP_DISRUPTION,
                sleep,
                sample.sleep_duration_s,
                baseline.sleep_duration_s,
            )

    resp = _percent(sample.respiratory_rate, baseline.respiratory_rate)
    if resp is not None and abs(resp) > ILLNESS_RESPIRATORY_CHANGE_PCT:
        _add(
            IllnessSignalType.RESPIRATORY_CHANGE,
            resp,
            sample.respiratory_rate,
            baseline.respiratory_rate,
        )

    steps = None if sample.steps is None else float(sample.steps)
    activity = _percent(steps, baseline.steps)
    if activity is not None and activity < ILLNESS_ACTIVITY_DROP_PCT:
        _add(IllnessSignalType.ACTIVITY_DROP, activity, steps, baseline.steps)

    return signals


def trend_consistency(values: Sequence[float], rising: bool) -> float:
    """Share of day-over-day changes in the expected direction, oldest value first."""
    if len(values) < 2:
        return 0.0
    changes = [later - earlier for earlier, later in zip(values, values[1:])]
    consistent = sum(1 for c in changes if (c > 0 if rising else c < 0))
    return consistent / len(changes)


def detect_illness(
    sample: DailyMetricSample | None,
    baseline: Baseline | None,
    history: Iterable[DailyMetricSample] = (),
    trend_days: int = ILLNESS_TREND_DAYS,
) -> IllnessIndicator | None:
    """Weighted illness indicator for ``sample.day``, or None.

    Severity follows the weighted mean deviation and the number of
    signals. Confidence blends both, is raised by a sustained falling HRV
    or rising RHR over the last *trend_days* days, and must reach
    ``ILLNESS_MIN_CONFIDENCE`` for an indicator to be returned.
    """
    if sample is None or baseline is None:
        return None
    signals = illness_signals(sample, baseline)
    if not signals:
        return None

    weighted = sum(abs(s.deviation_pct) * ILLNESS_SIGNAL_WEIGHTS[s.kind] for s in signals)
    average = weighted / len(signals)
    count = len(signals)

    if average > 30 or count >= 4:
        severity = IllnessSeverity.HIGH
    elif average > 20 or count >= 3:
        severity = IllnessSeverity.MODERATE
    else:
        severity = IllnessSeverity.LOW

    confidence = 0.6 * min(count / 5.0, 1.0) + 0.4 * min(average / 50.0, 1.0)

    merged = merge_samples([*history, sample])
    window = [
        merged[d]
        for d in sorted(merged)
        if sample.day - timedelta(days=trend_days - 1) <= d <= sample.day
    ]
    hrv_trend = [s.hrv_ms for s in window if s.hrv_ms is not None]
    rhr_trend = [s.rhr_bpm for s in window if s.rhr_bpm is not None]
    if (
        trend_consistency(hrv_trend, rising=False) > ILLNESS_TREND_CONSISTENCY
        or trend_consistency(rhr_trend, rising=True) > ILLNESS_TREND_CONSISTENCY
    ):
        confidence += 0.1
    if count >= 3:
        confidence += 0.05 * (count - 2)
    confidence = round(min(confidence, 1.0), 3)

    if confidence < ILLNESS_MIN_CONFIDENCE:
        return None

    primary = max(signals, key=lambda s: abs(s.deviation_pct))
    recommendation = _SIGNAL_CONTEXT[primary.kind] + _SEVERITY_ADVICE[severity]
    return IllnessIndicator(
        day=sample.day,
        severity=severity,
        confidence=confidence,
        signals=tuple(signals),
        recommendation=recommendation,
    )


# metric name -> (sample field, baseline field, threshold, above)
_WELLNESS_METRICS = {
    "resting_hr": ("rhr_bpm", "rhr_bpm", WELLNESS_RHR_RISE, True),
    "hrv": ("hrv_ms", "hrv_ms", WELLNESS_HRV_DROP, False),
    "respiratory_rate": ("respiratory_rate", "respiratory_rate", WELLNESS_RESPIRATORY_RISE, True),
    "sleep_duration": ("sleep_duration_s", "sleep_duration_s", WELLNESS_SLEEP_DROP, False),
}


def _out_of_range(sample: DailyMetricSample, baseline: Baseline, metric: str) -> bool | None:
    field, base_field, threshold, above = _WELLNESS_METRICS[metric]
    if field == "sleep_duration_s" and not sample.has_sleep:
        return None
    change = relative_change(getattr(sample, field), getattr(baseline, base_field))
    if change is None:
        return None
    return change > threshold if above else change < threshold


def consecutive_abnormal_days(
    samples: Mapping[date, DailyMetricSample],
    baselines: Mapping[date, Baseline],
    metric: str,
    as_of: date,
    days: int = WELLNESS_TREND_DAYS,
) -> int:
    """Days in a row, counting back from *as_of*, with *metric* out of range.

    A day without data is skipped; a day within range ends the run.
    """
    run = 0
    for offset in range(days):
        day = as_of - timedelta(days=offset)
        sample, baseline = samples.get(day), baselines.get(day)
        if sample is None or baseline is None:
            continue
        abnormal = _out_of_range(sample, baseline, metric)
        if abnormal is None:
            continue
        if not abnormal:
            break
        run += 1
    return run


def detect_wellness_alert(
    samples: Iterable[DailyMetricSample],
    as_of: date,
    recovery_score: float | None = None,
    days: int = WELLNESS_TREND_DAYS,
) -> WellnessAlert | None:
    """Alert when enough metrics stay abnormal for consecutive days.

    Each day is judged against its own trailing baseline. A good
    recovery score raises the number of affected metrics needed.
    """
    merged = merge_samples(samples)
    history = list(merged.values())
    baselines = {
        as_of - timedelta(days=offset): compute_baseline(history, as_of - timedelta(days=offset))
        for offset in range(days)
    }

    runs = {
        metric: consecutive_abnormal_days(merged, baselines, metric, as_of, days)
        for metric in _WELLNESS_METRICS
    }
    affected = tuple(m for m, run in runs.items() if run >= WELLNESS_MIN_CONSECUTIVE_DAYS)

    needed = WELLNESS_MIN_AFFECTED
    if recovery_score is not None and recovery_score > WELLNESS_GOOD_RECOVERY:
        needed += 1
    if len(affected) < needed:
        return None

    longest = max(runs[m] for m in affected)
    if len(affected) >= 5 or longest >= 4:
        severity, kind = WellnessSeverity.RED, WellnessAlertType.MULTIPLE_INDICATORS
    elif len(affected) >= 4 or longest >= 3:
        severity, kind = WellnessSeverity.AMBER, WellnessAlertType.SUSTAINED_ELEVATION
    else:
        severity, kind = WellnessSeverity.YELLOW, WellnessAlertType.UNUSUAL_METRICS
    return WellnessAlert(
        day=as_of, severity=severity, kind=kind, affected=affected, trend_days=longest
    )
