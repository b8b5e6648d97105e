"""HRV-guided training readiness.

Four signals, each on a -100..+100 scale where positive favors training,
feed a small decision tree (Kiviniemi et al. 2007; Javaloyes et al. 2019):

* HRV trend: the rolling 7-day mean against the personal baseline
* HRV stability: coefficient of variation of that rolling window
* recovery: today's recovery score, centered on 50
* form: training stress balance (TSB)
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta

import pandas as pd

from readiness_engine.math.baselines import merge_samples
from readiness_engine.models.enums import (
    READINESS_HARD_TSS,
    READINESS_HRV_WINDOW_DAYS,
    TrainingRecommendation,
)
from readiness_engine.models.insights import ReadinessAssessment
from readiness_engine.models.metrics import DailyMetricSample


def rolling_hrv(
    samples: Iterable[DailyMetricSample],
    as_of: date,
    window_days: int = READINESS_HRV_WINDOW_DAYS,
) -> tuple[float | None, float | None]:
    """Mean HRV and its coefficient of variation (percent) over the window ending *as_of*.

    The CV needs at least three readings; the mean needs one.
    """
    merged = merge_samples(samples)
    start = as_of - timedelta(days=window_days - 1)
    values = pd.Series(
        [s.hrv_ms for d, s in merged.items() if start <= d <= as_of and s.hrv_ms is not None],
        dtype="float64",
    )
    if values.empty:
        return None, None
    mean = float(values.mean())
    if len(values) < 3 or mean <= 0:
        return mean, None
    return mean, float(values.std() / mean * 100.0)


def hrv_trend_signal(rolling_ms: float | None, baseline_ms: float | None) -> int:
    """±20 % from baseline maps to ±100."""
    if rolling_ms is None or baseline_ms is None or baseline_ms <= 0:
        return 0
    change = (rolling_ms - baseline_ms) / baseline_ms * 100.0
    return int(max(-100.0, min(100.0, change * 5.0)))


def hrv_stability_signal(cv_pct: float | None) -> int:
    """CV below 5 % is excellent stability, above 15 % is poor."""
    if cv_pct is None:
        return 0
    if cv_pct < 5.0:
        return int(100.0 - cv_pct * 10.0)
    if cv_pct < 10.0:
        return int(50.0 - (cv_pct - 5.0) * 10.0)
    if cv_pct < 15.0:
        return int(-(cv_pct - 10.0) * 10.0)
    return int(max(-100.0, -50.0 - (cv_pct - 15.0) * 10.0))


def form_signal(tsb: float | None) -> int:
    if tsb is None:
        return 0
    return int(max(-100.0, min(100.0, tsb * 2.5)))


def signal_clarity(trend: int, stability: int, recovery: int, form: int) -> int:
    """How strongly the signals agree: 80+ for a clear direction, 40 when mixed."""
    signals = [trend, stability, recovery - 50, form]
    positive = sum(1 for s in signals if s > 10)
    negative = sum(1 for s in signals if s < -10)
    neutral = len(signals) - positive - negative
    if positive >= 3 or negative >= 3:
        return 80 + neutral * 5
    if positive == 0 and negative == 0:
        return 60
    return 40


def assess_readiness(
    rolling_ms: float | None = None,
    baseline_ms: float | None = None,
    cv_pct: float | None = None,
    recovery_score: float | None = None,
    tsb: float | None = None,
) -> ReadinessAssessment:
    """Pick a training recommendation from the four signals.

    Missing inputs contribute a neutral signal (recovery defaults to 50)
    and lower the confidence.
    """
    trend = hrv_trend_signal(rolling_ms, baseline_ms)
    stability = hrv_stability_signal(cv_pct)
    recovery = 50 if recovery_score is None else int(round(recovery_score))
    form = form_signal(tsb)

    present = [
        rolling_ms is not None and baseline_ms is not None,
        cv_pct is not None,
        recovery_score is not None,
        tsb is not None,
    ]
    data_quality = 25 * sum(present)

    hrv_positive = trend > 5
    hrv_negative = trend < -10
    cv_low = stability > 50
    cv_moderate = stability > 0
    cv_high = stability < -20
    recovered = recovery >= 70
    fatigued = recovery < 50
    fresh = form > 20
    overreached = form < -20

    reasons: list[str] = []
    if hrv_negative or cv_high or overreached:
        recommendation = TrainingRecommendation.REST
        if hrv_negative:
            reasons.append(f"HRV trend is {abs(trend)} points below baseline")
        if cv_high:
            reasons.append("HRV variability is high (CV > 15%)")
        if overreached:
            reasons.append("Training load indicates functional overreaching")
    elif fatigued and not fresh:
        recommendation = TrainingRecommendation.TRAIN_EASY
        reasons.append("Recovery score is below 50%")
        reasons.append("Recommend low-intensity activity")
    elif hrv_positive and cv_low and recovered:
        recommendation = TrainingRecommendation.TRAIN_HARD
        reasons.append(f"HRV trend is {trend} points above baseline")
        reasons.append("Excellent HRV stability (CV < 5%)")
        reasons.append(f"Recovery score is {recovery}%")
    elif hrv_positive and cv_moderate and recovery >= 60:
        recommendation = TrainingRecommendation.TRAIN_MODERATE
        reasons.append("HRV trend is positive")
        reasons.append(f"Recovery is adequate ({recovery}%)")
    elif recovered and fresh:
        recommendation = TrainingRecommendation.TRAIN_MODERATE
        reasons.append("Recovery and form are good")
        if rolling_ms is None:
            reasons.append("Limited HRV data, moderate recommendation")
    else:
        recommendation = TrainingRecommendation.TRAIN_EASY
        reasons.append("Mixed readiness signals detected")
        reasons.append("Conservative approach recommended")

    confidence = min(100, (data_quality + signal_clarity(trend, stability, recovery, form)) // 2)
    if data_quality < 50:
        reasons.append("Limited data available, confidence reduced")

    return ReadinessAssessment(
        recommendation=recommendation,
        confidence=float(confidence),
        hrv_trend_signal=float(trend),
        hrv_stability_signal=float(stability),
        recovery_signal=float(recovery),
        form_signal=float(form),
        reasoning=tuple(reasons),
    )


def quick_readiness(
    recovery_score: float, yesterday_tss: float | None = None
) -> TrainingRecommendation:
    """Recommendation from the recovery score alone, held back after a very hard day."""
    heavy = (yesterday_tss or 0.0) > READINESS_HARD_TSS
    if recovery_score >= 80 and not heavy:
        return TrainingRecommendation.TRAIN_HARD
    if recovery_score >= 60:
        return TrainingRecommendation.TRAIN_MODERATE
    if recovery_score >= 40:
        return TrainingRecommendation.TRAIN_EASY
    return TrainingRecommendation.REST
