"""Recovery component scores against personal baselines.

Each function returns a 0-100 value or None when its inputs are missing.
The curves are deliberately gentle near baseline and steepen as the
deviation grows.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, timedelta

from readiness_engine.math.baselines import relative_change
from readiness_engine.models.enums import (
    RECOVERY_DEBT_BAND_CUTS,
    RECOVERY_DEBT_THRESHOLD,
    RECOVERY_DEBT_WINDOW_DAYS,
    TSS_PENALTY_KNOTS,
    TSS_PENALTY_MAX,
    TSS_PENALTY_TAIL_SLOPE,
    RecoveryDebtBand,
)
from readiness_engine.models.insights import RecoveryDebt


def hrv_score(hrv_ms: float | None, baseline_ms: float | None) -> float | None:
    """At or above baseline scores 100; drops are penalized progressively."""
    change = relative_change(hrv_ms, baseline_ms)
    if change is None:
        return None
    if change >= 0:
        return 100.0
    drop = -change
    if drop <= 0.10:
        return max(85.0, 100.0 - drop * 150.0)
    if drop <= 0.20:
        return max(60.0, 85.0 - (drop - 0.10) * 250.0)
    if drop <= 0.35:
        return max(30.0, 60.0 - (drop - 0.20) * 200.0)
    return max(0.0, 30.0 - (drop - 0.35) * 60.0)


def rhr_score(rhr_bpm: float | None, baseline_bpm: float | None) -> float | None:
    """At or below baseline scores 100; elevation is penalized progressively."""
    change = relative_change(rhr_bpm, baseline_bpm)
    if change is None:
        return None
    if change <= 0:
        return 100.0
    if change <= 0.08:
        return max(88.0, 100.0 - change * 150.0)
    if change <= 0.15:
        return max(67.0, 88.0 - (change - 0.08) * 300.0)
    if change <= 0.25:
        return max(37.0, 67.0 - (change - 0.15) * 300.0)
    return max(0.0, 37.0 - (change - 0.25) * 100.0)


def respiratory_score(rate: float | None, baseline: float | None) -> float | None:
    """Stable breathing scores 100; an elevated rate is the stronger stress signal."""
    change = relative_change(rate, baseline)
    if change is None:
        return None
    if change > 0.15:
        return max(0.0, 50.0 - change * 200.0)
    if change > 0.05:
        return max(50.0, 100.0 - (change - 0.05) * 500.0)
    if change >= -0.05:
        return 100.0
    if change >= -0.15:
        return max(70.0, 100.0 - (-change - 0.05) * 300.0)
    return max(40.0, 70.0 - (-change - 0.15) * 200.0)


def tss_penalty(yesterday_tss: float) -> float:
    """Form penalty points for yesterday's training stress.

    Linear between (50, 0), (100, 10) and (200, 25), then 0.1 points per
    TSS, capped at 40.
    """
    first_tss, _ = TSS_PENALTY_KNOTS[0]
    if yesterday_tss < first_tss:
        return 0.0
    for (lo_tss, lo_pts), (hi_tss, hi_pts) in zip(TSS_PENALTY_KNOTS, TSS_PENALTY_KNOTS[1:]):
        if yesterday_tss < hi_tss:
            return lo_pts + (yesterday_tss - lo_tss) * (hi_pts - lo_pts) / (hi_tss - lo_tss)
    last_tss, last_pts = TSS_PENALTY_KNOTS[-1]
    return min(TSS_PENALTY_MAX, last_pts + (yesterday_tss - last_tss) * TSS_PENALTY_TAIL_SLOPE)


def form_score(ratio: float | None, yesterday_tss: float | None = None) -> float | None:
    """Freshness from the ATL/CTL load ratio, less yesterday's TSS penalty.

    Below 1.0 the athlete is fresh (100); 1.0-1.5 falls linearly to 50;
    beyond that it falls further toward 0.
    """
    if ratio is None:
        return None
    if ratio < 1.0:
        base = 100.0
    elif ratio < 1.5:
        base = max(50.0, 100.0 - (ratio - 1.0) * 100.0)
    else:
        base = max(0.0, 50.0 - (ratio - 1.5) * 50.0)
    if yesterday_tss is not None and yesterday_tss > 0:
        base -= tss_penalty(yesterday_tss)
    return max(0.0, base)


def recovery_debt(
    scores: Mapping[date, float],
    as_of: date,
    window_days: int = RECOVERY_DEBT_WINDOW_DAYS,
    threshold: float = RECOVERY_DEBT_THRESHOLD,
) -> RecoveryDebt:
    """Consecutive days, counting back from *as_of*, with recovery below *threshold*.

    Days without a score are skipped; the first day at or above the
    threshold ends the run. The average covers every scored day in the
    window.
    """
    run = 0
    broken = False
    window: list[float] = []
    for offset in range(window_days):
        score = scores.get(as_of - timedelta(days=offset))
        if score is None:
            continue
        window.append(score)
        if broken:
            continue
        if score < threshold:
            run += 1
        else:
            broken = True

    band = RecoveryDebtBand.FRESH
    for min_days, cut_band in RECOVERY_DEBT_BAND_CUTS:
        if run >= min_days:
            band = cut_band
            break
    average = round(sum(window) / len(window), 1) if window else None
    return RecoveryDebt(as_of=as_of, consecutive_days=run, band=band, average_recovery=average)
