"""Training stress estimates: provider TSS, HR-reserve TRIMP, duration fallback.

References:
    - Banister (1991): TRIMP formula
    - Coggan & Allen (2010): power-based TSS, IF = NP / FTP
"""

from __future__ import annotations

import math

from readiness_engine.models.activity import RawActivity
from readiness_engine.models.enums import (
    ESTIMATED_TSS_PER_HOUR,
    TRIMP_COEFFICIENT_FEMALE,
    TRIMP_COEFFICIENT_MALE,
    TRIMP_EXPONENT_FEMALE,
    TRIMP_EXPONENT_MALE,
    TSSProvenance,
)
from readiness_engine.models.metrics import AthleteProfile


def hr_reserve_ratio(avg_hr: float, max_hr: float, resting_hr: float) -> float:
    """Fraction of heart-rate reserve, clamped to [0, 1]."""
    if max_hr <= resting_hr:
        return 0.0
    ratio = (avg_hr - resting_hr) / (max_hr - resting_hr)
    return max(0.0, min(1.0, ratio))


def calculate_trimp(
    duration_min: float,
    avg_hr: float,
    max_hr: float,
    resting_hr: float,
    sex: str = "M",
) -> float:
    """Calculate Banister TRIMP (Training Impulse) for a single session.

    TRIMP = duration × delta_hr_ratio × coefficient × e^(exponent × delta_hr_ratio)

    Args:
        duration_min: Session duration in minutes.
        avg_hr: Average heart rate during the session.
        max_hr: Athlete's maximum heart rate.
        resting_hr: Athlete's resting heart rate.
        sex: "M" or "F", affects the exponential weighting.

    Returns:
        TRIMP score (arbitrary units, higher = more load).

    Reference:
        Banister (1991). Modeling elite athletic performance. In:
        Physiological Testing of Elite Athletes.
    """
    if max_hr <= resting_hr or duration_min <= 0:
        return 0.0
    delta_hr_ratio = hr_reserve_ratio(avg_hr, max_hr, resting_hr)

    if sex.upper() == "F":
        coefficient = TRIMP_COEFFICIENT_FEMALE
        exponent = TRIMP_EXPONENT_FEMALE
    else:
        coefficient = TRIMP_COEFFICIENT_MALE
        exponent = TRIMP_EXPONENT_MALE

    return duration_min * delta_hr_ratio * coefficient * math.exp(exponent * delta_hr_ratio)


def hr_reserve_tss(duration_min: float, avg_hr: float, max_hr: float, resting_hr: float) -> float:
    """Linear HR-reserve load: minutes × clamp(HRR fraction, 0, 1)."""
    return max(0.0, duration_min) * hr_reserve_ratio(avg_hr, max_hr, resting_hr)


def power_tss(duration_s: float, normalized_power: float, ftp_watts: float) -> float:
    """Power TSS = hours × IF² × 100, with IF = NP / FTP.

    Reference:
        Coggan & Allen (2010). Training and Racing with a Power Meter.
    """
    if ftp_watts <= 0 or duration_s <= 0 or normalized_power <= 0:
        return 0.0
    intensity_factor = normalized_power / ftp_watts
    return (duration_s / 3600.0) * intensity_factor**2 * 100.0


def intensity_factor(activity: RawActivity, profile: AthleteProfile) -> float | None:
    """IF from normalized (or average) power against FTP, if both are known."""
    power = activity.normalized_power or activity.avg_power
    if not power or not profile.ftp_watts or profile.ftp_watts <= 0:
        return None
    return power / profile.ftp_watts


def estimated_tss(duration_s: float, tss_per_hour: float = ESTIMATED_TSS_PER_HOUR) -> float:
    """Duration-only estimate at a moderate assumed intensity."""
    return max(0.0, duration_s) / 3600.0 * tss_per_hour


def assign_tss(
    activity: RawActivity,
    profile: AthleteProfile,
    tss_per_hour: float = ESTIMATED_TSS_PER_HOUR,
) -> tuple[float, TSSProvenance]:
    """Pick the first applicable TSS tier for an activity.

    1. Provider-reported TSS greater than zero (MEASURED).
    2. HR-reserve load when average HR and the athlete's HR reserve are
       known (HR_DERIVED).
    3. Duration-based estimate (ESTIMATED).

    The returned value is never negative.
    """
    if activity.provider_tss is not None and activity.provider_tss > 0:
        return float(activity.provider_tss), TSSProvenance.MEASURED

    if activity.avg_hr is not None and activity.avg_hr > 0 and profile.has_hr_reserve:
        tss = hr_reserve_tss(
            activity.duration_min,
            activity.avg_hr,
            profile.max_hr,  # type: ignore[arg-type]
            profile.resting_hr,  # type: ignore[arg-type]
        )
        return max(0.0, tss), TSSProvenance.HR_DERIVED

    return estimated_tss(activity.duration_s, tss_per_hour), TSSProvenance.ESTIMATED
