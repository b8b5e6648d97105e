"""Strain components and the bounded 0-18 strain scale.

Component loads are log-compressed to 0-100 points. The weighted total is
modulated by recovery and then saturated onto 0-18, so no amount of load
can push strain past the top of the scale.
"""

from __future__ import annotations

import math

from readiness_engine.models.enums import (
    CARDIO_SCALE,
    COMPONENT_LOAD_MAX,
    KCAL_TO_MET_MIN,
    NON_EXERCISE_MET_CAP,
    NON_EXERCISE_SCALE,
    RECOVERY_MODULATION_RANGE,
    STEPS_PER_20_MET_MIN,
    STRAIN_MAX,
    STRAIN_SATURATION,
    STRENGTH_COMPRESSION,
    STRENGTH_SCALE,
)


def _clamp_load(value: float) -> float:
    return max(0.0, min(COMPONENT_LOAD_MAX, value))


def cardio_load(
    daily_trimp: float,
    duration_min: float | None = None,
    intensity_factor: float | None = None,
) -> float:
    """Log-compressed cardio load with bonuses for long or intense sessions."""
    if daily_trimp <= 0:
        return 0.0
    load = CARDIO_SCALE * math.log10(daily_trimp + 1.0)
    if duration_min is not None and duration_min > 60:
        load += min(10.0, (duration_min - 60) * 0.1)
    if intensity_factor is not None and intensity_factor > 0.8:
        load += min(15.0, (intensity_factor - 0.8) * 75.0)
    return _clamp_load(load)


def strength_load(
    rpe: float,
    duration_min: float,
    volume_kg: float | None = None,
    body_mass_kg: float | None = None,
    sets: int | None = None,
) -> float:
    """Session-RPE load (RPE × minutes) enhanced by relative volume and set count."""
    if duration_min <= 0 or not 1.0 <= rpe <= 10.0:
        return 0.0
    base = STRENGTH_SCALE * rpe * duration_min
    if volume_kg is not None and body_mass_kg is not None and body_mass_kg > 0 and volume_kg > 0:
        volume_term = min(2.0, (volume_kg / body_mass_kg) ** 0.25)
        base *= 1.0 + 0.15 * volume_term
    if sets is not None and sets > 0:
        base *= min(1.3, 1.0 + (sets - 1) * 0.05)
    return _clamp_load(CARDIO_SCALE * STRENGTH_COMPRESSION * math.log10(base + 1.0))


def met_minutes(steps: int | None, active_energy_kcal: float | None) -> float:
    """Everyday-movement MET-minutes from steps and active energy."""
    total = 0.0
    if steps is not None and steps > 0:
        total += 20.0 * steps / STEPS_PER_20_MET_MIN
    if active_energy_kcal is not None and active_energy_kcal > 0:
        total += active_energy_kcal * KCAL_TO_MET_MIN
    return total


def non_exercise_load(steps: int | None, active_energy_kcal: float | None) -> float:
    capped = min(met_minutes(steps, active_energy_kcal), NON_EXERCISE_MET_CAP)
    return _clamp_load(NON_EXERCISE_SCALE * math.log1p(capped))


def recovery_signal_from_score(recovery_score: float) -> float:
    """Map a 0-100 Recovery score onto [-1, 1] with 50 as neutral."""
    return max(-1.0, min(1.0, (recovery_score - 50.0) / 50.0))


def recovery_signal_from_vitals(
    hrv_change: float | None,
    rhr_change: float | None,
    sleep_score: float | None,
) -> float:
    """Blend relative HRV/RHR deviations and sleep quality into [-1, 1].

    Higher HRV, lower RHR and better sleep all push the signal up.
    """
    z_hrv = hrv_change if hrv_change is not None else 0.0
    z_rhr = -rhr_change if rhr_change is not None else 0.0
    z_sleep = (sleep_score - 75.0) / 25.0 if sleep_score is not None else 0.0
    signal = 0.6 * z_hrv + 0.3 * z_rhr + 0.1 * z_sleep
    return max(-1.0, min(1.0, signal))


def recovery_multiplier(signal: float) -> float:
    """Well-recovered days dampen strain, poorly recovered days amplify it."""
    return 1.0 - RECOVERY_MODULATION_RANGE * max(-1.0, min(1.0, signal))


def bounded_strain(raw_load: float, saturation: float = STRAIN_SATURATION) -> float:
    """``18 × (1 − e^(−raw / K))``: monotone, zero at zero, approaches 18."""
    if raw_load <= 0:
        return 0.0
    return STRAIN_MAX * (1.0 - math.exp(-raw_load / saturation))
