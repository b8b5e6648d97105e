"""Strain score — total physiological load of the day on a bounded 0-18 scale.

Components (each log-compressed to 0-100 points):
    cardio        Banister TRIMP from HR reserve, else power TSS, else the
                  unified activity TSS
    strength      session RPE × minutes, enhanced by volume and sets
    non_exercise  steps and active energy as MET-minutes, capped

The weighted total is multiplied by a recovery multiplier and saturated
onto 0-18. Sub-score weights are each component's share of the weighted
total, so contributions add up to the strain value.

Bands: <6 LIGHT, <11 MODERATE, <16 HARD, else VERY_HARD.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from readiness_engine.calculators.base import ScoreCalculator, ScoreInputs, classify_by_cuts
from readiness_engine.math.baselines import relative_change
from readiness_engine.math.strain import (
    bounded_strain,
    cardio_load,
    met_minutes,
    non_exercise_load,
    recovery_multiplier,
    recovery_signal_from_score,
    recovery_signal_from_vitals,
    strength_load,
)
from readiness_engine.math.tss import calculate_trimp, intensity_factor, power_tss
from readiness_engine.models.activity import UnifiedActivity
from readiness_engine.models.enums import (
    STRAIN_BAND_CUTS,
    STRAIN_COMPONENT_WEIGHTS,
    ScoreType,
    StrainBand,
)
from readiness_engine.models.metrics import AthleteProfile
from readiness_engine.models.score import ScoreResult, SubScore


def session_trimp(activity: UnifiedActivity, profile: AthleteProfile) -> float:
    """Per-session cardio impulse, best available tier first."""
    raw = activity.activity
    if raw.avg_hr and profile.has_hr_reserve:
        return calculate_trimp(
            raw.duration_min,
            raw.avg_hr,
            profile.max_hr,  # type: ignore[arg-type]
            profile.resting_hr,  # type: ignore[arg-type]
            profile.sex,
        )
    if raw.normalized_power and profile.ftp_watts:
        return power_tss(raw.duration_s, raw.normalized_power, profile.ftp_watts)
    return activity.tss


def _is_rated_strength(activity: UnifiedActivity) -> bool:
    return activity.activity.is_strength and activity.activity.rpe is not None


class StrainCalculator(ScoreCalculator):
    score_type = ScoreType.STRAIN
    version = "1.0.0"
    weights = STRAIN_COMPONENT_WEIGHTS
    core_inputs = ("cardio", "strength", "non_exercise")
    band_type = StrainBand
    precision = 1

    def components(self, inputs: ScoreInputs) -> dict[str, float | None]:
        profile = inputs.profile
        activities = inputs.day_activities
        cardio = [a for a in activities if not _is_rated_strength(a)]
        strength = [a for a in activities if _is_rated_strength(a)]

        cardio_value = None
        if cardio:
            trimp = sum(session_trimp(a, profile) for a in cardio)
            duration = sum(a.activity.duration_min for a in cardio)
            factors = [f for f in (intensity_factor(a.activity, profile) for a in cardio) if f]
            cardio_value = cardio_load(trimp, duration, max(factors) if factors else None)

        strength_value = None
        if strength:
            strength_value = min(
                100.0,
                sum(
                    strength_load(
                        a.activity.rpe,  # type: ignore[arg-type]
                        a.activity.duration_min,
                        a.activity.strength_volume_kg,
                        profile.body_mass_kg,
                        a.activity.strength_sets,
                    )
                    for a in strength
                ),
            )

        non_exercise_value = None
        sample = inputs.sample
        if sample is not None and (sample.steps is not None or sample.active_energy_kcal is not None):
            non_exercise_value = non_exercise_load(sample.steps, sample.active_energy_kcal)

        return {
            "cardio": cardio_value,
            "strength": strength_value,
            "non_exercise": non_exercise_value,
        }

    def recovery_signal(self, inputs: ScoreInputs) -> float:
        recovery = inputs.recovery_result
        if recovery is not None and not recovery.is_placeholder:
            return recovery_signal_from_score(recovery.score)
        sample = inputs.sample
        baseline = inputs.baseline
        sleep = inputs.sleep_result
        return recovery_signal_from_vitals(
            relative_change(
                sample.hrv_ms if sample else None, baseline.hrv_ms if baseline else None
            ),
            relative_change(
                sample.rhr_bpm if sample else None, baseline.rhr_bpm if baseline else None
            ),
            sleep.score if sleep is not None and not sleep.is_placeholder else None,
        )

    def classify(self, score: float) -> IntEnum:
        return classify_by_cuts(score, STRAIN_BAND_CUTS, StrainBand.LIGHT)

    def combine(self, inputs: ScoreInputs, components: dict[str, float | None]) -> ScoreResult:
        present = {name: value for name, value in components.items() if value is not None}
        excluded = tuple(name for name in self.weights if components.get(name) is None)
        weighted = {name: present[name] * self.weights[name] for name in present}
        total = sum(weighted.values())

        signal = self.recovery_signal(inputs)
        multiplier = recovery_multiplier(signal)
        strain = round(bounded_strain(total * multiplier), self.precision)

        sub_scores = []
        for name in self.weights:
            if name not in present:
                continue
            share = weighted[name] / total if total > 0 else 0.0
            sub_scores.append(
                SubScore(
                    name=name,
                    value=round(present[name], 2),
                    weight=share,
                    contribution=strain * share,
                )
            )

        snapshot = self.snapshot(inputs)
        snapshot.update(
            {
                "weighted_load": round(total, 3),
                "recovery_signal": round(signal, 4),
                "recovery_multiplier": round(multiplier, 4),
            }
        )
        return ScoreResult(
            score_type=self.score_type,
            day=inputs.day,
            score=float(strain),
            band=self.classify(strain),
            sub_scores=tuple(sub_scores),
            inputs_snapshot=snapshot,
            computed_at=inputs.computed_at,
            algorithm_version=self.version,
            is_personalized=inputs.authorized,
            # A day without a workout is genuinely zero exercise load; only
            # missing daily-movement data means the day may be underreported.
            reduced_confidence="non_exercise" in excluded,
            excluded=excluded,
        )

    def snapshot(self, inputs: ScoreInputs) -> dict[str, Any]:
        sample = inputs.sample
        activities = inputs.day_activities
        return {
            "activity_count": len(activities),
            "activity_tss": round(sum(a.tss for a in activities), 2),
            "steps": sample.steps if sample else None,
            "active_energy_kcal": sample.active_energy_kcal if sample else None,
            "met_minutes": round(
                met_minutes(sample.steps, sample.active_energy_kcal), 2
            ) if sample else None,
        }
