"""Recovery score — readiness to absorb training today.

Blends HRV and RHR against personal baselines, last night's Sleep score,
training-load form and respiratory rate. Sleep is an upstream dependency:
when it has not resolved, its sub-score is simply excluded.

Default weights: HRV 30 %, RHR 20 %, sleep 30 %, form 10 %, respiratory 10 %.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from readiness_engine.calculators.base import ScoreCalculator, ScoreInputs, classify_by_cuts
from readiness_engine.math.recovery import form_score, hrv_score, respiratory_score, rhr_score
from readiness_engine.math.training_load import load_ratio
from readiness_engine.models.enums import (
    RECOVERY_BAND_CUTS,
    RECOVERY_WEIGHTS,
    RecoveryBand,
    ScoreType,
)


class RecoveryCalculator(ScoreCalculator):
    score_type = ScoreType.RECOVERY
    version = "1.0.0"
    core_inputs = ("hrv", "rhr")
    band_type = RecoveryBand

    def __init__(self, weights: dict[str, float] | None = None) -> None:
        self.weights = dict(weights or RECOVERY_WEIGHTS)
        unknown = set(self.weights) - set(RECOVERY_WEIGHTS)
        if unknown:
            raise ValueError(f"Unknown recovery weights: {sorted(unknown)}")

    def components(self, inputs: ScoreInputs) -> dict[str, float | None]:
        sample = inputs.sample
        baseline = inputs.baseline
        load = inputs.training_load

        sleep = inputs.sleep_result
        sleep_value = None if sleep is None or sleep.is_placeholder else sleep.score

        ratio = load_ratio(load.ctl, load.tsb) if load is not None else None
        return {
            "hrv": hrv_score(
                sample.hrv_ms if sample else None, baseline.hrv_ms if baseline else None
            ),
            "rhr": rhr_score(
                sample.rhr_bpm if sample else None, baseline.rhr_bpm if baseline else None
            ),
            "sleep": sleep_value,
            "form": form_score(ratio, inputs.yesterday_tss),
            "respiratory": respiratory_score(
                sample.respiratory_rate if sample else None,
                baseline.respiratory_rate if baseline else None,
            ),
        }

    def classify(self, score: float) -> IntEnum:
        return classify_by_cuts(score, RECOVERY_BAND_CUTS, RecoveryBand.POOR)

    def snapshot(self, inputs: ScoreInputs) -> dict[str, Any]:
        sample = inputs.sample
        baseline = inputs.baseline
        load = inputs.training_load
        sleep = inputs.sleep_result
        return {
            "hrv_ms": sample.hrv_ms if sample else None,
            "hrv_baseline_ms": baseline.hrv_ms if baseline else None,
            "rhr_bpm": sample.rhr_bpm if sample else None,
            "rhr_baseline_bpm": baseline.rhr_bpm if baseline else None,
            "respiratory_rate": sample.respiratory_rate if sample else None,
            "respiratory_baseline": baseline.respiratory_rate if baseline else None,
            "sleep_score": None if sleep is None or sleep.is_placeholder else sleep.score,
            "ctl": round(load.ctl, 2) if load else None,
            "atl": round(load.atl, 2) if load else None,
            "tsb": round(load.tsb, 2) if load else None,
            "yesterday_tss": inputs.yesterday_tss,
        }
