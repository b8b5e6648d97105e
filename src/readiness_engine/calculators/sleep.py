"""Sleep score — how well last night's sleep met the athlete's need.

Weights:
    performance 30 %, efficiency 22 %, stage quality 32 %,
    disturbances 14 %, timing 2 %

Bands: ≥80 OPTIMAL, ≥60 GOOD, ≥40 FAIR, else PAY_ATTENTION.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any

from readiness_engine.calculators.base import ScoreCalculator, ScoreInputs, classify_by_cuts
from readiness_engine.math.baselines import merge_samples
from readiness_engine.math.sleep import (
    classify_sleep_debt,
    disturbances_score,
    efficiency_score,
    performance_score,
    sleep_debt,
    stage_quality_score,
    timing_score,
)
from readiness_engine.models.enums import SLEEP_BAND_CUTS, SLEEP_WEIGHTS, ScoreType, SleepBand


class SleepCalculator(ScoreCalculator):
    score_type = ScoreType.SLEEP
    version = "1.0.0"
    weights = SLEEP_WEIGHTS
    core_inputs = ("performance",)
    band_type = SleepBand

    def components(self, inputs: ScoreInputs) -> dict[str, float | None]:
        sample = inputs.sample
        if sample is None or not sample.has_sleep:
            return {name: None for name in self.weights}

        baseline = inputs.baseline
        return {
            "performance": performance_score(sample.sleep_duration_s, inputs.profile.sleep_need_s),
            "efficiency": efficiency_score(sample.sleep_duration_s, sample.time_in_bed_s),
            "stage_quality": stage_quality_score(
                sample.sleep_duration_s, sample.deep_sleep_s, sample.rem_sleep_s
            ),
            "disturbances": disturbances_score(sample.wake_events),
            "timing": timing_score(
                sample.bedtime,
                sample.wake_time,
                baseline.bedtime_min if baseline else None,
                baseline.wake_time_min if baseline else None,
            ),
        }

    def classify(self, score: float) -> IntEnum:
        return classify_by_cuts(score, SLEEP_BAND_CUTS, SleepBand.PAY_ATTENTION)

    def snapshot(self, inputs: ScoreInputs) -> dict[str, Any]:
        sample = inputs.sample
        history = merge_samples(inputs.history + ((sample,) if sample else ()))
        debt_s = sleep_debt(history, inputs.profile.sleep_need_s, inputs.day)
        return {
            "sleep_duration_s": sample.sleep_duration_s if sample else None,
            "time_in_bed_s": sample.time_in_bed_s if sample else None,
            "deep_sleep_s": sample.deep_sleep_s if sample else None,
            "rem_sleep_s": sample.rem_sleep_s if sample else None,
            "wake_events": sample.wake_events if sample else None,
            "sleep_need_s": inputs.profile.sleep_need_s,
            "sleep_debt_s": round(debt_s, 1),
            "sleep_debt_severity": classify_sleep_debt(debt_s),
        }
