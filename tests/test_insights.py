"""Tests for InsightsCalculator over a full input bundle."""

from __future__ import annotations

import dataclasses
from datetime import timedelta

import pytest

from readiness_engine.insights import InsightsCalculator
from readiness_engine.math.baselines import compute_baseline
from readiness_engine.models.enums import (
    IllnessSeverity,
    RecoveryBand,
    RecoveryDebtBand,
    ScoreType,
    TrainingRecommendation,
)
from readiness_engine.models.score import ScoreResult
from readiness_engine.models.training_load import TrainingLoadState


@pytest.fixture
def make_recovery(today, now):
    def _make(score: float, **fields) -> ScoreResult:
        return ScoreResult(
            score_type=ScoreType.RECOVERY,
            day=today,
            score=score,
            band=RecoveryBand.POOR,
            sub_scores=(),
            inputs_snapshot={},
            computed_at=now,
            algorithm_version="1.0.0",
            **fields,
        )

    return _make


@pytest.fixture
def sick_inputs(base_inputs, make_sample, history, today, make_recovery):
    sick = make_sample(
        today, hrv_ms=44.0, rhr_bpm=56.0, respiratory_rate=15.5, sleep_duration_s=5 * 3600
    )
    return dataclasses.replace(
        base_inputs,
        sample=sick,
        history=tuple(history),
        baseline=compute_baseline(history, today),
        training_load=TrainingLoadState.from_loads(today, 0.0, 50.0, 40.0),
        recovery_result=make_recovery(40.0),
    )


class TestInsightsCalculator:
    def test_sick_day(self, sick_inputs, today, now) -> None:
        history = {today - timedelta(days=1): 50.0, today - timedelta(days=2): 45.0}
        insights = InsightsCalculator().calculate(sick_inputs, history)

        assert insights.day == today
        assert insights.computed_at == now
        assert insights.illness.severity is IllnessSeverity.HIGH
        # A single bad day is not yet a sustained pattern
        assert insights.wellness is None
        assert insights.recovery_debt.consecutive_days == 3
        assert insights.recovery_debt.band is RecoveryDebtBand.ACCUMULATING
        assert insights.recovery_debt.average_recovery == 45.0
        assert insights.readiness.recommendation is TrainingRecommendation.REST
        assert insights.readiness.recovery_signal == 40.0

    def test_placeholder_recovery_is_ignored(self, sick_inputs, make_recovery) -> None:
        inputs = dataclasses.replace(
            sick_inputs, recovery_result=make_recovery(0.0, is_placeholder=True)
        )
        insights = InsightsCalculator().calculate(inputs)
        assert insights.readiness.recovery_signal == 50.0
        assert insights.recovery_debt.average_recovery is None

    def test_without_sample(self, base_inputs, history, today) -> None:
        inputs = dataclasses.replace(
            base_inputs, history=tuple(history), baseline=compute_baseline(history, today)
        )
        insights = InsightsCalculator().calculate(inputs)
        assert insights.illness is None
        assert insights.wellness is None
        assert insights.recovery_debt.band is RecoveryDebtBand.FRESH

    def test_serializes(self, sick_inputs) -> None:
        data = InsightsCalculator().calculate(sick_inputs).to_dict()
        assert data["readiness"]["recommendation"] == "REST"
        assert data["readiness"]["tss_range"] == [0, 20]
        assert data["illness"]["severity"] == "HIGH"
        assert data["wellness"] is None
