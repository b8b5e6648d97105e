"""Tests for strain components, recovery modulation and the bounded scale."""

from __future__ import annotations

import math

import pytest

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


class TestCardioLoad:
    def test_zero_trimp(self) -> None:
        assert cardio_load(0.0) == 0.0

    def test_log_compressed(self) -> None:
        assert cardio_load(99.0) == pytest.approx(36.0)

    def test_duration_bonus(self) -> None:
        assert cardio_load(99.0, duration_min=90.0) == pytest.approx(39.0)

    def test_intensity_bonus_capped(self) -> None:
        assert cardio_load(99.0, intensity_factor=1.3) == pytest.approx(51.0)

    def test_clamped_to_100(self) -> None:
        assert cardio_load(1e9, duration_min=400, intensity_factor=2.0) == 100.0


class TestStrengthLoad:
    def test_rpe_out_of_range(self) -> None:
        assert strength_load(0.0, 60.0) == 0.0
        assert strength_load(11.0, 60.0) == 0.0

    def test_session_rpe(self) -> None:
        expected = 18.0 * 0.8 * math.log10(3.5 * 7 * 60 + 1)
        assert strength_load(7.0, 60.0) == pytest.approx(expected)

    def test_volume_and_sets_increase_load(self) -> None:
        plain = strength_load(7.0, 45.0)
        assert strength_load(7.0, 45.0, volume_kg=5000.0, body_mass_kg=70.0) > plain
        assert strength_load(7.0, 45.0, sets=12) > plain


class TestNonExercise:
    def test_met_minutes(self) -> None:
        assert met_minutes(2000, None) == pytest.approx(20.0)
        assert met_minutes(None, 1000.0) == pytest.approx(3.0)
        assert met_minutes(None, None) == 0.0

    def test_capped(self) -> None:
        assert non_exercise_load(20000, None) == pytest.approx(16.0 * math.log1p(60.0))
        assert non_exercise_load(50000, 2000.0) == non_exercise_load(20000, None)

    def test_nothing(self) -> None:
        assert non_exercise_load(None, None) == 0.0


class TestRecoveryModulation:
    @pytest.mark.parametrize("score,signal", [(100.0, 1.0), (50.0, 0.0), (0.0, -1.0), (75.0, 0.5)])
    def test_signal_from_score(self, score, signal) -> None:
        assert recovery_signal_from_score(score) == pytest.approx(signal)

    def test_signal_from_vitals_is_clamped(self) -> None:
        assert recovery_signal_from_vitals(5.0, -5.0, 100.0) == 1.0
        assert recovery_signal_from_vitals(None, None, None) == 0.0

    def test_multiplier_range(self) -> None:
        assert recovery_multiplier(1.0) == pytest.approx(0.85)
        assert recovery_multiplier(-1.0) == pytest.approx(1.15)
        assert recovery_multiplier(0.0) == 1.0


class TestBoundedStrain:
    def test_zero(self) -> None:
        assert bounded_strain(0.0) == 0.0

    def test_saturation_point(self) -> None:
        assert bounded_strain(75.0) == pytest.approx(18.0 * (1 - math.exp(-1)))

    def test_monotone_and_bounded(self) -> None:
        values = [bounded_strain(x) for x in range(0, 2000, 25)]
        assert all(b > a for a, b in zip(values, values[1:]))
        assert values[-1] < 18.0
