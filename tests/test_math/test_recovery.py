"""Tests for recovery component curves, the training-stress penalty and recovery debt."""

from __future__ import annotations

from datetime import timedelta

import pytest

from readiness_engine.math.recovery import (
    form_score,
    hrv_score,
    recovery_debt,
    respiratory_score,
    rhr_score,
    tss_penalty,
)
from readiness_engine.models.enums import RecoveryDebtBand


class TestHRV:
    def test_at_or_above_baseline(self) -> None:
        assert hrv_score(55.0, 55.0) == 100.0
        assert hrv_score(70.0, 55.0) == 100.0

    def test_ten_percent_drop(self) -> None:
        assert hrv_score(49.5, 55.0) == pytest.approx(85.0)

    def test_twenty_percent_drop(self) -> None:
        assert hrv_score(44.0, 55.0) == pytest.approx(60.0)

    def test_monotone_in_drop(self) -> None:
        values = [hrv_score(55.0 * (1 - d / 100), 55.0) for d in range(0, 80, 5)]
        assert all(b <= a for a, b in zip(values, values[1:]))
        assert values[-1] >= 0.0

    def test_missing_baseline(self) -> None:
        assert hrv_score(55.0, None) is None


class TestRHR:
    def test_at_or_below_baseline(self) -> None:
        assert rhr_score(48.0, 50.0) == 100.0

    def test_eight_percent_elevation(self) -> None:
        assert rhr_score(54.0, 50.0) == pytest.approx(88.0)

    def test_floor(self) -> None:
        assert rhr_score(200.0, 50.0) == 0.0


class TestRespiratory:
    def test_stable(self) -> None:
        assert respiratory_score(14.0, 14.0) == 100.0

    def test_elevated(self) -> None:
        assert respiratory_score(15.4, 14.0) == pytest.approx(75.0)

    def test_strongly_elevated(self) -> None:
        assert respiratory_score(16.8, 14.0) == pytest.approx(10.0)

    def test_lowered_is_milder(self) -> None:
        assert respiratory_score(12.6, 14.0) > respiratory_score(15.4, 14.0)


class TestTSSPenalty:
    @pytest.mark.parametrize(
        "tss,points",
        [(0.0, 0.0), (40.0, 0.0), (75.0, 5.0), (100.0, 10.0), (150.0, 17.5), (200.0, 25.0), (300.0, 35.0)],
    )
    def test_piecewise(self, tss, points) -> None:
        assert tss_penalty(tss) == pytest.approx(points)

    def test_capped(self) -> None:
        assert tss_penalty(1000.0) == 40.0


class TestFormScore:
    def test_fresh(self) -> None:
        assert form_score(0.9) == 100.0

    def test_loaded(self) -> None:
        assert form_score(1.2) == pytest.approx(80.0)

    def test_overreached(self) -> None:
        assert form_score(2.0) == pytest.approx(25.0)

    def test_yesterday_penalty(self) -> None:
        assert form_score(0.9, yesterday_tss=150.0) == pytest.approx(82.5)

    def test_never_negative(self) -> None:
        assert form_score(2.6, yesterday_tss=400.0) == 0.0

    def test_missing_ratio(self) -> None:
        assert form_score(None, yesterday_tss=100.0) is None


def _scores(today, values):
    """Recovery scores for today and the days before it, newest first."""
    return {today - timedelta(days=i): v for i, v in enumerate(values) if v is not None}


class TestRecoveryDebt:
    def test_run_stops_at_first_good_day(self, today) -> None:
        debt = recovery_debt(_scores(today, [50.0, 55.0, 58.0, 70.0, 40.0]), today)
        assert debt.consecutive_days == 3
        assert debt.band is RecoveryDebtBand.ACCUMULATING
        assert debt.average_recovery == 54.6

    def test_no_history(self, today) -> None:
        debt = recovery_debt({}, today)
        assert debt.consecutive_days == 0
        assert debt.band is RecoveryDebtBand.FRESH
        assert debt.average_recovery is None

    def test_unscored_day_does_not_break_run(self, today) -> None:
        debt = recovery_debt(_scores(today, [50.0, None, 50.0, 80.0]), today)
        assert debt.consecutive_days == 2
        assert debt.band is RecoveryDebtBand.FRESH

    @pytest.mark.parametrize(
        "days, band",
        [(5, RecoveryDebtBand.SIGNIFICANT), (7, RecoveryDebtBand.CRITICAL)],
    )
    def test_bands(self, today, days, band) -> None:
        assert recovery_debt(_scores(today, [45.0] * days), today).band is band

    def test_window_bounds_the_run(self, today) -> None:
        debt = recovery_debt(_scores(today, [45.0] * 20), today)
        assert debt.consecutive_days == 14
        assert debt.average_recovery == 45.0
