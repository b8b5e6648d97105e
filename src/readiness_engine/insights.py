"""InsightsCalculator — derived daily insights on top of the three scores."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date

from readiness_engine.calculators.base import ScoreInputs
from readiness_engine.math.readiness import assess_readiness, rolling_hrv
from readiness_engine.math.recovery import recovery_debt
from readiness_engine.math.wellness import detect_illness, detect_wellness_alert
from readiness_engine.models.insights import DailyInsights

logger = logging.getLogger(__name__)


class InsightsCalculator:
    """Illness and wellness flags, recovery debt and an HRV-guided training call.

    Pure and synchronous like the score calculators, but it consumes their
    results instead of producing a ScoreResult, so the registry never sees it.

    Usage:
        insights = InsightsCalculator().calculate(inputs, recovery_history)
    """

    def calculate(
        self, inputs: ScoreInputs, recovery_history: Mapping[date, float] | None = None
    ) -> DailyInsights:
        """*recovery_history* maps earlier days to their recovery score.

        Today's recovery comes from ``inputs.recovery_result`` and overrides
        any entry for the same day.
        """
        recovery = inputs.recovery_result
        recovery_score = None if recovery is None or recovery.is_placeholder else recovery.score

        scores = dict(recovery_history or {})
        if recovery_score is not None:
            scores[inputs.day] = recovery_score

        samples = list(inputs.history)
        if inputs.sample is not None:
            samples.append(inputs.sample)

        illness = detect_illness(inputs.sample, inputs.baseline, inputs.history)
        wellness = detect_wellness_alert(samples, inputs.day, recovery_score)
        debt = recovery_debt(scores, inputs.day)

        rolling_ms, cv_pct = rolling_hrv(samples, inputs.day)
        load = inputs.training_load
        readiness = assess_readiness(
            rolling_ms=rolling_ms,
            baseline_ms=inputs.baseline.hrv_ms if inputs.baseline else None,
            cv_pct=cv_pct,
            recovery_score=recovery_score,
            tsb=load.tsb if load is not None else None,
        )

        if illness is not None and illness.is_significant:
            logger.info(
                "Illness indicator for %s: %s (confidence %.2f)",
                inputs.day,
                illness.severity.name,
                illness.confidence,
            )
        if wellness is not None:
            logger.info(
                "Wellness alert for %s: %s (%s)",
                inputs.day,
                wellness.severity.name,
                ", ".join(wellness.affected),
            )
        return DailyInsights(
            day=inputs.day,
            computed_at=inputs.computed_at,
            illness=illness,
            wellness=wellness,
            recovery_debt=debt,
            readiness=readiness,
        )
