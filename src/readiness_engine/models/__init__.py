"""Data models for the readiness engine."""

from readiness_engine.models.activity import RawActivity, UnifiedActivity
from readiness_engine.models.enums import (
    ComputationState,
    Fidelity,
    IllnessSeverity,
    RecoveryBand,
    RecoveryDebtBand,
    ScoreType,
    SleepBand,
    StrainBand,
    TrainingRecommendation,
    TSSProvenance,
)
from readiness_engine.models.insights import (
    DailyInsights,
    IllnessIndicator,
    ReadinessAssessment,
    RecoveryDebt,
    WellnessAlert,
)
from readiness_engine.models.metrics import AthleteProfile, Baseline, DailyMetricSample
from readiness_engine.models.score import (
    ComputationRecord,
    ScoreOutcome,
    ScoreResult,
    ScoreUpdate,
    SubScore,
)
from readiness_engine.models.training_load import TrainingLoadSeries, TrainingLoadState

__all__ = [
    "AthleteProfile",
    "Baseline",
    "ComputationRecord",
    "ComputationState",
    "DailyInsights",
    "DailyMetricSample",
    "Fidelity",
    "IllnessIndicator",
    "IllnessSeverity",
    "RawActivity",
    "ReadinessAssessment",
    "RecoveryBand",
    "RecoveryDebt",
    "RecoveryDebtBand",
    "ScoreOutcome",
    "ScoreResult",
    "ScoreType",
    "ScoreUpdate",
    "SleepBand",
    "StrainBand",
    "SubScore",
    "TSSProvenance",
    "TrainingRecommendation",
    "TrainingLoadSeries",
    "TrainingLoadState",
    "UnifiedActivity",
    "WellnessAlert",
]
