"""Enumerations and calibrated constants for the readiness engine.

Thresholds and weights are calibrated values, not re-derived here. Every
tunable one can be overridden through ``EngineSettings``.
"""

from enum import IntEnum, auto


class ScoreType(IntEnum):
    """The three daily scores. Order is the dependency order."""

    SLEEP = auto()
    RECOVERY = auto()
    STRAIN = auto()

    @property
    def slug(self) -> str:
        return self.name.lower()


class ComputationState(IntEnum):
    """Per-score-type orchestrator state machine."""

    IDLE = auto()
    COMPUTING = auto()
    SUCCEEDED = auto()
    TIMED_OUT = auto()
    FAILED = auto()


class TSSProvenance(IntEnum):
    """Which TSS-assignment tier produced an activity's load."""

    MEASURED = auto()
    HR_DERIVED = auto()
    ESTIMATED = auto()


class Fidelity(IntEnum):
    """How trustworthy a returned ScoreResult is relative to a fresh computation."""

    COMPUTED = auto()
    RESTORED = auto()  # Promoted from the durable tier with full breakdown
    RECONSTRUCTED = auto()  # Durable record had no breakdown
    DEGRADED = auto()  # Explicit fallback (expired or older day)


class SleepBand(IntEnum):
    OPTIMAL = auto()
    GOOD = auto()
    FAIR = auto()
    PAY_ATTENTION = auto()
    LIMITED_DATA = auto()


class RecoveryBand(IntEnum):
    OPTIMAL = auto()
    GOOD = auto()
    FAIR = auto()
    POOR = auto()
    LIMITED_DATA = auto()


class StrainBand(IntEnum):
    LIGHT = auto()
    MODERATE = auto()
    HARD = auto()
    VERY_HARD = auto()
    LIMITED_DATA = auto()


class IllnessSeverity(IntEnum):
    LOW = auto()
    MODERATE = auto()
    HIGH = auto()


class IllnessSignalType(IntEnum):
    HRV_DROP = auto()
    HRV_SPIKE = auto()  # Inflammation can drive vagal tone far above normal
    ELEVATED_RHR = auto()
    RESPIRATORY_CHANGE = auto()
    SLEEP_DISRUPTION = auto()
    ACTIVITY_DROP = auto()


class WellnessSeverity(IntEnum):
    YELLOW = auto()
    AMBER = auto()
    RED = auto()


class WellnessAlertType(IntEnum):
    UNUSUAL_METRICS = auto()
    SUSTAINED_ELEVATION = auto()
    MULTIPLE_INDICATORS = auto()


class RecoveryDebtBand(IntEnum):
    FRESH = auto()
    ACCUMULATING = auto()
    SIGNIFICANT = auto()
    CRITICAL = auto()


class TrainingRecommendation(IntEnum):
    """HRV-guided advice for the day, least demanding first."""

    REST = auto()
    TRAIN_EASY = auto()
    TRAIN_MODERATE = auto()
    TRAIN_HARD = auto()


BAND_TYPES: dict[ScoreType, type[IntEnum]] = {
    ScoreType.SLEEP: SleepBand,
    ScoreType.RECOVERY: RecoveryBand,
    ScoreType.STRAIN: StrainBand,
}


# ---------------------------------------------------------------------------
# Activity unification
# ---------------------------------------------------------------------------

DEDUP_START_TOLERANCE_S = 120.0
DEDUP_DURATION_TOLERANCE = 0.05  # relative difference

# Moderate-intensity estimate when no HR data exists (IF ~0.7 → ~50 TSS/h)
ESTIMATED_TSS_PER_HOUR = 50.0

PROVENANCE_CONFIDENCE: dict[TSSProvenance, float] = {
    TSSProvenance.MEASURED: 1.0,
    TSSProvenance.HR_DERIVED: 0.8,
    TSSProvenance.ESTIMATED: 0.5,
}

# ---------------------------------------------------------------------------
# Training load: Banister impulse-response time constants
# ---------------------------------------------------------------------------

CTL_TIME_CONSTANT = 42
ATL_TIME_CONSTANT = 7
TRAINING_LOAD_WINDOW_DAYS = 90

# Degenerate-pattern thresholds (empirical)
DEGENERATE_CTL_MIN = 10.0
DEGENERATE_ATL_MIN = 1.0
DEGENERATE_BALANCE_MIN = 0.5

# Banister TRIMP weighting, Banister (1991)
TRIMP_COEFFICIENT_MALE = 0.64
TRIMP_EXPONENT_MALE = 1.92
TRIMP_COEFFICIENT_FEMALE = 0.86
TRIMP_EXPONENT_FEMALE = 1.67

# ---------------------------------------------------------------------------
# Baselines
# ---------------------------------------------------------------------------

BASELINE_WINDOW_DAYS = 7
BASELINE_MIN_SAMPLES = 3
HISTORY_FETCH_DAYS = 30
DEFAULT_SLEEP_NEED_S = 8 * 3600.0

# ---------------------------------------------------------------------------
# Sleep score
# ---------------------------------------------------------------------------

SLEEP_WEIGHTS: dict[str, float] = {
    "performance": 0.30,
    "efficiency": 0.22,
    "stage_quality": 0.32,
    "disturbances": 0.14,
    "timing": 0.02,
}
SLEEP_BAND_CUTS = ((80, SleepBand.OPTIMAL), (60, SleepBand.GOOD), (40, SleepBand.FAIR))
STAGE_TARGET_SHARE = 0.40
STAGE_FLOOR_SHARE = 0.30

# ---------------------------------------------------------------------------
# Recovery score
# ---------------------------------------------------------------------------

RECOVERY_WEIGHTS: dict[str, float] = {
    "hrv": 0.30,
    "rhr": 0.20,
    "sleep": 0.30,
    "form": 0.10,
    "respiratory": 0.10,
}
RECOVERY_BAND_CUTS = ((80, RecoveryBand.OPTIMAL), (60, RecoveryBand.GOOD), (40, RecoveryBand.FAIR))

# Yesterday's TSS → form penalty points, piecewise linear between knots
TSS_PENALTY_KNOTS = ((50.0, 0.0), (100.0, 10.0), (200.0, 25.0))
TSS_PENALTY_TAIL_SLOPE = 0.1
TSS_PENALTY_MAX = 40.0

# ---------------------------------------------------------------------------
# Strain score
# ---------------------------------------------------------------------------

STRAIN_MAX = 18.0
STRAIN_SATURATION = 75.0
STRAIN_COMPONENT_WEIGHTS: dict[str, float] = {
    "cardio": 1.0,
    "strength": 1.0,
    "non_exercise": 0.3,
}
STRAIN_BAND_CUTS = ((16.0, StrainBand.VERY_HARD), (11.0, StrainBand.HARD), (6.0, StrainBand.MODERATE))
CARDIO_SCALE = 18.0
STRENGTH_SCALE = 3.5
STRENGTH_COMPRESSION = 0.8
NON_EXERCISE_SCALE = 16.0
NON_EXERCISE_MET_CAP = 60.0
COMPONENT_LOAD_MAX = 100.0
STEPS_PER_20_MET_MIN = 2000.0
KCAL_TO_MET_MIN = 0.003
RECOVERY_MODULATION_RANGE = 0.15

# ---------------------------------------------------------------------------
# Orchestration & cache
# ---------------------------------------------------------------------------

DEFAULT_TIMEOUTS_S: dict[ScoreType, float] = {
    ScoreType.SLEEP: 10.0,
    ScoreType.RECOVERY: 8.0,
    ScoreType.STRAIN: 15.0,
}
DEPENDENCY_WAIT_CAP_S = 5.0
DEPENDENCY_BACKOFF_INITIAL_S = 0.1
DEPENDENCY_BACKOFF_MAX_S = 1.0
CACHE_TTL_S = 24 * 3600.0
FALLBACK_LOOKBACK_DAYS = 7

# ---------------------------------------------------------------------------
# Illness indicator: single-day deviations from baseline, in percent
# ---------------------------------------------------------------------------

ILLNESS_HRV_DROP_PCT = -10.0
ILLNESS_HRV_SPIKE_PCT = 100.0
ILLNESS_RHR_RISE_PCT = 3.0
ILLNESS_SLEEP_DROP_PCT = -15.0
ILLNESS_RESPIRATORY_CHANGE_PCT = 8.0
ILLNESS_ACTIVITY_DROP_PCT = -25.0
ILLNESS_SIGNAL_WEIGHTS: dict[IllnessSignalType, float] = {
    IllnessSignalType.HRV_DROP: 1.0,
    IllnessSignalType.HRV_SPIKE: 1.2,
    IllnessSignalType.ELEVATED_RHR: 1.0,
    IllnessSignalType.SLEEP_DISRUPTION: 0.7,
    IllnessSignalType.RESPIRATORY_CHANGE: 0.7,
    IllnessSignalType.ACTIVITY_DROP: 0.3,
}
ILLNESS_MIN_CONFIDENCE = 0.5
ILLNESS_TREND_DAYS = 7
ILLNESS_TREND_CONSISTENCY = 0.7

# ---------------------------------------------------------------------------
# Wellness alert: sustained multi-day deviations, as fractions
# ---------------------------------------------------------------------------

WELLNESS_RHR_RISE = 0.15
WELLNESS_HRV_DROP = -0.20
WELLNESS_RESPIRATORY_RISE = 0.20
WELLNESS_SLEEP_DROP = -0.20
WELLNESS_TREND_DAYS = 3
WELLNESS_MIN_CONSECUTIVE_DAYS = 2
WELLNESS_MIN_AFFECTED = 3
WELLNESS_GOOD_RECOVERY = 75.0

# ---------------------------------------------------------------------------
# Recovery debt: consecutive days of suboptimal recovery
# ---------------------------------------------------------------------------

RECOVERY_DEBT_THRESHOLD = 60.0
RECOVERY_DEBT_WINDOW_DAYS = 14
RECOVERY_DEBT_BAND_CUTS = (
    (7, RecoveryDebtBand.CRITICAL),
    (5, RecoveryDebtBand.SIGNIFICANT),
    (3, RecoveryDebtBand.ACCUMULATING),
)

# ---------------------------------------------------------------------------
# HRV-guided training readiness (Kiviniemi et al.; PMC 8507742)
# ---------------------------------------------------------------------------

READINESS_HRV_WINDOW_DAYS = 7
READINESS_TSS_RANGES: dict[TrainingRecommendation, tuple[int, int]] = {
    TrainingRecommendation.REST: (0, 20),
    TrainingRecommendation.TRAIN_EASY: (20, 50),
    TrainingRecommendation.TRAIN_MODERATE: (50, 100),
    TrainingRecommendation.TRAIN_HARD: (100, 200),
}
READINESS_INTENSITY_FACTORS: dict[TrainingRecommendation, float] = {
    TrainingRecommendation.REST: 0.40,
    TrainingRecommendation.TRAIN_EASY: 0.55,
    TrainingRecommendation.TRAIN_MODERATE: 0.70,
    TrainingRecommendation.TRAIN_HARD: 0.85,
}
READINESS_HARD_TSS = 150.0
