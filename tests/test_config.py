"""Tests for EngineSettings and its environment overrides."""

from __future__ import annotations

from pathlib import Path

import pytest

from readiness_engine.config import EngineSettings
from readiness_engine.models.enums import (
    CACHE_TTL_S,
    DEFAULT_TIMEOUTS_S,
    RECOVERY_WEIGHTS,
    ScoreType,
)


class TestDefaults:
    def test_calibrated_constants(self) -> None:
        settings = EngineSettings()
        assert settings.cache_ttl_s == CACHE_TTL_S
        assert settings.recovery_weights == RECOVERY_WEIGHTS
        assert settings.store_dir is None

    def test_timeout_per_score_type(self) -> None:
        settings = EngineSettings()
        assert settings.timeout_for(ScoreType.SLEEP) == 10.0
        assert settings.timeout_for(ScoreType.RECOVERY) == 8.0
        assert settings.timeout_for(ScoreType.STRAIN) == 15.0

    def test_partial_timeouts_fall_back(self) -> None:
        settings = EngineSettings(timeouts_s={ScoreType.SLEEP: 1.0})
        assert settings.timeout_for(ScoreType.SLEEP) == 1.0
        assert settings.timeout_for(ScoreType.STRAIN) == DEFAULT_TIMEOUTS_S[ScoreType.STRAIN]


class TestFromEnv:
    def test_empty_environment_gives_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("READINESS_STORE_DIR", raising=False)
        monkeypatch.delenv("READINESS_RECOVERY_WEIGHTS", raising=False)
        assert EngineSettings.from_env().recovery_weights == RECOVERY_WEIGHTS

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("READINESS_STRAIN_TIMEOUT_S", "3.5")
        monkeypatch.setenv("READINESS_CACHE_TTL_S", "60")
        monkeypatch.setenv("READINESS_TRAINING_LOAD_WINDOW_DAYS", "42")
        monkeypatch.setenv("READINESS_STORE_DIR", str(tmp_path))
        settings = EngineSettings.from_env()
        assert settings.timeout_for(ScoreType.STRAIN) == 3.5
        assert settings.cache_ttl_s == 60.0
        assert settings.training_load_window_days == 42
        assert settings.store_dir == tmp_path

    def test_partial_weight_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("READINESS_RECOVERY_WEIGHTS", "hrv=0.4, sleep=0.2")
        weights = EngineSettings.from_env().recovery_weights
        assert weights["hrv"] == 0.4
        assert weights["sleep"] == 0.2
        assert weights["rhr"] == RECOVERY_WEIGHTS["rhr"]

    def test_unknown_weight_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("READINESS_RECOVERY_WEIGHTS", "mood=1")
        with pytest.raises(ValueError, match="unknown weight"):
            EngineSettings.from_env()
