"""Tests for garmin_client.metrics_mapper — pure functions, no I/O."""

from __future__ import annotations

from datetime import date, datetime, timezone

from garmin_client.metrics_mapper import (
    map_activities,
    map_activity,
    map_daily_metrics,
    map_profile,
)
from readiness_engine.models.metrics import AthleteProfile

DAY = date(2025, 1, 15)


# ---------------------------------------------------------------------------
# map_daily_metrics
# ---------------------------------------------------------------------------


class TestMapDailyMetrics:
    def test_full_payload(self, garmin_full_metrics):
        sample = map_daily_metrics(garmin_full_metrics, DAY)
        assert sample.day == DAY
        assert sample.hrv_ms == 48.0
        assert sample.rhr_bpm == 52.0
        assert sample.respiratory_rate == 13.8
        assert sample.sleep_duration_s == 27000.0
        assert sample.deep_sleep_s == 5400.0
        assert sample.rem_sleep_s == 5400.0
        assert sample.wake_events == 3
        assert sample.steps == 12345
        assert sample.active_energy_kcal == 620.0

    def test_bed_and_wake_times_are_utc(self, garmin_full_metrics):
        sample = map_daily_metrics(garmin_full_metrics, DAY)
        assert sample.bedtime == datetime(2025, 1, 15, 0, 0, tzinfo=timezone.utc)
        assert sample.wake_time == datetime(2025, 1, 15, 8, 0, tzinfo=timezone.utc)
        assert sample.time_in_bed_s == 8 * 3600.0

    def test_time_in_bed_without_timestamps(self, garmin_sleep_data):
        dto = garmin_sleep_data["dailySleepDTO"]
        del dto["sleepStartTimestampGMT"]
        sample = map_daily_metrics({"sleep": garmin_sleep_data}, DAY)
        assert sample.time_in_bed_s == 27000.0 + 1800.0

    def test_respiration_falls_back_to_sleep_summary(self, garmin_sleep_data):
        sample = map_daily_metrics({"sleep": garmin_sleep_data, "respiration": None}, DAY)
        assert sample.respiratory_rate == 14.5

    def test_partial_payload(self, garmin_stats_data):
        sample = map_daily_metrics({"hrv": None, "sleep": None, "stats": garmin_stats_data}, DAY)
        assert sample.sleep_duration_s is None
        assert not sample.has_sleep
        assert sample.steps == 12345

    def test_nothing_usable_is_none(self):
        assert map_daily_metrics({"hrv": None, "sleep": {}, "stats": None}, DAY) is None

    def test_malformed_values_ignored(self):
        sample = map_daily_metrics(
            {"hrv": {"hrvSummary": {"lastNightAvg": "n/a"}}, "stats": {"totalSteps": 800}}, DAY
        )
        assert sample.hrv_ms is None
        assert sample.steps == 800

    def test_recorded_at_passed_through(self, garmin_full_metrics):
        stamp = datetime(2025, 1, 15, 9, tzinfo=timezone.utc)
        assert map_daily_metrics(garmin_full_metrics, DAY, recorded_at=stamp).recorded_at == stamp


# ---------------------------------------------------------------------------
# map_activity
# ---------------------------------------------------------------------------


class TestMapActivity:
    def test_cycling(self, garmin_activity):
        activity = map_activity(garmin_activity)
        assert activity.key == "garmin:17654321098"
        assert activity.start_time == datetime(2025, 1, 15, 6, 2, 11, tzinfo=timezone.utc)
        assert activity.duration_s == 5412.3
        assert activity.activity_type == "cycling"
        assert activity.avg_hr == 148.0
        assert activity.normalized_power == 224.0
        assert activity.provider_tss == 96.4
        assert not activity.is_strength

    def test_strength_rpe_rescaled(self, garmin_strength_activity):
        activity = map_activity(garmin_strength_activity)
        assert activity.is_strength
        assert activity.rpe == 7.0
        assert activity.strength_sets == 18

    def test_missing_start_dropped(self, garmin_activity):
        del garmin_activity["startTimeGMT"]
        assert map_activity(garmin_activity) is None

    def test_bad_timestamp_dropped(self, garmin_activity):
        garmin_activity["startTimeGMT"] = "yesterday"
        assert map_activity(garmin_activity) is None

    def test_map_activities_skips_junk(self, garmin_activity, garmin_strength_activity):
        activities = map_activities(
            [garmin_activity, {"activityId": 5}, "junk", garmin_strength_activity]
        )
        assert [a.id for a in activities] == ["17654321098", "17654321099"]

    def test_map_activities_none(self):
        assert map_activities(None) == []


# ---------------------------------------------------------------------------
# map_profile
# ---------------------------------------------------------------------------


class TestMapProfile:
    def test_full_profile(self, garmin_profile_data):
        profile = map_profile(garmin_profile_data)
        assert profile.sex == "F"
        assert profile.body_mass_kg == 61.5
        assert profile.ftp_watts == 215.0
        assert profile.resting_hr == 47
        assert profile.max_hr == 178
        assert profile.has_hr_reserve

    def test_rhr_falls_back_to_stats(self, garmin_profile_data):
        garmin_profile_data["resting_hr"] = None
        assert map_profile(garmin_profile_data).resting_hr == 52

    def test_defaults_kept_for_missing(self):
        defaults = AthleteProfile(max_hr=185, ftp_watts=240.0, sleep_need_s=8.5 * 3600)
        profile = map_profile({"user_profile": None, "stats": None}, defaults)
        assert profile.max_hr == 185
        assert profile.ftp_watts == 240.0
        assert profile.sleep_need_s == 8.5 * 3600
