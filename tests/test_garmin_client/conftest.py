"""Fixtures with realistic Garmin API response dicts for testing."""

from __future__ import annotations

import pytest


@pytest.fixture
def garmin_hrv_data() -> dict:
    """Realistic Garmin HRV API response."""
    return {
        "hrvSummary": {
            "calendarDate": "2025-01-15",
            "weeklyAvg": 52.0,
            "lastNight": 48.0,
            "lastNightAvg": 48.0,
            "lastNight5MinHigh": 65.0,
            "baseline": {
                "lowUpper": 40,
                "balancedLow": 45,
                "balancedUpper": 60,
                "markerValue": None,
            },
            "status": "BALANCED",
            "startTimestampGMT": 1705276800000,
            "endTimestampGMT": 1705305600000,
        },
        "hrvReadings": [
            {"readingTimeGMT": "2025-01-15T02:00:00.0", "hrvValue": 45},
            {"readingTimeGMT": "2025-01-15T03:00:00.0", "hrvValue": 50},
            {"readingTimeGMT": "2025-01-15T04:00:00.0", "hrvValue": 48},
        ],
    }


@pytest.fixture
def garmin_sleep_data() -> dict:
    """Realistic Garmin sleep API response (00:00-08:00 GMT in bed)."""
    return {
        "dailySleepDTO": {
            "calendarDate": "2025-01-15",
            "sleepTimeSeconds": 27000,  # 7.5 hours
            "sleepStartTimestampGMT": 1705276800000,
            "sleepEndTimestampGMT": 1705305600000,
            "unmeasurableSleepSeconds": 0,
            "deepSleepSeconds": 5400,
            "lightSleepSeconds": 14400,
            "remSleepSeconds": 5400,
            "awakeSleepSeconds": 1800,
            "awakeCount": 3,
            "averageRespirationValue": 14.5,
            "sleepScores": {
                "overall": {"value": 82.0, "qualifierKey": "GOOD"},
            },
        }
    }


@pytest.fixture
def garmin_stats_data() -> dict:
    """Realistic Garmin daily stats API response."""
    return {
        "calendarDate": "2025-01-15",
        "totalSteps": 12345,
        "activeKilocalories": 620.0,
        "restingHeartRate": 52,
        "maxHeartRate": 178,
        "minHeartRate": 48,
        "averageStressLevel": 35,
    }


@pytest.fixture
def garmin_respiration_data() -> dict:
    """Realistic Garmin respiration API response."""
    return {
        "calendarDate": "2025-01-15",
        "lowestRespirationValue": 11.0,
        "highestRespirationValue": 21.0,
        "avgWakingRespirationValue": 15.0,
        "avgSleepRespirationValue": 13.8,
    }


@pytest.fixture
def garmin_full_metrics(
    garmin_hrv_data,
    garmin_sleep_data,
    garmin_stats_data,
    garmin_respiration_data,
) -> dict:
    """Full pull_daily_metrics() return value with all endpoints populated."""
    return {
        "hrv": garmin_hrv_data,
        "sleep": garmin_sleep_data,
        "stats": garmin_stats_data,
        "respiration": garmin_respiration_data,
    }


@pytest.fixture
def garmin_activity() -> dict:
    """One entry of get_activities_by_date()."""
    return {
        "activityId": 17654321098,
        "activityName": "Morning Ride",
        "startTimeLocal": "2025-01-15 07:02:11",
        "startTimeGMT": "2025-01-15 06:02:11",
        "activityType": {"typeId": 2, "typeKey": "cycling"},
        "duration": 5412.3,
        "averageHR": 148.0,
        "maxHR": 176.0,
        "avgPower": 201.0,
        "normPower": 224.0,
        "trainingStressScore": 96.4,
    }


@pytest.fixture
def garmin_strength_activity() -> dict:
    return {
        "activityId": 17654321099,
        "startTimeGMT": "2025-01-15 17:30:00",
        "activityType": {"typeKey": "strength_training"},
        "duration": 2700.0,
        "directWorkoutRpe": 70,
        "totalSets": 18,
    }


@pytest.fixture
def garmin_profile_data(garmin_stats_data) -> dict:
    """pull_profile() return value."""
    return {
        "user_profile": {"gender": "FEMALE", "displayName": "runner"},
        "user_settings": {
            "userData": {"weight": 61500.0, "functionalThresholdPower": 215}
        },
        "resting_hr": {
            "allMetrics": {
                "metricsMap": {
                    "WELLNESS_RESTING_HEART_RATE": [
                        {"value": 47.0, "calendarDate": "2025-01-15"}
                    ]
                }
            }
        },
        "stats": garmin_stats_data,
    }
