"""Pure functions mapping Garmin API response dicts to engine models.

No I/O. Takes the raw payloads returned by GarminClient and returns
DailyMetricSample, RawActivity and AthleteProfile instances. Every
extractor tolerates missing or malformed fields and yields None for them.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional

from readiness_engine.models.activity import RawActivity
from readiness_engine.models.metrics import AthleteProfile, DailyMetricSample

SOURCE_NAME = "garmin"


def map_daily_metrics(
    raw: dict[str, Any], cdate: date, recorded_at: datetime | None = None
) -> DailyMetricSample | None:
    """Map a pull_daily_metrics() result to a DailyMetricSample.

    Returns None when none of the endpoints produced anything usable, so
    "no data yet" is distinguishable from a sample with gaps.
    """
    sleep = _sleep_dto(raw.get("sleep"))
    stats = raw.get("stats") if isinstance(raw.get("stats"), dict) else {}

    sleep_s = _float(sleep.get("sleepTimeSeconds"))
    awake_s = _float(sleep.get("awakeSleepSeconds"))
    bedtime = _from_epoch_ms(sleep.get("sleepStartTimestampGMT"))
    wake_time = _from_epoch_ms(sleep.get("sleepEndTimestampGMT"))

    fields = {
        "hrv_ms": _extract_hrv(raw.get("hrv")),
        "rhr_bpm": _float(stats.get("restingHeartRate")),
        "respiratory_rate": _extract_respiration(raw.get("respiration"), sleep),
        "sleep_duration_s": sleep_s,
        "time_in_bed_s": _time_in_bed(sleep_s, awake_s, bedtime, wake_time),
        "deep_sleep_s": _float(sleep.get("deepSleepSeconds")),
        "rem_sleep_s": _float(sleep.get("remSleepSeconds")),
        "wake_events": _int(sleep.get("awakeCount")),
        "bedtime": bedtime,
        "wake_time": wake_time,
        "steps": _int(stats.get("totalSteps")),
        "active_energy_kcal": _float(stats.get("activeKilocalories")),
    }
    if all(value is None for value in fields.values()):
        return None
    return DailyMetricSample(day=cdate, recorded_at=recorded_at, **fields)


def map_activity(raw: dict[str, Any]) -> Optional[RawActivity]:
    """Map one activity summary; None if it lacks an id, start or duration."""
    activity_id = raw.get("activityId")
    start = _parse_gmt(raw.get("startTimeGMT"))
    duration = _float(raw.get("duration"))
    if activity_id is None or start is None or duration is None:
        return None

    activity_type = raw.get("activityType")
    type_key = activity_type.get("typeKey") if isinstance(activity_type, dict) else None

    rpe = _float(raw.get("directWorkoutRpe"))
    return RawActivity(
        id=str(activity_id),
        source=SOURCE_NAME,
        start_time=start,
        duration_s=duration,
        activity_type=str(type_key or "other"),
        avg_hr=_float(raw.get("averageHR")),
        avg_power=_float(raw.get("avgPower")),
        normalized_power=_float(raw.get("normPower")),
        provider_tss=_float(raw.get("trainingStressScore")),
        # Garmin stores RPE on a 10-100 scale
        rpe=rpe / 10.0 if rpe is not None else None,
        strength_sets=_int(raw.get("totalSets") or raw.get("activeSets")),
    )


def map_activities(raw: list[dict[str, Any]] | None) -> list[RawActivity]:
    activities = (map_activity(item) for item in raw or () if isinstance(item, dict))
    return [a for a in activities if a is not None]


def map_profile(raw: dict[str, Any], default: AthleteProfile | None = None) -> AthleteProfile:
    """Map a pull_profile() result, keeping *default* values for anything missing."""
    base = default or AthleteProfile()

    sex = base.sex
    profile = raw.get("user_profile")
    if isinstance(profile, dict) and profile.get("gender"):
        sex = "F" if str(profile["gender"]).upper() in ("FEMALE", "F") else "M"

    body_mass = base.body_mass_kg
    ftp = base.ftp_watts
    settings = raw.get("user_settings")
    if isinstance(settings, dict):
        user_data = settings.get("userData") or settings
        weight_g = _float(user_data.get("weight"))
        if weight_g:
            body_mass = round(weight_g / 1000.0, 1)
        ftp = _float(user_data.get("functionalThresholdPower")) or ftp

    resting_hr = base.resting_hr
    rhr_data = raw.get("resting_hr")
    if isinstance(rhr_data, dict):
        resting_hr = _extract_rhr_day(rhr_data) or resting_hr
    stats = raw.get("stats") if isinstance(raw.get("stats"), dict) else {}
    if resting_hr is None:
        resting_hr = _int(stats.get("restingHeartRate"))

    return AthleteProfile(
        max_hr=_int(stats.get("maxHeartRate")) or base.max_hr,
        resting_hr=resting_hr,
        ftp_watts=ftp,
        body_mass_kg=body_mass,
        sex=sex,
        sleep_need_s=base.sleep_need_s,
    )


# ---------------------------------------------------------------------------
# Internal extractors
# ---------------------------------------------------------------------------


def _sleep_dto(data: Any) -> dict[str, Any]:
    """dailySleepDTO, or an empty dict."""
    if not isinstance(data, dict):
        return {}
    dto = data.get("dailySleepDTO")
    return dto if isinstance(dto, dict) else {}


def _extract_hrv(data: Any) -> Optional[float]:
    """Last night's average RMSSD from hrvSummary."""
    if not isinstance(data, dict):
        return None
    summary = data.get("hrvSummary")
    if not isinstance(summary, dict):
        return None
    return _float(summary.get("lastNightAvg"))


def _extract_respiration(data: Any, sleep: dict[str, Any]) -> Optional[float]:
    """Sleeping respiration rate; falls back to the sleep summary's average."""
    if isinstance(data, dict):
        value = _float(data.get("avgSleepRespirationValue"))
        if value is not None:
            return value
    return _float(sleep.get("averageRespirationValue"))


def _extract_rhr_day(data: dict[str, Any]) -> Optional[int]:
    """RHR from get_rhr_day: allMetrics.metricsMap.WELLNESS_RESTING_HEART_RATE[0].value."""
    try:
        values = data["allMetrics"]["metricsMap"]["WELLNESS_RESTING_HEART_RATE"]
        return _int(values[0]["value"])
    except (KeyError, IndexError, TypeError):
        return None


def _time_in_bed(
    sleep_s: Optional[float],
    awake_s: Optional[float],
    bedtime: Optional[datetime],
    wake_time: Optional[datetime],
) -> Optional[float]:
    if bedtime is not None and wake_time is not None and wake_time > bedtime:
        return (wake_time - bedtime).total_seconds()
    if sleep_s is not None:
        return sleep_s + (awake_s or 0.0)
    return None


def _from_epoch_ms(value: Any) -> Optional[datetime]:
    ms = _float(value)
    if ms is None:
        return None
    try:
        return datetime.fromtimestamp(ms / 1000.0, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def _parse_gmt(value: Any) -> Optional[datetime]:
    """Garmin's ``"YYYY-MM-DD HH:MM:SS"`` GMT timestamps."""
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d %H:%M:%S").replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def _float(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def _int(value: Any) -> Optional[int]:
    number = _float(value)
    return int(number) if number is not None else None
