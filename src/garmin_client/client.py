"""Blocking Garmin Connect facade.

Every garminconnect call goes through ``_safe_call`` for retry on HTTP 429
and uniform error wrapping. Async callers run these methods on a worker
thread (see ``garmin_client.sources``).
"""

from __future__ import annotations

import logging
import time
from datetime import date
from pathlib import Path
from typing import Any, Callable, Optional

from garminconnect import Garmin

from garmin_client.auth import DEFAULT_TOKEN_DIR, create_session, is_authenticated, resume_session
from garmin_client.exceptions import GarminAPIError, GarminRateLimitError

logger = logging.getLogger(__name__)

_MAX_RETRIES = 3
_BASE_BACKOFF_S = 2


class GarminClient:
    """Pulls daily wellness data, activities and the athlete profile."""

    def __init__(self, garmin: Garmin, token_dir: Path | str = DEFAULT_TOKEN_DIR) -> None:
        self._garmin = garmin
        self.token_dir = Path(token_dir)

    @classmethod
    def login(
        cls,
        email: str,
        password: str,
        token_dir: Path | str = DEFAULT_TOKEN_DIR,
        prompt_mfa: Optional[Callable[[], str]] = None,
    ) -> GarminClient:
        return cls(create_session(email, password, token_dir, prompt_mfa), token_dir)

    @classmethod
    def from_tokens(cls, token_dir: Path | str = DEFAULT_TOKEN_DIR) -> GarminClient:
        return cls(resume_session(token_dir), token_dir)

    def is_authorized(self) -> bool:
        return is_authenticated(self.token_dir)

    # ------------------------------------------------------------------
    # Wellness
    # ------------------------------------------------------------------

    def pull_daily_metrics(self, cdate: date) -> dict[str, Any]:
        """Raw wellness payloads for one day.

        Keys: hrv, sleep, stats, respiration. A key is None when its
        endpoint fails; partial data is normal for the current day.
        """
        date_str = cdate.isoformat()
        endpoints: dict[str, tuple] = {
            "hrv": (self._garmin.get_hrv_data, date_str),
            "sleep": (self._garmin.get_sleep_data, date_str),
            "stats": (self._garmin.get_stats, date_str),
            "respiration": (self._garmin.get_respiration_data, date_str),
        }
        return self._pull_each(endpoints, date_str)

    # ------------------------------------------------------------------
    # Activities
    # ------------------------------------------------------------------

    def pull_activities(self, start: date, end: date) -> list[dict[str, Any]]:
        """Activity summaries that started between *start* and *end* inclusive."""
        activities = self._safe_call(
            self._garmin.get_activities_by_date, start.isoformat(), end.isoformat()
        )
        logger.debug("Pulled %d activities for %s..%s", len(activities or []), start, end)
        return list(activities or [])

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def pull_profile(self, cdate: date | None = None) -> dict[str, Any]:
        """Raw profile payloads: user_profile, user_settings, resting_hr, stats."""
        date_str = (cdate or date.today()).isoformat()
        endpoints: dict[str, tuple] = {
            "user_profile": (self._garmin.get_user_profile,),
            "user_settings": (self._garmin.get_userprofile_settings,),
            "resting_hr": (self._garmin.get_rhr_day, date_str),
            "stats": (self._garmin.get_stats, date_str),
        }
        return self._pull_each(endpoints, date_str)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _pull_each(self, endpoints: dict[str, tuple], date_str: str) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, (fn, *args) in endpoints.items():
            try:
                result[key] = self._safe_call(fn, *args)
            except GarminAPIError as exc:
                logger.warning("Failed to pull %s for %s: %s", key, date_str, exc)
                result[key] = None
        return result

    def _safe_call(self, fn: Callable, *args: Any, **kwargs: Any) -> Any:
        """Call *fn*, retrying with exponential backoff while Garmin answers 429."""
        endpoint = getattr(fn, "__name__", None)
        last_exc: Exception | None = None
        for attempt in range(_MAX_RETRIES):
            try:
                return fn(*args, **kwargs)
            except Exception as exc:
                last_exc = exc
                status = getattr(exc, "status", None) or getattr(exc, "status_code", None)
                if status != 429:
                    raise GarminAPIError(str(exc), status_code=status, endpoint=endpoint) from exc
                wait = _BASE_BACKOFF_S * (2**attempt)
                logger.warning(
                    "Rate limited (attempt %d/%d), retrying in %ds",
                    attempt + 1,
                    _MAX_RETRIES,
                    wait,
                )
                time.sleep(wait)

        raise GarminRateLimitError(
            f"Rate limited after {_MAX_RETRIES} retries: {last_exc}", endpoint=endpoint
        )
