"""Exception hierarchy for the Garmin Connect adapter.

These never cross into the engine: ``garmin_client.sources`` translates
them into ``DataUnavailable`` or a negative authorization answer.
"""

from __future__ import annotations


class GarminClientError(Exception):
    """Base exception for all garmin_client errors."""


class GarminAuthError(GarminClientError):
    """No usable session: missing or expired tokens, rejected credentials."""


class GarminMFARequired(GarminAuthError):
    """Login needs a verification code and no prompt was supplied."""


class GarminAPIError(GarminClientError):
    """A Garmin Connect endpoint returned an error.

    ``endpoint`` is the garminconnect method that failed, e.g.
    ``"get_sleep_data"``; ``status_code`` is the HTTP status when the
    underlying error carried one.
    """

    def __init__(
        self, message: str, status_code: int | None = None, endpoint: str | None = None
    ) -> None:
        super().__init__(f"{endpoint}: {message}" if endpoint else message)
        self.status_code = status_code
        self.endpoint = endpoint

    @property
    def transient(self) -> bool:
        """Server-side or throttling failure; the same call may succeed later."""
        return self.status_code is not None and (
            self.status_code == 429 or self.status_code >= 500
        )


class GarminRateLimitError(GarminAPIError):
    """HTTP 429 persisted through every retry."""

    def __init__(self, message: str = "Rate limited by Garmin Connect", endpoint: str | None = None) -> None:
        super().__init__(message, status_code=429, endpoint=endpoint)
