"""Garmin Connect adapter — all Garmin network I/O lives here."""

from garmin_client.client import GarminClient
from garmin_client.exceptions import (
    GarminAPIError,
    GarminAuthError,
    GarminClientError,
    GarminMFARequired,
    GarminRateLimitError,
)
from garmin_client.metrics_mapper import map_activities, map_activity, map_daily_metrics, map_profile
from garmin_client.sources import GarminActivitySource, GarminMetricsSource, GarminProfileProvider

__all__ = [
    "GarminActivitySource",
    "GarminAPIError",
    "GarminAuthError",
    "GarminClient",
    "GarminClientError",
    "GarminMetricsSource",
    "GarminMFARequired",
    "GarminProfileProvider",
    "GarminRateLimitError",
    "map_activities",
    "map_activity",
    "map_daily_metrics",
    "map_profile",
]
