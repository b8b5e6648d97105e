"""ActivityUnifier — merges multi-provider workout histories into one stream."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Sequence
from datetime import date

from readiness_engine.math.tss import assign_tss
from readiness_engine.models.activity import RawActivity, UnifiedActivity
from readiness_engine.models.enums import (
    DEDUP_DURATION_TOLERANCE,
    DEDUP_START_TOLERANCE_S,
    ESTIMATED_TSS_PER_HOUR,
)
from readiness_engine.models.metrics import AthleteProfile

logger = logging.getLogger(__name__)


def explicitly_linked(a: RawActivity, b: RawActivity) -> bool:
    """Same record, or one provider links to the other (directly or via a shared link)."""
    if a.key == b.key:
        return True
    if a.key in b.linked_ids or b.key in a.linked_ids:
        return True
    return bool(a.linked_ids & b.linked_ids)


def heuristically_matched(
    a: RawActivity,
    b: RawActivity,
    start_tolerance_s: float = DEDUP_START_TOLERANCE_S,
    duration_tolerance: float = DEDUP_DURATION_TOLERANCE,
) -> bool:
    """Start times within tolerance *and* durations within relative tolerance."""
    start_gap = abs((a.start_time - b.start_time).total_seconds())
    if start_gap > start_tolerance_s:
        return False
    longest = max(a.duration_s, b.duration_s)
    if longest <= 0:
        return True
    return abs(a.duration_s - b.duration_s) / longest <= duration_tolerance


def is_duplicate(a: RawActivity, b: RawActivity) -> bool:
    return explicitly_linked(a, b) or heuristically_matched(a, b)


class ActivityUnifier:
    """Deduplicates workouts across providers and assigns each one a TSS.

    Sources are passed in priority order, most complete provider first.
    When the same workout appears more than once, the highest-priority copy
    is kept as the primary record and fills its gaps (provider TSS, average
    HR) from the other copies.

    Usage:
        unifier = ActivityUnifier()
        unified = unifier.unify([intervals, strava, health], profile)
    """

    def __init__(self, estimated_tss_per_hour: float = ESTIMATED_TSS_PER_HOUR) -> None:
        self.estimated_tss_per_hour = estimated_tss_per_hour

    def unify(
        self,
        sources: Sequence[Sequence[RawActivity]],
        profile: AthleteProfile,
    ) -> list[UnifiedActivity]:
        """Deduplicate and annotate activities, newest first."""
        groups: list[list[RawActivity]] = []
        for source_activities in sources:
            for activity in source_activities:
                group = self._find_group(groups, activity)
                if group is None:
                    groups.append([activity])
                else:
                    logger.debug(
                        "Activity %s duplicates %s, merging", activity.key, group[0].key
                    )
                    group.append(activity)

        unified = [self._annotate(group, profile) for group in groups]
        unified.sort(key=lambda u: (u.start_time, u.key), reverse=True)
        logger.debug(
            "Unified %d raw activities into %d",
            sum(len(g) for g in groups),
            len(unified),
        )
        return unified

    @staticmethod
    def _find_group(groups: list[list[RawActivity]], activity: RawActivity) -> list[RawActivity] | None:
        for group in groups:
            if any(is_duplicate(member, activity) for member in group):
                return group
        return None

    def _annotate(self, group: list[RawActivity], profile: AthleteProfile) -> UnifiedActivity:
        primary = merge_group(group)
        tss, provenance = assign_tss(primary, profile, self.estimated_tss_per_hour)
        return UnifiedActivity(
            activity=primary,
            tss=tss,
            provenance=provenance,
            merged_from=tuple(member.key for member in group[1:]),
        )


def merge_group(group: Sequence[RawActivity]) -> RawActivity:
    """Primary record with provider TSS and average HR borrowed from duplicates."""
    primary = group[0]
    updates: dict[str, float] = {}
    if not (primary.provider_tss and primary.provider_tss > 0):
        for member in group[1:]:
            if member.provider_tss and member.provider_tss > 0:
                updates["provider_tss"] = member.provider_tss
                break
    if not (primary.avg_hr and primary.avg_hr > 0):
        for member in group[1:]:
            if member.avg_hr and member.avg_hr > 0:
                updates["avg_hr"] = member.avg_hr
                break
    return dataclasses.replace(primary, **updates) if updates else primary


def group_by_day(activities: Iterable[UnifiedActivity]) -> dict[date, list[UnifiedActivity]]:
    grouped: dict[date, list[UnifiedActivity]] = {}
    for activity in activities:
        grouped.setdefault(activity.day, []).append(activity)
    return grouped


def daily_tss(activities: Iterable[UnifiedActivity], discount: bool = False) -> dict[date, float]:
    """Total TSS per day; with *discount* each entry is weighted by its confidence."""
    totals: dict[date, float] = {}
    for activity in activities:
        tss = activity.tss * activity.confidence if discount else activity.tss
        totals[activity.day] = totals.get(activity.day, 0.0) + tss
    return totals
