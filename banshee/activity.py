"""Activity types, recorded activities, reference runs and list operations."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from functools import cached_property

import numpy as np

from banshee.constants import METERS_PER_KM, MS_PER_HOUR, MS_PER_MINUTE
from banshee.errors import MalformedInputError
from banshee.geo import segment_distances
from banshee.track import Track


class ActivityType(StrEnum):
    """The closed set of supported activity types."""

    RUN = "run"
    WALK = "walk"
    CYCLE = "cycle"

    @classmethod
    def from_int(cls, value: int) -> ActivityType:
        """Decode the integer wire code (0 = run, 1 = walk, 2 = cycle)."""
        try:
            return _INT_CODES[value]
        except (KeyError, TypeError):
            msg = f"Unknown activity type code: {value!r}"
            raise MalformedInputError(msg) from None

    def to_int(self) -> int:
        return list(_INT_CODES.values()).index(self)


_INT_CODES: dict[int, ActivityType] = {
    0: ActivityType.RUN,
    1: ActivityType.WALK,
    2: ActivityType.CYCLE,
}


# ---------------------------------------------------------------------------
# Metric helpers
# ---------------------------------------------------------------------------


def track_distance_m(track: Track) -> float:
    """Total path length of *track* in meters (0.0 for < 2 points)."""
    if len(track) < 2:
        return 0.0
    lats = np.fromiter((p.lat for p in track), dtype=float, count=len(track))
    lons = np.fromiter((p.lon for p in track), dtype=float, count=len(track))
    return float(segment_distances(lats, lons).sum())


def pace_min_per_km(distance_m: float, duration_ms: int) -> float:
    """Average pace in minutes per km, 0.0 when no distance was covered."""
    if distance_m <= 0:
        return 0.0
    return (duration_ms / MS_PER_MINUTE) / (distance_m / METERS_PER_KM)


def speed_kmh(distance_m: float, duration_ms: int) -> float:
    """Average speed in km/h, 0.0 when no time elapsed."""
    if duration_ms <= 0:
        return 0.0
    return (distance_m / METERS_PER_KM) / (duration_ms / MS_PER_HOUR)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ActivitySummary:
    """Lightweight activity metadata for list views (no track)."""

    id: str
    name: str
    activity_type: ActivityType
    total_distance_m: float
    duration_ms: int
    recorded_at: int
    pace_min_per_km: float


@dataclass(frozen=True)
class Activity:
    """A completed, typed activity."""

    id: str
    name: str
    activity_type: ActivityType
    track: Track
    recorded_at: int  # epoch ms

    @cached_property
    def total_distance_m(self) -> float:
        return track_distance_m(self.track)

    @property
    def duration_ms(self) -> int:
        return self.track.duration_ms

    @property
    def average_pace_min_per_km(self) -> float:
        return pace_min_per_km(self.total_distance_m, self.duration_ms)

    @property
    def average_speed_kmh(self) -> float:
        return speed_kmh(self.total_distance_m, self.duration_ms)

    def to_summary(self) -> ActivitySummary:
        return ActivitySummary(
            id=self.id,
            name=self.name,
            activity_type=self.activity_type,
            total_distance_m=self.total_distance_m,
            duration_ms=self.duration_ms,
            recorded_at=self.recorded_at,
            pace_min_per_km=self.average_pace_min_per_km,
        )


@dataclass(frozen=True)
class RunRecord:
    """A reference run (the banshee) to race against.

    Usually derived from an :class:`Activity` but carries no type.
    """

    id: str
    name: str
    track: Track
    recorded_at: int  # epoch ms

    @classmethod
    def from_activity(cls, activity: Activity) -> RunRecord:
        return cls(
            id=activity.id,
            name=activity.name,
            track=activity.track,
            recorded_at=activity.recorded_at,
        )

    @cached_property
    def total_distance_m(self) -> float:
        return track_distance_m(self.track)

    @property
    def duration_ms(self) -> int:
        return self.track.duration_ms

    @property
    def average_pace_min_per_km(self) -> float:
        return pace_min_per_km(self.total_distance_m, self.duration_ms)

    @property
    def average_speed_kmh(self) -> float:
        return speed_kmh(self.total_distance_m, self.duration_ms)


# ---------------------------------------------------------------------------
# List operations
# ---------------------------------------------------------------------------


def sort_by_date(summaries: Iterable[ActivitySummary]) -> list[ActivitySummary]:
    """Return summaries newest first."""
    return sorted(summaries, key=lambda s: s.recorded_at, reverse=True)


def filter_by_type(
    summaries: Iterable[ActivitySummary],
    activity_type: ActivityType,
) -> list[ActivitySummary]:
    """Return only the summaries of *activity_type*, preserving order."""
    return [s for s in summaries if s.activity_type == activity_type]
