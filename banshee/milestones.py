"""Canonical milestone distances and milestone time detection.

A milestone time is the elapsed time at which a track's cumulative distance
*first* reaches a canonical race distance.  Re-crossing the same distance
later (e.g. on a looped course) never produces a second entry.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from banshee.activity import ActivityType
from banshee.constants import METERS_PER_KM, MILESTONE_KEY_TOLERANCE_M
from banshee.geo_path import GeoPathIndex
from banshee.track import Track

HALF_MARATHON_M = 21_097.5
MARATHON_M = 42_195.0


@dataclass(frozen=True)
class Milestone:
    """A named reference distance."""

    distance_m: float
    name: str


_FOOT_MILESTONES: tuple[Milestone, ...] = (
    Milestone(1_000.0, "1K"),
    Milestone(5_000.0, "5K"),
    Milestone(10_000.0, "10K"),
    Milestone(15_000.0, "15K"),
    Milestone(HALF_MARATHON_M, "Half Marathon"),
    Milestone(MARATHON_M, "Marathon"),
)

_CYCLE_MILESTONES: tuple[Milestone, ...] = (
    Milestone(10_000.0, "10K"),
    Milestone(25_000.0, "25K"),
    Milestone(50_000.0, "50K"),
    Milestone(100_000.0, "100K"),
)

MILESTONES: dict[ActivityType, tuple[Milestone, ...]] = {
    ActivityType.RUN: _FOOT_MILESTONES,
    ActivityType.WALK: _FOOT_MILESTONES,
    ActivityType.CYCLE: _CYCLE_MILESTONES,
}

# Every canonical distance across all activity types, ascending
ALL_MILESTONE_DISTANCES: tuple[float, ...] = tuple(
    sorted({m.distance_m for ms in MILESTONES.values() for m in ms})
)


def milestones_for(activity_type: ActivityType) -> tuple[Milestone, ...]:
    """Canonical milestones for *activity_type*, ascending by distance."""
    return MILESTONES[activity_type]


def milestone_name(distance_m: float) -> str:
    """Human-readable name for a distance.

    Canonical distances use their table name, other whole kilometers become
    ``"<n>K"`` and anything else is ``"Custom"``.
    """
    for milestones in MILESTONES.values():
        for m in milestones:
            if abs(m.distance_m - distance_m) < MILESTONE_KEY_TOLERANCE_M:
                return m.name
    km = distance_m / METERS_PER_KM
    if distance_m > 0 and abs(distance_m - round(km) * METERS_PER_KM) < MILESTONE_KEY_TOLERANCE_M:
        return f"{round(km)}K"
    return "Custom"


@dataclass(frozen=True)
class MilestoneTime:
    """Elapsed time at which a track first reached a milestone distance."""

    distance_m: float
    duration_ms: int

    @property
    def name(self) -> str:
        return milestone_name(self.distance_m)


@dataclass(frozen=True)
class SegmentTime:
    """Fastest contiguous stretch of a track covering a distance."""

    distance_m: float
    duration_ms: int
    start_index: int
    end_index: int


def milestone_times(index: GeoPathIndex, distances: Iterable[float]) -> list[MilestoneTime]:
    """First-crossing times for each distance the indexed path reaches."""
    total = index.total_distance()
    results: list[MilestoneTime] = []
    for distance in sorted(set(distances)):
        if distance <= 0 or distance > total:
            continue
        results.append(
            MilestoneTime(distance_m=distance, duration_ms=index.time_at_distance(distance))
        )
    return results


def detect_milestones(
    track: Track,
    distances: Iterable[float] = ALL_MILESTONE_DISTANCES,
) -> list[MilestoneTime]:
    """Detect milestone times along *track*.

    Parameters
    ----------
    track:
        A completed activity track.
    distances:
        Milestone distances in meters; defaults to every canonical distance.

    Returns
    -------
    One :class:`MilestoneTime` per distance the track's total distance meets
    or exceeds, in ascending order.  Unreached milestones are omitted and a
    track with fewer than 2 points yields an empty list.
    """
    if len(track) < 2:
        return []
    return milestone_times(GeoPathIndex.build(track), distances)


def fastest_segment_times(
    track: Track,
    distances: Iterable[float] = ALL_MILESTONE_DISTANCES,
) -> list[SegmentTime]:
    """Fastest stretch of *track* covering each distance, anywhere in the track.

    Windows start at recorded points and end at the interpolated time the
    window reaches the target distance.  Unlike :func:`detect_milestones`
    the window does not have to start at t=0.
    """
    if len(track) < 2:
        return []
    index = GeoPathIndex.build(track)
    cum = index.cumulative_m
    elapsed = index.elapsed_ms
    n = len(cum)

    results: list[SegmentTime] = []
    for distance in sorted(set(distances)):
        if distance <= 0 or distance > cum[-1]:
            continue
        targets = cum + distance
        ends = np.searchsorted(cum, targets, side="left")
        valid = np.nonzero(ends < n)[0]
        if len(valid) == 0:
            continue
        starts = valid
        hi = ends[valid]
        lo = hi - 1
        span = cum[hi] - cum[lo]
        fraction = (targets[starts] - cum[lo]) / span
        end_times = elapsed[lo] + fraction * (elapsed[hi] - elapsed[lo])
        durations = end_times - elapsed[starts]
        best = int(np.argmin(durations))
        results.append(
            SegmentTime(
                distance_m=distance,
                duration_ms=int(round(durations[best])),
                start_index=int(starts[best]),
                end_index=int(hi[best]),
            )
        )
    return results
