"""Shared test fixtures for banshee tests."""

from __future__ import annotations

import math
from collections.abc import Callable

import numpy as np
import pytest

from banshee.activity import Activity, ActivityType, RunRecord
from banshee.constants import EARTH_RADIUS_M
from banshee.track import Coordinate, Track

# Along a meridian the haversine distance is exactly R * dlat
METERS_PER_DEG_LAT = EARTH_RADIUS_M * math.pi / 180.0

START_LAT = 40.7128
START_LON = -74.0060

# Type aliases for the factory fixtures
TrackFactory = Callable[..., Track]
ActivityFactory = Callable[..., Activity]


def north_of(meters: float, lat: float = START_LAT) -> float:
    """Latitude *meters* due north of *lat*."""
    return lat + meters / METERS_PER_DEG_LAT


def build_track(
    distances_m: list[float] | np.ndarray,
    times_ms: list[int] | np.ndarray,
    start_lat: float = START_LAT,
    lon: float = START_LON,
) -> Track:
    """Track running due north, one point per (cumulative distance, time) pair."""
    return Track.from_points(
        Coordinate(lat=north_of(float(d), start_lat), lon=lon, timestamp_ms=int(t))
        for d, t in zip(distances_m, times_ms, strict=True)
    )


@pytest.fixture
def track_factory() -> TrackFactory:
    """Factory fixture for constant-speed tracks running due north.

    ``distance_m`` is covered in ``duration_ms`` over ``n_points`` evenly
    spaced fixes.
    """

    def _create(
        distance_m: float = 5_000.0,
        duration_ms: int = 1_500_000,
        n_points: int = 101,
        start_lat: float = START_LAT,
    ) -> Track:
        distances = np.linspace(0.0, distance_m, n_points)
        times = np.round(np.linspace(0.0, duration_ms, n_points)).astype(int)
        return build_track(distances, times, start_lat=start_lat)

    return _create


@pytest.fixture
def activity_factory(track_factory: TrackFactory) -> ActivityFactory:
    """Factory fixture for constant-speed activities."""

    def _create(
        distance_m: float = 6_000.0,
        duration_ms: int = 1_800_000,
        activity_id: str = "act-1",
        activity_type: ActivityType = ActivityType.RUN,
        recorded_at: int = 1_700_000_000_000,
        name: str = "Morning Run",
    ) -> Activity:
        return Activity(
            id=activity_id,
            name=name,
            activity_type=activity_type,
            track=track_factory(distance_m, duration_ms),
            recorded_at=recorded_at,
        )

    return _create


@pytest.fixture
def five_k_track(track_factory: TrackFactory) -> Track:
    """5 km in 25:00 at constant pace."""
    return track_factory(5_000.0, 1_500_000)


@pytest.fixture
def five_k_record(five_k_track: Track) -> RunRecord:
    return RunRecord(
        id="banshee-5k",
        name="Best 5K",
        track=five_k_track,
        recorded_at=1_690_000_000_000,
    )
