"""Tests for banshee.milestones: canonical distances and first-crossing times."""

from __future__ import annotations

import pytest

from banshee.activity import ActivityType
from banshee.geo_path import GeoPathIndex
from banshee.milestones import (
    ALL_MILESTONE_DISTANCES,
    HALF_MARATHON_M,
    MARATHON_M,
    MilestoneTime,
    detect_milestones,
    fastest_segment_times,
    milestone_name,
    milestone_times,
    milestones_for,
)
from banshee.track import Coordinate, Track
from tests.conftest import START_LAT, START_LON, TrackFactory, build_track


class TestMilestoneTables:
    def test_foot_distances(self) -> None:
        distances = [m.distance_m for m in milestones_for(ActivityType.RUN)]
        assert distances == [1_000.0, 5_000.0, 10_000.0, 15_000.0, HALF_MARATHON_M, MARATHON_M]
        assert milestones_for(ActivityType.WALK) == milestones_for(ActivityType.RUN)

    def test_cycle_distances(self) -> None:
        distances = [m.distance_m for m in milestones_for(ActivityType.CYCLE)]
        assert distances == [10_000.0, 25_000.0, 50_000.0, 100_000.0]

    def test_all_distances_sorted_and_unique(self) -> None:
        assert list(ALL_MILESTONE_DISTANCES) == sorted(set(ALL_MILESTONE_DISTANCES))
        assert 10_000.0 in ALL_MILESTONE_DISTANCES
        assert 100_000.0 in ALL_MILESTONE_DISTANCES


class TestMilestoneName:
    @pytest.mark.parametrize(
        ("distance", "expected"),
        [
            (1_000.0, "1K"),
            (5_000.0, "5K"),
            (HALF_MARATHON_M, "Half Marathon"),
            (MARATHON_M, "Marathon"),
            (100_000.0, "100K"),
            (3_000.0, "3K"),
            (1_609.34, "Custom"),
            (0.0, "Custom"),
        ],
    )
    def test_names(self, distance: float, expected: str) -> None:
        assert milestone_name(distance) == expected

    def test_milestone_time_name(self) -> None:
        assert MilestoneTime(distance_m=10_000.0, duration_ms=1).name == "10K"


class TestDetectMilestones:
    def test_twelve_k_run(self, track_factory: TrackFactory) -> None:
        # 12 km in an hour at constant pace
        track = track_factory(12_000.0, 3_600_000, n_points=121)
        results = detect_milestones(track, [1_000.0, 5_000.0, 10_000.0, 15_000.0])
        assert [m.distance_m for m in results] == [1_000.0, 5_000.0, 10_000.0]
        assert results[0].duration_ms == pytest.approx(300_000, abs=1)
        assert results[1].duration_ms == pytest.approx(1_500_000, abs=1)
        assert results[2].duration_ms == pytest.approx(3_000_000, abs=1)

    def test_default_distances(self, track_factory: TrackFactory) -> None:
        results = detect_milestones(track_factory(6_000.0, 1_800_000))
        assert [m.name for m in results] == ["1K", "5K"]

    def test_short_track_has_no_5k(self, track_factory: TrackFactory) -> None:
        results = detect_milestones(track_factory(3_000.0, 900_000))
        assert all(m.distance_m != 5_000.0 for m in results)

    def test_exact_distance_is_reached(self) -> None:
        track = build_track([0.0, 500.0, 1_000.0], [0, 150_000, 300_000])
        index = GeoPathIndex.build(track)
        # Whatever haversine gives for the total, a milestone equal to it counts
        results = milestone_times(index, [index.total_distance()])
        assert len(results) == 1
        assert results[0].duration_ms == 300_000

    def test_first_crossing_on_plateau(self) -> None:
        # Pause at 1 km for two minutes before continuing
        track = build_track(
            [0.0, 1_000.0, 1_000.0, 2_000.0], [0, 240_000, 360_000, 600_000]
        )
        index = GeoPathIndex.build(track)
        results = milestone_times(index, [index.cumulative_m[1]])
        assert results[0].duration_ms == 240_000

    def test_results_ascending_and_deduplicated(self, track_factory: TrackFactory) -> None:
        results = detect_milestones(track_factory(6_000.0, 1_800_000), [5_000.0, 1_000.0, 5_000.0])
        assert [m.distance_m for m in results] == [1_000.0, 5_000.0]

    def test_non_positive_distances_skipped(self, track_factory: TrackFactory) -> None:
        assert detect_milestones(track_factory(), [0.0, -5.0]) == []

    def test_short_track_yields_empty(self) -> None:
        assert detect_milestones(Track()) == []
        assert detect_milestones(Track.from_points([Coordinate(START_LAT, START_LON, 0)])) == []


class TestFastestSegmentTimes:
    def test_constant_pace_matches_first_crossing(self, track_factory: TrackFactory) -> None:
        track = track_factory(6_000.0, 1_800_000, n_points=61)
        segments = fastest_segment_times(track, [5_000.0])
        assert len(segments) == 1
        assert segments[0].duration_ms == pytest.approx(1_500_000, abs=1)

    def test_finds_fast_second_half(self) -> None:
        # Slow first kilometer (6 min), fast second kilometer (4 min), slow finish
        distances = [250.0 * i for i in range(10)]
        times = [0, 90_000, 180_000, 270_000, 360_000, 420_000, 480_000, 540_000, 600_000, 690_000]
        track = build_track(distances, times)

        first = detect_milestones(track, [1_000.0])
        fastest = fastest_segment_times(track, [1_000.0])

        assert first[0].duration_ms == pytest.approx(360_000, abs=1)
        assert fastest[0].duration_ms == pytest.approx(240_000, abs=1)
        assert fastest[0].start_index == 4
        assert fastest[0].end_index in (8, 9)

    def test_never_slower_than_first_crossing(self, track_factory: TrackFactory) -> None:
        track = track_factory(12_000.0, 3_600_000, n_points=97)
        first = {m.distance_m: m.duration_ms for m in detect_milestones(track)}
        for seg in fastest_segment_times(track):
            assert seg.duration_ms <= first[seg.distance_m] + 1

    def test_unreached_distance_skipped(self, track_factory: TrackFactory) -> None:
        assert fastest_segment_times(track_factory(3_000.0, 900_000), [5_000.0]) == []
