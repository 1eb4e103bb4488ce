"""Tests for banshee.geo_path: the cumulative-distance index."""

from __future__ import annotations

import numpy as np
import pytest

from banshee.errors import InsufficientDataError, MalformedInputError
from banshee.geo_path import GeoPathIndex
from banshee.track import Coordinate, Track
from tests.conftest import START_LAT, START_LON, TrackFactory, build_track, north_of


class TestBuild:
    def test_cumulative_starts_at_zero(self, five_k_track: Track) -> None:
        index = GeoPathIndex.build(five_k_track)
        assert index.cumulative_m[0] == 0.0
        assert index.segment_m[0] == 0.0
        assert len(index) == len(five_k_track)

    def test_total_distance_and_duration(self, five_k_track: Track) -> None:
        index = GeoPathIndex.build(five_k_track)
        assert index.total_distance() == pytest.approx(5_000.0, abs=1e-6)
        assert index.total_duration_ms() == 1_500_000

    def test_cumulative_is_non_decreasing(self, track_factory: TrackFactory) -> None:
        index = GeoPathIndex.build(track_factory(3_000.0, 900_000, n_points=37))
        assert np.all(np.diff(index.cumulative_m) >= 0)
        np.testing.assert_allclose(index.cumulative_m[-1], index.segment_m.sum())

    def test_elapsed_relative_to_first_fix(self) -> None:
        track = build_track([0.0, 100.0, 200.0], [5_000, 35_000, 65_000])
        index = GeoPathIndex.build(track)
        np.testing.assert_array_equal(index.elapsed_ms, [0, 30_000, 60_000])

    def test_arrays_are_read_only(self, five_k_track: Track) -> None:
        index = GeoPathIndex.build(five_k_track)
        with pytest.raises(ValueError):
            index.cumulative_m[0] = 1.0

    def test_single_point_rejected(self) -> None:
        with pytest.raises(InsufficientDataError):
            GeoPathIndex.build(Track.from_points([Coordinate(START_LAT, START_LON, 0)]))

    def test_empty_track_rejected(self) -> None:
        with pytest.raises(InsufficientDataError, match="got 0"):
            GeoPathIndex.build(Track())

    def test_non_finite_coordinate_rejected(self) -> None:
        track = Track.from_points(
            [Coordinate(START_LAT, START_LON, 0), Coordinate(float("inf"), START_LON, 1_000)]
        )
        with pytest.raises(MalformedInputError):
            GeoPathIndex.build(track)

    def test_stationary_track_has_zero_distance(self) -> None:
        track = build_track([0.0, 0.0, 0.0], [0, 1_000, 2_000])
        index = GeoPathIndex.build(track)
        assert index.total_distance() == 0.0
        assert index.total_duration_ms() == 2_000

    def test_to_dataframe_columns(self, five_k_track: Track) -> None:
        df = GeoPathIndex.build(five_k_track).to_dataframe()
        assert list(df.columns) == ["lat", "lon", "elapsed_ms", "segment_m", "cumulative_m"]
        assert len(df) == 101


class TestTimeAtDistance:
    def test_interpolates_between_points(self) -> None:
        index = GeoPathIndex.build(build_track([0.0, 100.0, 300.0], [0, 10_000, 20_000]))
        assert index.time_at_distance(50.0) == 5_000
        assert index.time_at_distance(200.0) == 15_000

    def test_exact_sample_hit(self) -> None:
        index = GeoPathIndex.build(build_track([0.0, 100.0, 300.0], [0, 10_000, 20_000]))
        assert index.time_at_distance(index.cumulative_m[1]) == 10_000

    def test_clamps_below_zero(self, five_k_track: Track) -> None:
        index = GeoPathIndex.build(five_k_track)
        assert index.time_at_distance(-50.0) == 0
        assert index.time_at_distance(0.0) == 0

    def test_clamps_beyond_total(self, five_k_track: Track) -> None:
        index = GeoPathIndex.build(five_k_track)
        assert index.time_at_distance(10_000.0) == 1_500_000

    def test_nan_maps_to_zero(self, five_k_track: Track) -> None:
        assert GeoPathIndex.build(five_k_track).time_at_distance(float("nan")) == 0

    def test_plateau_returns_first_arrival(self) -> None:
        # Runner stands still at 100 m from 10 s to 40 s
        track = build_track([0.0, 100.0, 100.0, 200.0], [0, 10_000, 40_000, 50_000])
        index = GeoPathIndex.build(track)
        assert index.time_at_distance(index.cumulative_m[1]) == 10_000

    def test_monotonic_in_distance(self, track_factory: TrackFactory) -> None:
        index = GeoPathIndex.build(track_factory(5_000.0, 1_500_000, n_points=23))
        times = [index.time_at_distance(d) for d in np.linspace(-100, 5_100, 200)]
        assert all(b >= a for a, b in zip(times, times[1:]))

    def test_constant_speed_is_linear(self, five_k_track: Track) -> None:
        index = GeoPathIndex.build(five_k_track)
        assert index.time_at_distance(2_000.0) == pytest.approx(600_000, abs=1)


class TestDistanceAtTime:
    def test_interpolates(self) -> None:
        index = GeoPathIndex.build(build_track([0.0, 100.0, 300.0], [0, 10_000, 20_000]))
        assert index.distance_at_time(5_000) == pytest.approx(50.0, rel=1e-9)
        assert index.distance_at_time(15_000) == pytest.approx(200.0, rel=1e-9)

    def test_clamps(self, five_k_track: Track) -> None:
        index = GeoPathIndex.build(five_k_track)
        assert index.distance_at_time(-1_000) == 0.0
        assert index.distance_at_time(9_999_999) == pytest.approx(5_000.0)

    def test_duplicate_timestamp_uses_first(self) -> None:
        track = build_track([0.0, 100.0, 150.0, 200.0], [0, 10_000, 10_000, 20_000])
        index = GeoPathIndex.build(track)
        assert index.distance_at_time(10_000) == pytest.approx(100.0, rel=1e-9)

    def test_round_trip_with_time_at_distance(self, track_factory: TrackFactory) -> None:
        index = GeoPathIndex.build(track_factory(5_000.0, 1_500_000, n_points=51))
        for d in (1.0, 250.0, 1_234.5, 4_999.0):
            t = index.time_at_distance(d)
            # Rounding to whole ms shifts the distance by at most speed * 0.5 ms
            assert index.distance_at_time(t) == pytest.approx(d, abs=0.01)


class TestPositionAtTime:
    def test_start_and_end(self, five_k_track: Track) -> None:
        index = GeoPathIndex.build(five_k_track)
        assert index.position_at_time(0) == pytest.approx((START_LAT, START_LON))
        assert index.position_at_time(2_000_000) == pytest.approx(
            (north_of(5_000.0), START_LON)
        )

    def test_midway(self, five_k_track: Track) -> None:
        index = GeoPathIndex.build(five_k_track)
        lat, lon = index.position_at_time(750_000)
        assert lat == pytest.approx(north_of(2_500.0))
        assert lon == pytest.approx(START_LON)


class TestPositionAtDistance:
    def test_interpolates_between_points(self) -> None:
        index = GeoPathIndex.build(build_track([0.0, 100.0, 300.0], [0, 10_000, 20_000]))
        lat, lon = index.position_at_distance(200.0)
        assert lat == pytest.approx(north_of(200.0))
        assert lon == pytest.approx(START_LON)

    def test_clamps_to_ends(self, five_k_track: Track) -> None:
        index = GeoPathIndex.build(five_k_track)
        assert index.position_at_distance(-50.0) == (START_LAT, START_LON)
        assert index.position_at_distance(float("nan")) == (START_LAT, START_LON)
        assert index.position_at_distance(9_000.0) == pytest.approx(
            (north_of(5_000.0), START_LON)
        )

    def test_out_and_back_follows_path(self) -> None:
        # 1 500 m along an out-and-back of 1 000 m is 500 m from the start
        index = GeoPathIndex.build(build_track([0.0, 1_000.0, 0.0], [0, 1, 2]))
        lat, _ = index.position_at_distance(1_500.0)
        assert lat == pytest.approx(north_of(500.0))


class TestNearestPointDistance:
    def test_matches_closest_point(self, five_k_track: Track) -> None:
        index = GeoPathIndex.build(five_k_track)
        # Points every 50 m; 1 010 m north is closest to the 1 000 m point
        assert index.nearest_point_distance(north_of(1_010.0), START_LON) == pytest.approx(
            1_000.0
        )

    def test_loop_prefers_first_pass(self) -> None:
        # Out 200 m and back to the start
        track = build_track([0.0, 100.0, 200.0, 100.0, 0.0], [0, 1, 2, 3, 4])
        index = GeoPathIndex.build(track)
        assert index.nearest_point_distance(north_of(100.0), START_LON) == pytest.approx(100.0)
