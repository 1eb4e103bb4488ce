"""Cumulative-distance index over a track.

The index is the distance-domain view of a track: for every point it stores
the elapsed time since the first fix and the running path length from the
start.  Both axes are non-decreasing, so lookups in either direction are a
sorted search followed by linear interpolation between the bracketing
samples.  When several samples share the searched value (a standstill in
the distance axis, a duplicated timestamp in the time axis) the first one
wins.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np
import pandas as pd

from banshee.errors import InsufficientDataError, MalformedInputError
from banshee.geo import haversine_np, segment_distances
from banshee.track import Track

logger = logging.getLogger(__name__)


def _bracket(axis: np.ndarray, value: float) -> tuple[int, int, float]:
    """Locate *value* on a non-decreasing *axis*.

    Returns ``(lo, hi, fraction)`` such that the interpolated quantity is
    ``q[lo] + fraction * (q[hi] - q[lo])``.  Exact hits and values outside
    the axis collapse to a single index.
    """
    hi = int(np.searchsorted(axis, value, side="left"))
    if hi == 0:
        return 0, 0, 0.0
    if hi >= len(axis):
        last = len(axis) - 1
        return last, last, 0.0
    if axis[hi] == value:
        return hi, hi, 0.0
    lo = hi - 1
    span = float(axis[hi] - axis[lo])
    fraction = (value - float(axis[lo])) / span if span > 0 else 0.0
    return lo, hi, fraction


@dataclass(frozen=True, eq=False)
class GeoPathIndex:
    """Read-only cumulative-distance view of a :class:`Track`.

    Rebuilt from its track whenever needed; never persisted.
    """

    lats: np.ndarray
    lons: np.ndarray
    elapsed_ms: np.ndarray  # relative to the first fix, non-decreasing
    segment_m: np.ndarray  # distance from the previous point, 0 for the first
    cumulative_m: np.ndarray  # running path length, non-decreasing

    @classmethod
    def build(cls, track: Track) -> GeoPathIndex:
        """Build the index for *track*.

        Raises
        ------
        InsufficientDataError
            If the track has fewer than 2 points.
        MalformedInputError
            If any coordinate is not a finite number.
        """
        if len(track) < 2:
            raise InsufficientDataError(len(track))

        lats = np.fromiter((p.lat for p in track), dtype=float, count=len(track))
        lons = np.fromiter((p.lon for p in track), dtype=float, count=len(track))
        if not (np.isfinite(lats).all() and np.isfinite(lons).all()):
            msg = "Track contains non-finite coordinates"
            raise MalformedInputError(msg)

        timestamps = np.fromiter((p.timestamp_ms for p in track), dtype=float, count=len(track))
        # Small backwards clock steps are flattened so the time axis stays sorted
        elapsed = np.maximum.accumulate(timestamps - timestamps[0])

        segment = np.concatenate(([0.0], segment_distances(lats, lons)))
        cumulative = np.cumsum(segment)

        for arr in (lats, lons, elapsed, segment, cumulative):
            arr.setflags(write=False)

        logger.debug(
            "Built path index: %d points, %.1f m, %d ms",
            len(track),
            cumulative[-1],
            int(elapsed[-1]),
        )
        return cls(
            lats=lats,
            lons=lons,
            elapsed_ms=elapsed,
            segment_m=segment,
            cumulative_m=cumulative,
        )

    def __len__(self) -> int:
        return len(self.cumulative_m)

    def total_distance(self) -> float:
        """Total path length in meters."""
        return float(self.cumulative_m[-1])

    def total_duration_ms(self) -> int:
        """Elapsed time from the first to the last fix."""
        return int(self.elapsed_ms[-1])

    def distance_at_time(self, elapsed_ms: float) -> float:
        """Distance covered after *elapsed_ms*, interpolated between fixes.

        Clamped to the track: 0 before the start, the total distance after
        the end.  Never raises.
        """
        t = float(elapsed_ms)
        if math.isnan(t) or t <= 0:
            return 0.0
        if t > self.elapsed_ms[-1]:
            return self.total_distance()
        lo, hi, fraction = _bracket(self.elapsed_ms, t)
        cum = self.cumulative_m
        return float(cum[lo] + fraction * (cum[hi] - cum[lo]))

    def time_at_distance(self, meters: float) -> int:
        """Elapsed ms at which the path first reaches *meters*.

        Distances outside ``[0, total]`` clamp to the time of the nearest
        endpoint.
        """
        d = float(meters)
        if math.isnan(d) or d <= 0:
            return 0
        if d > self.cumulative_m[-1]:
            return self.total_duration_ms()
        lo, hi, fraction = _bracket(self.cumulative_m, d)
        t = self.elapsed_ms
        return int(round(t[lo] + fraction * (t[hi] - t[lo])))

    def position_at_time(self, elapsed_ms: float) -> tuple[float, float]:
        """Interpolated ``(lat, lon)`` on the path at *elapsed_ms* (clamped)."""
        t = float(elapsed_ms)
        if math.isnan(t) or t <= 0:
            return float(self.lats[0]), float(self.lons[0])
        if t > self.elapsed_ms[-1]:
            return float(self.lats[-1]), float(self.lons[-1])
        lo, hi, fraction = _bracket(self.elapsed_ms, t)
        lat = self.lats[lo] + fraction * (self.lats[hi] - self.lats[lo])
        lon = self.lons[lo] + fraction * (self.lons[hi] - self.lons[lo])
        return float(lat), float(lon)

    def position_at_distance(self, meters: float) -> tuple[float, float]:
        """Interpolated ``(lat, lon)`` *meters* along the path.

        Clamped like :meth:`time_at_distance`: the first point at or below 0,
        the last point past the end.
        """
        d = float(meters)
        if math.isnan(d) or d <= 0:
            return float(self.lats[0]), float(self.lons[0])
        if d > self.cumulative_m[-1]:
            return float(self.lats[-1]), float(self.lons[-1])
        lo, hi, fraction = _bracket(self.cumulative_m, d)
        lat = self.lats[lo] + fraction * (self.lats[hi] - self.lats[lo])
        lon = self.lons[lo] + fraction * (self.lons[hi] - self.lons[lo])
        return float(lat), float(lon)

    def nearest_point_distance(self, lat: float, lon: float) -> float:
        """Cumulative distance of the track point closest to ``(lat, lon)``.

        Ties go to the earliest point, so a looped course matches its first
        pass.
        """
        dists = haversine_np(lat, lon, self.lats, self.lons)
        return float(self.cumulative_m[int(np.argmin(dists))])

    def to_dataframe(self) -> pd.DataFrame:
        """Tabular view: lat, lon, elapsed_ms, segment_m, cumulative_m."""
        return pd.DataFrame(
            {
                "lat": self.lats,
                "lon": self.lons,
                "elapsed_ms": self.elapsed_ms,
                "segment_m": self.segment_m,
                "cumulative_m": self.cumulative_m,
            }
        )
