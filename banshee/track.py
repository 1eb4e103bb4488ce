"""Recorded GPS tracks: timestamped coordinates in chronological order."""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

import numpy as np
import pandas as pd

from banshee.errors import InsufficientDataError, MalformedInputError

TRACK_COLUMNS: list[str] = ["lat", "lon", "timestamp_ms", "elevation_m"]


@dataclass(frozen=True)
class Coordinate:
    """A single GPS fix."""

    lat: float
    lon: float
    timestamp_ms: int  # ms since the activity started
    elevation_m: float | None = None


@dataclass(frozen=True)
class Track:
    """An ordered, immutable sequence of coordinates.

    Insertion order is chronological order; the first point defines t=0.
    """

    points: tuple[Coordinate, ...] = ()

    @classmethod
    def from_points(cls, points: Iterable[Coordinate]) -> Track:
        return cls(points=tuple(points))

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Coordinate]:
        return iter(self.points)

    @property
    def is_empty(self) -> bool:
        return not self.points

    @property
    def start(self) -> Coordinate | None:
        return self.points[0] if self.points else None

    @property
    def end(self) -> Coordinate | None:
        return self.points[-1] if self.points else None

    @property
    def duration_ms(self) -> int:
        """Elapsed time between the first and last fix (0 for < 2 points)."""
        if len(self.points) < 2:
            return 0
        return max(0, self.points[-1].timestamp_ms - self.points[0].timestamp_ms)

    def to_dataframe(self) -> pd.DataFrame:
        """Tabular view with one row per point and :data:`TRACK_COLUMNS`."""
        return pd.DataFrame(
            {
                "lat": [p.lat for p in self.points],
                "lon": [p.lon for p in self.points],
                "timestamp_ms": pd.array([p.timestamp_ms for p in self.points], dtype="int64"),
                "elevation_m": [
                    np.nan if p.elevation_m is None else p.elevation_m for p in self.points
                ],
            },
            columns=TRACK_COLUMNS,
        )

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> Track:
        """Build a track from a DataFrame with ``lat``, ``lon`` and ``timestamp_ms``.

        ``elevation_m`` is optional; NaN elevations become ``None``.
        """
        missing = [col for col in ("lat", "lon", "timestamp_ms") if col not in df.columns]
        if missing:
            msg = f"Track table is missing required column(s): {', '.join(missing)}"
            raise MalformedInputError(msg)

        elevations = (
            df["elevation_m"].to_numpy(dtype=float)
            if "elevation_m" in df.columns
            else np.full(len(df), np.nan)
        )
        points = [
            Coordinate(
                lat=float(lat),
                lon=float(lon),
                timestamp_ms=int(ts),
                elevation_m=None if np.isnan(elev) else float(elev),
            )
            for lat, lon, ts, elev in zip(
                df["lat"].to_numpy(dtype=float),
                df["lon"].to_numpy(dtype=float),
                df["timestamp_ms"].to_numpy(),
                elevations,
                strict=True,
            )
        ]
        return cls(points=tuple(points))


def validate_track(track: Track, *, min_points: int = 2, tolerance_ms: int = 0) -> Track:
    """Reject structurally invalid tracks before any computation.

    Parameters
    ----------
    track:
        The track to check.
    min_points:
        Minimum number of points; fewer raises :class:`InsufficientDataError`.
    tolerance_ms:
        How far a timestamp may step backwards (GPS clock jitter) before the
        track is rejected.

    Returns
    -------
    The same track, so calls can be chained.

    Raises
    ------
    InsufficientDataError
        Too few points.
    MalformedInputError
        Non-finite or out-of-range coordinates, negative timestamps, or
        timestamps going backwards by more than *tolerance_ms*.
    """
    if len(track) < min_points:
        raise InsufficientDataError(len(track), min_points)

    prev_ts: int | None = None
    for i, point in enumerate(track.points):
        if not (math.isfinite(point.lat) and math.isfinite(point.lon)):
            msg = f"Point {i} has a non-finite coordinate ({point.lat}, {point.lon})"
            raise MalformedInputError(msg)
        if not -90.0 <= point.lat <= 90.0:
            msg = f"Point {i} latitude {point.lat} is outside [-90, 90]"
            raise MalformedInputError(msg)
        if not -180.0 <= point.lon <= 180.0:
            msg = f"Point {i} longitude {point.lon} is outside [-180, 180]"
            raise MalformedInputError(msg)
        if point.timestamp_ms < 0:
            msg = f"Point {i} has a negative timestamp ({point.timestamp_ms} ms)"
            raise MalformedInputError(msg)
        if prev_ts is not None and point.timestamp_ms < prev_ts - tolerance_ms:
            msg = (
                f"Point {i} timestamp {point.timestamp_ms} ms goes backwards from "
                f"{prev_ts} ms (tolerance {tolerance_ms} ms)"
            )
            raise MalformedInputError(msg)
        prev_ts = point.timestamp_ms if prev_ts is None else max(prev_ts, point.timestamp_ms)

    return track
