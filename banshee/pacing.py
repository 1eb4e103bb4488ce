"""Live pacing against a reference run (the banshee).

A :class:`PacingSession` is an explicit, caller-owned handle.  ``init``
builds the reference path index once; every query after that is a cheap
interpolation against it.  Queries never raise when no reference is loaded:
numeric results come back as ``None``, the status as
:attr:`PacingStatus.UNKNOWN`, and :meth:`PacingSession.is_behind` as
``False``.

Sign convention: a positive time difference means the runner reached their
current distance sooner than the banshee did (ahead); negative means behind.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import StrEnum

from banshee.activity import RunRecord
from banshee.constants import METERS_PER_KM, MS_PER_SECOND
from banshee.errors import MalformedInputError, NoActiveSessionError
from banshee.geo import haversine
from banshee.geo_path import GeoPathIndex
from banshee.track import validate_track

logger = logging.getLogger(__name__)

# Gap either side of the banshee that counts as running level with it
DEFAULT_POSITION_THRESHOLD_M = 5.0


class PacingStatus(StrEnum):
    """Runner's standing relative to the banshee."""

    AHEAD = "ahead"
    BEHIND = "behind"
    UNKNOWN = "unknown"


class LiveDistanceMode(StrEnum):
    """How a single live fix is converted into distance covered."""

    # Great-circle distance from the reference start to the live fix
    STRAIGHT_LINE = "straight_line"
    # Cumulative distance of the reference point closest to the live fix
    NEAREST_POINT = "nearest_point"


@dataclass(frozen=True)
class PacingReading:
    """One evaluation of a live sample against the reference."""

    status: PacingStatus
    time_difference_ms: int | None
    live_distance_m: float | None
    reference_time_ms: int | None
    ghost_distance_m: float | None
    elapsed_ms: int
    # Banshee distance minus live distance; positive when the runner trails
    distance_delta_m: float | None = None
    ghost_position: tuple[float, float] | None = None


@dataclass(frozen=True)
class _Reference:
    record: RunRecord
    index: GeoPathIndex


class PacingSession:
    """Holds at most one active reference run and its path index.

    Lifecycle changes (:meth:`init`, :meth:`clear`) must be serialised by the
    caller.  Queries do not mutate the session and may run concurrently.
    """

    def __init__(
        self,
        distance_mode: LiveDistanceMode = LiveDistanceMode.STRAIGHT_LINE,
        timestamp_tolerance_ms: int = 0,
    ) -> None:
        self.distance_mode = LiveDistanceMode(distance_mode)
        self.timestamp_tolerance_ms = timestamp_tolerance_ms
        self._reference: _Reference | None = None

    # -- lifecycle -----------------------------------------------------------

    def init(self, record: RunRecord) -> None:
        """Make *record* the active reference, replacing any previous one.

        Raises
        ------
        InsufficientDataError
            If the record's track has fewer than 2 points.
        MalformedInputError
            If the record's track is structurally invalid.
        """
        validate_track(record.track, tolerance_ms=self.timestamp_tolerance_ms)
        index = GeoPathIndex.build(record.track)
        self._reference = _Reference(record=record, index=index)
        logger.debug(
            "Pacing session started against %s (%.1f m, %d ms)",
            record.id,
            index.total_distance(),
            index.total_duration_ms(),
        )

    def clear(self) -> None:
        """Drop the active reference. Clearing an empty session is a no-op."""
        if self._reference is not None:
            logger.debug("Pacing session against %s cleared", self._reference.record.id)
        self._reference = None

    @property
    def is_active(self) -> bool:
        return self._reference is not None

    @property
    def record(self) -> RunRecord:
        """The active reference run.

        Raises
        ------
        NoActiveSessionError
            If no reference is loaded.
        """
        ref = self._reference
        if ref is None:
            raise NoActiveSessionError
        return ref.record

    @property
    def index(self) -> GeoPathIndex:
        """The active reference's path index (raises like :attr:`record`)."""
        ref = self._reference
        if ref is None:
            raise NoActiveSessionError
        return ref.index

    # -- queries ---------------------------------------------------------------

    def live_distance_m(self, lat: float, lon: float) -> float | None:
        """Distance covered by a runner at ``(lat, lon)``, or None if unresolved."""
        ref = self._reference
        if ref is None:
            return None
        return _live_distance(ref.index, self.distance_mode, lat, lon)

    def time_difference_ms(self, lat: float, lon: float, elapsed_ms: int) -> int | None:
        """Reference time at the live distance minus *elapsed_ms*.

        Positive = ahead of the banshee, negative = behind, None when no
        session is active or the live distance cannot be resolved.
        """
        ref = self._reference
        if ref is None:
            return None
        live_distance = _live_distance(ref.index, self.distance_mode, lat, lon)
        if live_distance is None:
            return None
        return ref.index.time_at_distance(live_distance) - int(elapsed_ms)

    def is_behind(self, lat: float, lon: float, elapsed_ms: int) -> bool:
        delta = self.time_difference_ms(lat, lon, elapsed_ms)
        return delta is not None and delta < 0

    def pacing_status(self, lat: float, lon: float, elapsed_ms: int) -> PacingStatus:
        """Ahead, behind or unknown; a zero difference counts as ahead."""
        return _status_for(self.time_difference_ms(lat, lon, elapsed_ms))

    def best_run_distance(self) -> float | None:
        """Total distance of the reference run in meters."""
        ref = self._reference
        return None if ref is None else ref.index.total_distance()

    def best_run_duration_ms(self) -> int | None:
        """Total duration of the reference run."""
        ref = self._reference
        return None if ref is None else ref.index.total_duration_ms()

    def ghost_distance_m(self, elapsed_ms: int) -> float | None:
        """How far the banshee had run after *elapsed_ms*."""
        ref = self._reference
        return None if ref is None else ref.index.distance_at_time(elapsed_ms)

    def ghost_position(self, elapsed_ms: int) -> tuple[float, float] | None:
        """Where the banshee was after *elapsed_ms*, as ``(lat, lon)``."""
        ref = self._reference
        return None if ref is None else ref.index.position_at_time(elapsed_ms)

    def reading(self, lat: float, lon: float, elapsed_ms: int) -> PacingReading:
        """Evaluate one live sample in a single pass.

        Every field is computed against the same reference, even if another
        caller re-initialises the session while this one runs.
        """
        ref = self._reference
        if ref is None:
            return PacingReading(
                status=PacingStatus.UNKNOWN,
                time_difference_ms=None,
                live_distance_m=None,
                reference_time_ms=None,
                ghost_distance_m=None,
                elapsed_ms=int(elapsed_ms),
            )

        live_distance = _live_distance(ref.index, self.distance_mode, lat, lon)
        ghost_distance = ref.index.distance_at_time(elapsed_ms)
        reference_time: int | None = None
        delta: int | None = None
        distance_delta: float | None = None
        if live_distance is not None:
            reference_time = ref.index.time_at_distance(live_distance)
            delta = reference_time - int(elapsed_ms)
            distance_delta = ghost_distance - live_distance
        return PacingReading(
            status=_status_for(delta),
            time_difference_ms=delta,
            live_distance_m=live_distance,
            reference_time_ms=reference_time,
            ghost_distance_m=ghost_distance,
            elapsed_ms=int(elapsed_ms),
            distance_delta_m=distance_delta,
            ghost_position=ref.index.position_at_time(elapsed_ms),
        )


def _live_distance(
    index: GeoPathIndex, mode: LiveDistanceMode, lat: float, lon: float
) -> float | None:
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None
    if index.total_distance() <= 0:
        return None
    if mode == LiveDistanceMode.NEAREST_POINT:
        return index.nearest_point_distance(lat, lon)
    return haversine(float(index.lats[0]), float(index.lons[0]), lat, lon)


def _status_for(delta: int | None) -> PacingStatus:
    if delta is None:
        return PacingStatus.UNKNOWN
    return PacingStatus.BEHIND if delta < 0 else PacingStatus.AHEAD


# -- position changes --------------------------------------------------------------


class PositionChange(StrEnum):
    """Transition of the runner relative to the banshee between two samples."""

    FELL_BEHIND = "fell_behind"
    PULLED_AHEAD = "pulled_ahead"
    NONE = "none"


def check_position_change(
    previous_delta_m: float,
    current_delta_m: float,
    threshold_m: float = DEFAULT_POSITION_THRESHOLD_M,
) -> PositionChange:
    """Detect the runner overtaking, or being overtaken by, the banshee.

    Deltas are banshee distance minus runner distance (see
    :attr:`PacingReading.distance_delta_m`), so positive means the runner is
    behind.  A side only counts once the gap exceeds *threshold_m*; anything
    inside the band is neither ahead nor behind, which keeps GPS jitter
    around the banshee from firing repeated alerts.
    """
    was_ahead = previous_delta_m < -threshold_m
    was_behind = previous_delta_m > threshold_m
    is_ahead = current_delta_m < -threshold_m
    is_behind = current_delta_m > threshold_m

    if was_ahead and is_behind:
        return PositionChange.FELL_BEHIND
    if was_behind and is_ahead:
        return PositionChange.PULLED_AHEAD
    return PositionChange.NONE


# -- fixed-pace pacer --------------------------------------------------------------


@dataclass(frozen=True)
class PacerPosition:
    """Where a constant-pace pacer is after some elapsed time."""

    lat: float
    lon: float
    distance_m: float


def pacer_distance_m(target_pace_s_per_km: float, elapsed_ms: int) -> float:
    """Distance a pacer holding *target_pace_s_per_km* covers in *elapsed_ms*.

    Raises
    ------
    MalformedInputError
        If the pace is not a positive finite number.
    """
    if not (math.isfinite(target_pace_s_per_km) and target_pace_s_per_km > 0):
        msg = f"Target pace must be positive, got {target_pace_s_per_km}"
        raise MalformedInputError(msg)
    speed_m_per_s = METERS_PER_KM / target_pace_s_per_km
    return speed_m_per_s * max(int(elapsed_ms), 0) / MS_PER_SECOND


def pacer_position(
    start_lat: float,
    start_lon: float,
    target_pace_s_per_km: float,
    elapsed_ms: int,
    route: GeoPathIndex | None = None,
) -> PacerPosition:
    """Position of a virtual pacer running *route* at a fixed pace.

    Without a route the pacer stays at the start point and only its distance
    advances.  Past the end of the route it waits at the last point.
    """
    distance = pacer_distance_m(target_pace_s_per_km, elapsed_ms)
    if route is None:
        return PacerPosition(lat=start_lat, lon=start_lon, distance_m=distance)
    lat, lon = route.position_at_distance(distance)
    return PacerPosition(lat=lat, lon=lon, distance_m=distance)


# -- projections -------------------------------------------------------------------


def estimate_finish_time_ms(
    target_distance_m: float, current_distance_m: float, current_duration_ms: int
) -> int | None:
    """Finish time for *target_distance_m* if the current average pace holds.

    None until the runner has covered some distance in some time.
    """
    if current_distance_m <= 0 or current_duration_ms <= 0:
        return None
    return int(target_distance_m * current_duration_ms / current_distance_m)


def project_distance_at_time(
    current_distance_m: float, current_duration_ms: int, target_duration_ms: int
) -> float:
    """Distance reached after *target_duration_ms* at the current average speed."""
    if current_duration_ms <= 0:
        return 0.0
    return current_distance_m / current_duration_ms * target_duration_ms
