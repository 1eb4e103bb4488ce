"""Conversions between banshee's core dataclasses and the API/disk formats.

The engines only ever see typed values; parsing and rendering of JSON
happens here and nowhere else.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from banshee.activity import Activity, ActivitySummary, ActivityType, RunRecord
from banshee.formatting import format_distance_gap, format_duration, format_time_difference
from banshee.milestones import MilestoneTime
from banshee.pacing import PacerPosition, PacingReading, PacingSession
from banshee.personal_best import PersonalBest, PersonalBestLedger
from banshee.track import Coordinate, Track

from backend.api.schemas.activity import (
    ActivityCreate,
    ActivityResponse,
    ActivitySummarySchema,
)
from backend.api.schemas.pacing import PacerResponse, PacingReadingSchema, SessionResponse
from backend.api.schemas.personal_best import MilestoneTimeSchema, PersonalBestSchema
from backend.api.schemas.track import CoordinateSchema, RunRecordSchema

# ---------------------------------------------------------------------------
# Schema -> core
# ---------------------------------------------------------------------------


def track_from_schema(coordinates: list[CoordinateSchema]) -> Track:
    """Build a Track from wire coordinates, preserving their order."""
    return Track.from_points(
        Coordinate(
            lat=c.lat,
            lon=c.lon,
            timestamp_ms=c.timestamp_ms,
            elevation_m=c.elevation_m,
        )
        for c in coordinates
    )


def activity_from_schema(body: ActivityCreate, activity_id: str) -> Activity:
    """Build an Activity from a create request, using *activity_id* as its id."""
    return Activity(
        id=activity_id,
        name=body.name,
        activity_type=body.activity_type,
        track=track_from_schema(body.coordinates),
        recorded_at=body.recorded_at,
    )


def run_record_from_schema(body: RunRecordSchema) -> RunRecord:
    return RunRecord(
        id=body.id,
        name=body.name,
        track=track_from_schema(body.coordinates),
        recorded_at=body.recorded_at,
    )


# ---------------------------------------------------------------------------
# Core -> schema
# ---------------------------------------------------------------------------


def coordinates_to_schema(track: Track) -> list[CoordinateSchema]:
    return [
        CoordinateSchema(
            lat=p.lat,
            lon=p.lon,
            timestamp_ms=p.timestamp_ms,
            elevation_m=p.elevation_m,
        )
        for p in track
    ]


def summary_to_schema(summary: ActivitySummary) -> ActivitySummarySchema:
    return ActivitySummarySchema(
        id=summary.id,
        name=summary.name,
        activity_type=summary.activity_type,
        total_distance_m=round(summary.total_distance_m, 1),
        duration_ms=summary.duration_ms,
        recorded_at=summary.recorded_at,
        pace_min_per_km=round(summary.pace_min_per_km, 3),
    )


def activity_to_schema(activity: Activity) -> ActivityResponse:
    summary = summary_to_schema(activity.to_summary())
    return ActivityResponse(
        **summary.model_dump(),
        average_speed_kmh=round(activity.average_speed_kmh, 2),
        coordinates=coordinates_to_schema(activity.track),
    )


def personal_best_to_schema(pb: PersonalBest) -> PersonalBestSchema:
    return PersonalBestSchema(
        activity_type=pb.activity_type,
        distance_m=pb.distance_m,
        name=pb.name,
        duration_ms=pb.duration_ms,
        duration_text=format_duration(pb.duration_ms),
        pace_min_per_km=round(pb.pace_min_per_km, 3),
        activity_id=pb.activity_id,
        achieved_at=pb.achieved_at,
    )


def milestone_to_schema(milestone: MilestoneTime) -> MilestoneTimeSchema:
    return MilestoneTimeSchema(
        distance_m=milestone.distance_m,
        name=milestone.name,
        duration_ms=milestone.duration_ms,
    )


def session_to_schema(session: PacingSession) -> SessionResponse:
    """Describe the session; inactive sessions only report their mode."""
    if not session.is_active:
        return SessionResponse(active=False, distance_mode=session.distance_mode.value)
    record = session.record
    return SessionResponse(
        active=True,
        record_id=record.id,
        name=record.name,
        best_run_distance_m=session.best_run_distance(),
        best_run_duration_ms=session.best_run_duration_ms(),
        distance_mode=session.distance_mode.value,
    )


def reading_to_schema(reading: PacingReading) -> PacingReadingSchema:
    delta = reading.time_difference_ms
    gap = reading.distance_delta_m
    ghost_position = reading.ghost_position
    return PacingReadingSchema(
        status=reading.status,
        is_behind=delta is not None and delta < 0,
        time_difference_ms=delta,
        time_difference_text=None if delta is None else format_time_difference(delta),
        live_distance_m=reading.live_distance_m,
        reference_time_ms=reading.reference_time_ms,
        ghost_distance_m=reading.ghost_distance_m,
        distance_delta_m=gap,
        distance_delta_text=None if gap is None else format_distance_gap(gap),
        ghost_lat=None if ghost_position is None else ghost_position[0],
        ghost_lon=None if ghost_position is None else ghost_position[1],
        elapsed_ms=reading.elapsed_ms,
    )


def pacer_to_schema(position: PacerPosition, elapsed_ms: int) -> PacerResponse:
    return PacerResponse(
        lat=position.lat,
        lon=position.lon,
        distance_m=position.distance_m,
        elapsed_ms=elapsed_ms,
    )


# ---------------------------------------------------------------------------
# Disk persistence (plain dicts)
# ---------------------------------------------------------------------------


def track_to_dict(track: Track) -> list[dict[str, Any]]:
    return [asdict(p) for p in track]


def track_from_dict(rows: list[dict[str, Any]]) -> Track:
    return Track.from_points(
        Coordinate(
            lat=float(row["lat"]),
            lon=float(row["lon"]),
            timestamp_ms=int(row["timestamp_ms"]),
            elevation_m=None if row.get("elevation_m") is None else float(row["elevation_m"]),
        )
        for row in rows
    )


def activity_to_dict(activity: Activity) -> dict[str, Any]:
    return {
        "id": activity.id,
        "name": activity.name,
        "activity_type": str(activity.activity_type),
        "recorded_at": activity.recorded_at,
        "coordinates": track_to_dict(activity.track),
    }


def activity_from_dict(d: dict[str, Any]) -> Activity:
    return Activity(
        id=str(d["id"]),
        name=str(d.get("name", "")),
        activity_type=ActivityType(str(d["activity_type"])),
        track=track_from_dict(d["coordinates"]),
        recorded_at=int(d["recorded_at"]),
    )


def run_record_to_dict(record: RunRecord) -> dict[str, Any]:
    return {
        "id": record.id,
        "name": record.name,
        "recorded_at": record.recorded_at,
        "coordinates": track_to_dict(record.track),
    }


def run_record_from_dict(d: dict[str, Any]) -> RunRecord:
    return RunRecord(
        id=str(d["id"]),
        name=str(d.get("name", "")),
        track=track_from_dict(d["coordinates"]),
        recorded_at=int(d.get("recorded_at", 0)),
    )


def personal_best_to_dict(pb: PersonalBest) -> dict[str, Any]:
    d = asdict(pb)
    d["activity_type"] = str(pb.activity_type)
    return d


def personal_best_from_dict(d: dict[str, Any]) -> PersonalBest:
    return PersonalBest(
        activity_type=ActivityType(str(d["activity_type"])),
        distance_m=float(d["distance_m"]),
        duration_ms=int(d["duration_ms"]),
        activity_id=str(d["activity_id"]),
        achieved_at=int(d["achieved_at"]),
    )


def ledger_to_dict(ledger: PersonalBestLedger) -> dict[str, Any]:
    return {"records": [personal_best_to_dict(pb) for pb in ledger.records()]}


def ledger_from_dict(d: dict[str, Any]) -> PersonalBestLedger:
    return PersonalBestLedger.from_records(
        personal_best_from_dict(row) for row in d.get("records", [])
    )
