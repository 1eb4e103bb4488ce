"""Pydantic schemas for activity endpoints."""

from __future__ import annotations

from banshee.activity import ActivityType
from pydantic import BaseModel, Field

from backend.api.schemas.personal_best import PersonalBestSchema
from backend.api.schemas.track import CoordinateSchema, RecordId


class ActivityCreate(BaseModel):
    """Request body for storing a completed activity."""

    id: RecordId | None = None
    name: str = Field(default="", max_length=200)
    activity_type: ActivityType
    coordinates: list[CoordinateSchema]
    recorded_at: int = Field(..., ge=0)


class ActivitySummarySchema(BaseModel):
    """Lightweight activity summary returned in list views."""

    id: str
    name: str
    activity_type: ActivityType
    total_distance_m: float
    duration_ms: int
    recorded_at: int
    pace_min_per_km: float


class ActivityResponse(ActivitySummarySchema):
    """A stored activity including its track."""

    average_speed_kmh: float
    coordinates: list[CoordinateSchema]


class ActivityList(BaseModel):
    """List of activity summaries, newest first."""

    items: list[ActivitySummarySchema]
    total: int


class ActivityCreated(BaseModel):
    """Response after storing an activity."""

    activity: ActivitySummarySchema
    new_personal_bests: list[PersonalBestSchema]
