"""Pydantic schemas for personal-best endpoints."""

from __future__ import annotations

from banshee.activity import ActivityType
from pydantic import BaseModel


class PersonalBestSchema(BaseModel):
    """Fastest time to a milestone distance for one activity type."""

    activity_type: ActivityType
    distance_m: float
    name: str
    duration_ms: int
    duration_text: str
    pace_min_per_km: float
    activity_id: str
    achieved_at: int


class PersonalBestList(BaseModel):
    """Personal bests for one activity type, ascending by distance."""

    activity_type: ActivityType
    items: list[PersonalBestSchema]


class MilestoneTimeSchema(BaseModel):
    """First time an activity reached a milestone distance."""

    distance_m: float
    name: str
    duration_ms: int


class MilestonePreview(BaseModel):
    """Milestone analysis for one stored activity."""

    activity_id: str
    milestones: list[MilestoneTimeSchema]
    personal_best_candidates: list[PersonalBestSchema]
