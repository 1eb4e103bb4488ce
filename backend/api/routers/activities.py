"""Activity storage, listing and milestone preview endpoints."""

from __future__ import annotations

import logging
import uuid
from typing import Annotated

from banshee.activity import ActivityType
from banshee.milestones import detect_milestones, milestones_for
from banshee.personal_best import calculate_pbs
from banshee.track import validate_track
from fastapi import APIRouter, Depends, HTTPException, Query

from backend.api.config import Settings
from backend.api.dependencies import get_settings
from backend.api.schemas.activity import (
    ActivityCreate,
    ActivityCreated,
    ActivityList,
    ActivityResponse,
)
from backend.api.schemas.personal_best import MilestonePreview
from backend.api.services import ledger_store
from backend.api.services.serializers import (
    activity_from_schema,
    activity_to_schema,
    milestone_to_schema,
    personal_best_to_schema,
    summary_to_schema,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", status_code=201)
async def create_activity(
    body: ActivityCreate,
    settings: Annotated[Settings, Depends(get_settings)],
) -> ActivityCreated:
    """Store a completed activity and report any personal bests it set."""
    activity_id = body.id or f"act_{uuid.uuid4().hex[:12]}"
    if ledger_store.get_activity(activity_id) is not None:
        raise HTTPException(status_code=409, detail=f"Activity {activity_id} already exists")

    activity = activity_from_schema(body, activity_id)
    validate_track(activity.track, tolerance_ms=settings.timestamp_tolerance_ms)
    achieved = ledger_store.add_activity(activity)
    logger.info("Stored activity %s (%d new PBs)", activity_id, len(achieved))

    return ActivityCreated(
        activity=summary_to_schema(activity.to_summary()),
        new_personal_bests=[personal_best_to_schema(pb) for pb in achieved],
    )


@router.get("")
async def list_activities(
    activity_type: Annotated[ActivityType | None, Query(alias="type")] = None,
) -> ActivityList:
    """List activity summaries, newest first, optionally filtered by type."""
    summaries = ledger_store.list_summaries(activity_type)
    return ActivityList(items=[summary_to_schema(s) for s in summaries], total=len(summaries))


@router.get("/{activity_id}")
async def get_activity(activity_id: str) -> ActivityResponse:
    """Return one activity including its track."""
    activity = ledger_store.get_activity(activity_id)
    if activity is None:
        raise HTTPException(status_code=404, detail=f"Activity {activity_id} not found")
    return activity_to_schema(activity)


@router.delete("/{activity_id}")
async def delete_activity(activity_id: str) -> dict[str, str]:
    """Delete an activity; personal bests are recomputed from what remains."""
    if not ledger_store.delete_activity(activity_id):
        raise HTTPException(status_code=404, detail=f"Activity {activity_id} not found")
    return {"deleted": activity_id}


@router.get("/{activity_id}/milestones")
async def preview_milestones(
    activity_id: str,
    settings: Annotated[Settings, Depends(get_settings)],
) -> MilestonePreview:
    """Milestone times and PB candidates of one activity, ignoring history."""
    activity = ledger_store.get_activity(activity_id)
    if activity is None:
        raise HTTPException(status_code=404, detail=f"Activity {activity_id} not found")

    distances = [m.distance_m for m in milestones_for(activity.activity_type)]
    candidates = calculate_pbs(activity, tolerance_ms=settings.timestamp_tolerance_ms)
    return MilestonePreview(
        activity_id=activity_id,
        milestones=[milestone_to_schema(m) for m in detect_milestones(activity.track, distances)],
        personal_best_candidates=[personal_best_to_schema(pb) for pb in candidates],
    )
