"""Live pacing endpoints: session lifecycle and per-sample readings."""

from __future__ import annotations

import logging
from typing import Annotated

from banshee.activity import RunRecord
from banshee.pacing import PacingSession, pacer_position
from fastapi import APIRouter, Depends, HTTPException

from backend.api.dependencies import get_pacing_session
from backend.api.schemas.pacing import (
    PacerRequest,
    PacerResponse,
    PacingReadingSchema,
    PacingSample,
    SessionInitRequest,
    SessionResponse,
)
from backend.api.schemas.track import RunRecordSchema
from backend.api.services import ledger_store, session_store
from backend.api.services.serializers import (
    coordinates_to_schema,
    pacer_to_schema,
    reading_to_schema,
    run_record_from_schema,
    session_to_schema,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/session", status_code=201)
async def start_session(body: SessionInitRequest) -> SessionResponse:
    """Start racing against a run record or a stored activity.

    Replaces any active session.
    """
    if body.run_record is not None:
        record = run_record_from_schema(body.run_record)
    else:
        activity = ledger_store.get_activity(body.activity_id or "")
        if activity is None:
            raise HTTPException(status_code=404, detail=f"Activity {body.activity_id} not found")
        record = RunRecord.from_activity(activity)

    return session_to_schema(session_store.start_session(record))


@router.get("/session")
async def get_session(
    session: Annotated[PacingSession, Depends(get_pacing_session)],
) -> SessionResponse:
    """Describe the active session (``active: false`` when there is none)."""
    return session_to_schema(session)


@router.delete("/session")
async def clear_session() -> dict[str, bool]:
    """End the active session. Clearing when none is active is not an error."""
    return {"cleared": session_store.clear_session()}


@router.get("/session/reference")
async def get_reference(
    session: Annotated[PacingSession, Depends(get_pacing_session)],
) -> RunRecordSchema:
    """Return the banshee's full track. 409 when no session is active."""
    record = session.record
    return RunRecordSchema(
        id=record.id,
        name=record.name,
        coordinates=coordinates_to_schema(record.track),
        recorded_at=record.recorded_at,
    )


@router.post("/reading")
async def pacing_reading(
    body: PacingSample,
    session: Annotated[PacingSession, Depends(get_pacing_session)],
) -> PacingReadingSchema:
    """Compare one live sample against the banshee.

    Without an active session the reading comes back with status
    ``unknown`` and empty numeric fields.
    """
    reading = session.reading(body.lat, body.lon, body.elapsed_ms)
    return reading_to_schema(reading)


@router.post("/pacer")
async def pacer(
    body: PacerRequest,
    session: Annotated[PacingSession, Depends(get_pacing_session)],
) -> PacerResponse:
    """Position of a virtual pacer holding a fixed target pace."""
    route = session.index if body.follow_reference else None
    position = pacer_position(
        body.start_lat,
        body.start_lon,
        body.target_pace_s_per_km,
        body.elapsed_ms,
        route=route,
    )
    return pacer_to_schema(position, body.elapsed_ms)
