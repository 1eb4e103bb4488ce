"""Pydantic schemas for the live pacing endpoints."""

from __future__ import annotations

from banshee.pacing import PacingStatus
from pydantic import BaseModel, Field, model_validator

from backend.api.schemas.track import RunRecordSchema


class SessionInitRequest(BaseModel):
    """Start a pacing session from an inline run record or a stored activity."""

    run_record: RunRecordSchema | None = None
    activity_id: str | None = None

    @model_validator(mode="after")
    def _exactly_one_source(self) -> SessionInitRequest:
        if (self.run_record is None) == (self.activity_id is None):
            msg = "Provide exactly one of 'run_record' or 'activity_id'"
            raise ValueError(msg)
        return self


class SessionResponse(BaseModel):
    """State of the pacing session."""

    active: bool
    record_id: str | None = None
    name: str | None = None
    best_run_distance_m: float | None = None
    best_run_duration_ms: int | None = None
    distance_mode: str


class PacingSample(BaseModel):
    """A live GPS fix with the runner's elapsed time."""

    lat: float
    lon: float
    elapsed_ms: int


class PacingReadingSchema(BaseModel):
    """Evaluation of one live sample against the banshee."""

    status: PacingStatus
    is_behind: bool
    time_difference_ms: int | None = None
    time_difference_text: str | None = None
    live_distance_m: float | None = None
    reference_time_ms: int | None = None
    ghost_distance_m: float | None = None
    # Banshee distance minus live distance; positive when the runner trails
    distance_delta_m: float | None = None
    distance_delta_text: str | None = None
    ghost_lat: float | None = None
    ghost_lon: float | None = None
    elapsed_ms: int


class PacerRequest(BaseModel):
    """Ask where a fixed-pace pacer is after some elapsed time.

    With ``follow_reference`` the pacer runs along the active reference's
    path; otherwise it stays at the start point.
    """

    start_lat: float = Field(..., ge=-90, le=90)
    start_lon: float = Field(..., ge=-180, le=180)
    target_pace_s_per_km: float = Field(..., gt=0)
    elapsed_ms: int = Field(..., ge=0)
    follow_reference: bool = False


class PacerResponse(BaseModel):
    lat: float
    lon: float
    distance_m: float
    elapsed_ms: int
