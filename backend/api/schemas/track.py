"""Pydantic schemas for coordinates, tracks and reference runs."""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, Field

# IDs double as file names under the data directory
ID_PATTERN = r"^[A-Za-z0-9_-]+$"
ID_MAX_LENGTH = 64

RecordId = Annotated[str, Field(min_length=1, max_length=ID_MAX_LENGTH, pattern=ID_PATTERN)]


class CoordinateSchema(BaseModel):
    """A single GPS fix on the wire."""

    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)
    timestamp_ms: int = Field(..., ge=0)
    elevation_m: float | None = None


class RunRecordSchema(BaseModel):
    """A reference run (banshee) with its full track."""

    id: RecordId
    name: str = ""
    coordinates: list[CoordinateSchema]
    recorded_at: int = 0
