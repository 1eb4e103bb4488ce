"""Test fixtures for the backend test suite."""

from __future__ import annotations

import math
from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
import pytest_asyncio
from banshee.constants import EARTH_RADIUS_M
from httpx import ASGITransport, AsyncClient

from backend.api.main import app
from backend.api.services import ledger_store, session_store

METERS_PER_DEG_LAT = EARTH_RADIUS_M * math.pi / 180.0
START_LAT = 40.7128
START_LON = -74.0060

CoordinatesFactory = Callable[..., list[dict[str, Any]]]


def north_of(meters: float) -> float:
    """Latitude *meters* due north of the test start line."""
    return START_LAT + meters / METERS_PER_DEG_LAT


def build_coordinates(
    distance_m: float = 6_000.0,
    duration_ms: int = 1_800_000,
    n_points: int = 61,
) -> list[dict[str, Any]]:
    """Constant-speed coordinates heading due north, as JSON-ready dicts."""
    step = n_points - 1
    return [
        {
            "lat": north_of(distance_m * i / step),
            "lon": START_LON,
            "timestamp_ms": round(duration_ms * i / step),
        }
        for i in range(n_points)
    ]


def build_activity_payload(
    activity_id: str | None = "run-1",
    distance_m: float = 6_000.0,
    duration_ms: int = 1_800_000,
    activity_type: str = "run",
    recorded_at: int = 1_700_000_000_000,
) -> dict[str, Any]:
    """Request body for ``POST /api/activities``."""
    payload: dict[str, Any] = {
        "name": f"Test {activity_type}",
        "activity_type": activity_type,
        "coordinates": build_coordinates(distance_m, duration_ms),
        "recorded_at": recorded_at,
    }
    if activity_id is not None:
        payload["id"] = activity_id
    return payload


@pytest.fixture
def coordinates_factory() -> CoordinatesFactory:
    return build_coordinates


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Yield an async HTTP test client wired to the FastAPI app.

    Clears the in-memory activity, ledger and session stores before and
    after each test.
    """
    ledger_store.clear_all()
    session_store.reset()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    ledger_store.clear_all()
    session_store.reset()
