"""FastAPI dependency injection functions."""

from __future__ import annotations

from functools import lru_cache

from banshee.pacing import PacingSession

from backend.api.config import Settings
from backend.api.services import session_store


@lru_cache
def get_settings() -> Settings:
    """Return the singleton application settings."""
    return Settings()


def get_pacing_session() -> PacingSession:
    """Return the process-wide pacing session handle."""
    return session_store.get_session()
