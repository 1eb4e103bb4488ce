"""Service configuration loaded from ``BANSHEE_*`` environment variables."""

from __future__ import annotations

import json

from banshee.pacing import LiveDistanceMode
from pydantic_settings import BaseSettings, SettingsConfigDict


def _parse_cors_origins(raw: str) -> list[str]:
    """Split an origins setting into a list.

    A JSON array is used as-is; otherwise brackets and quotes are stripped
    and the value is split on commas, so ``[a, b]`` and ``a,b`` both work.
    """
    try:
        value = json.loads(raw)
    except ValueError:
        value = None
    if isinstance(value, list):
        return [str(origin) for origin in value]

    origins = (part.strip(" \"'") for part in raw.strip("[] ").split(","))
    return [origin for origin in origins if origin]


class Settings(BaseSettings):
    """Banshee API settings.

    Every field can be set as ``BANSHEE_<FIELD>`` in the environment or in
    a ``.env`` file next to the working directory.
    """

    model_config = SettingsConfigDict(
        env_prefix="BANSHEE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Root for session.json, personal_bests.json and activities/
    data_dir: str = "data"

    # Kept as a string so list-shaped values need not be strict JSON
    cors_origins_raw: str = "http://localhost:3000"

    live_distance_mode: LiveDistanceMode = LiveDistanceMode.STRAIGHT_LINE

    # Largest backwards step between consecutive GPS timestamps that is accepted
    timestamp_tolerance_ms: int = 0

    log_level: str = "INFO"
    debug: bool = False

    @property
    def cors_origins(self) -> list[str]:
        return _parse_cors_origins(self.cors_origins_raw)
