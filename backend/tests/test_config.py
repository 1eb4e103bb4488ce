"""Tests for application settings."""

from __future__ import annotations

import pytest
from banshee.pacing import LiveDistanceMode

from backend.api import main
from backend.api.config import Settings, _parse_cors_origins
from backend.api.dependencies import get_settings


class TestParseCorsOrigins:
    @pytest.mark.parametrize(
        "raw",
        [
            '["https://a.com","https://b.com"]',
            "[https://a.com, https://b.com]",
            "https://a.com,https://b.com",
            "'https://a.com', \"https://b.com\"",
        ],
    )
    def test_formats(self, raw: str) -> None:
        assert _parse_cors_origins(raw) == ["https://a.com", "https://b.com"]

    def test_single_origin(self) -> None:
        assert _parse_cors_origins("http://localhost:3000") == ["http://localhost:3000"]

    def test_empty(self) -> None:
        assert _parse_cors_origins("") == []


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        fields = ("DATA_DIR", "LIVE_DISTANCE_MODE", "TIMESTAMP_TOLERANCE_MS", "CORS_ORIGINS_RAW")
        for field in fields:
            monkeypatch.delenv(f"BANSHEE_{field}", raising=False)
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.data_dir == "data"
        assert settings.live_distance_mode is LiveDistanceMode.STRAIGHT_LINE
        assert settings.timestamp_tolerance_ms == 0
        assert settings.cors_origins == ["http://localhost:3000"]

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BANSHEE_LIVE_DISTANCE_MODE", "nearest_point")
        monkeypatch.setenv("BANSHEE_TIMESTAMP_TOLERANCE_MS", "500")
        monkeypatch.setenv("BANSHEE_CORS_ORIGINS_RAW", "https://app.example.com")
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.live_distance_mode is LiveDistanceMode.NEAREST_POINT
        assert settings.timestamp_tolerance_ms == 500
        assert settings.cors_origins == ["https://app.example.com"]

    def test_unknown_distance_mode_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BANSHEE_LIVE_DISTANCE_MODE", "as_the_crow_flies")
        with pytest.raises(ValueError):
            Settings(_env_file=None)  # type: ignore[call-arg]


class TestSharedSettings:
    def test_app_uses_dependency_instance(self) -> None:
        # Startup wiring and request handlers read the same settings object
        assert main.settings is get_settings()
