"""Process-wide pacing session with JSON disk persistence.

Holds the single :class:`PacingSession` handle used by the API.  The active
reference run is written to ``<data_dir>/session.json`` so a restarted
server picks up the same banshee.  All mutations happen in non-awaiting
request handlers on one event loop, which serialises them.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from banshee.activity import RunRecord
from banshee.pacing import LiveDistanceMode, PacingSession

from backend.api.services.serializers import run_record_from_dict, run_record_to_dict

logger = logging.getLogger(__name__)

_SESSION_FILE = "session.json"

# Module-level session handle
_session = PacingSession()

# Disk persistence directory (set via init_session_store on startup)
_data_dir: Path | None = None


def init_session_store(
    path: str,
    distance_mode: LiveDistanceMode | str = LiveDistanceMode.STRAIGHT_LINE,
    timestamp_tolerance_ms: int = 0,
) -> None:
    """Configure persistence and replace the handle with a freshly configured one."""
    global _data_dir, _session  # noqa: PLW0603
    _data_dir = Path(path)
    _data_dir.mkdir(parents=True, exist_ok=True)
    _session = PacingSession(
        distance_mode=LiveDistanceMode(distance_mode),
        timestamp_tolerance_ms=timestamp_tolerance_ms,
    )


def get_session() -> PacingSession:
    """Return the process-wide pacing session handle."""
    return _session


def start_session(record: RunRecord) -> PacingSession:
    """Activate *record* as the banshee and persist it.

    Validation errors from :meth:`PacingSession.init` propagate and leave the
    previous session untouched.
    """
    _session.init(record)
    _persist_record(record)
    logger.info("Pacing session started against run %s", record.id)
    return _session


def clear_session() -> bool:
    """Clear the session. Returns True if one was active."""
    was_active = _session.is_active
    _session.clear()
    if _data_dir is not None:
        (_data_dir / _SESSION_FILE).unlink(missing_ok=True)
    return was_active


def load_persisted_session() -> bool:
    """Restore the persisted reference run, if any. Returns True on success."""
    if _data_dir is None:
        return False
    path = _data_dir / _SESSION_FILE
    if not path.is_file():
        return False
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        _session.init(run_record_from_dict(data))
    except (OSError, ValueError, KeyError, TypeError):
        logger.warning("Could not restore pacing session from %s", path, exc_info=True)
        return False
    return True


def reset() -> None:
    """Forget the session, its settings and the persistence directory (tests, shutdown)."""
    global _data_dir, _session  # noqa: PLW0603
    _session.clear()
    _session = PacingSession()
    _data_dir = None


def _persist_record(record: RunRecord) -> None:
    if _data_dir is None:
        return
    try:
        out = _data_dir / _SESSION_FILE
        out.write_text(json.dumps(run_record_to_dict(record)), encoding="utf-8")
    except OSError:
        logger.warning("Failed to persist pacing session %s", record.id, exc_info=True)
