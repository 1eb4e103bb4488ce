"""In-memory store for activities and the personal-best ledger with JSON disk persistence.

Activities are kept keyed by ID and persisted one file per activity under
``<data_dir>/activities/``; the ledger lives in
``<data_dir>/personal_bests.json``.  Both survive server restarts.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from banshee.activity import Activity, ActivitySummary, ActivityType, filter_by_type, sort_by_date
from banshee.personal_best import (
    EMPTY_LEDGER,
    PersonalBest,
    PersonalBestLedger,
    rebuild_ledger,
    update,
)
from banshee.track import validate_track

from backend.api.services.serializers import (
    activity_from_dict,
    activity_to_dict,
    ledger_from_dict,
    ledger_to_dict,
)

logger = logging.getLogger(__name__)

_LEDGER_FILE = "personal_bests.json"

# ---------------------------------------------------------------------------
# Module-level in-memory stores
# ---------------------------------------------------------------------------

_activities: dict[str, Activity] = {}
_ledger: PersonalBestLedger = EMPTY_LEDGER

# Disk persistence directory (set via init_ledger_dir on startup)
_data_dir: Path | None = None

# Backwards GPS clock step accepted when folding activities into the ledger
_tolerance_ms: int = 0


# ---------------------------------------------------------------------------
# Initialisation
# ---------------------------------------------------------------------------


def init_ledger_dir(path: str, timestamp_tolerance_ms: int = 0) -> None:
    """Configure the directory used for persisting activities and the ledger.

    Creates the ``activities/`` subdirectory under *path*.
    """
    global _data_dir, _tolerance_ms  # noqa: PLW0603
    _data_dir = Path(path)
    _tolerance_ms = timestamp_tolerance_ms
    (_data_dir / "activities").mkdir(parents=True, exist_ok=True)


# ---------------------------------------------------------------------------
# Internal persistence helpers
# ---------------------------------------------------------------------------


def _activity_path(data_dir: Path, activity_id: str) -> Path:
    """File for *activity_id* under ``<data_dir>/activities/``.

    Raises
    ------
    ValueError
        If the ID would resolve to a file outside ``activities/``.
    """
    folder = (data_dir / "activities").resolve()
    path = (folder / f"{activity_id}.json").resolve()
    if path.parent != folder:
        msg = f"Activity ID {activity_id!r} is not usable as a file name"
        raise ValueError(msg)
    return path


def _persist_activity(activity: Activity) -> None:
    """Write an activity to disk as JSON."""
    if _data_dir is None:
        return
    try:
        out = _activity_path(_data_dir, activity.id)
        out.write_text(json.dumps(activity_to_dict(activity)), encoding="utf-8")
    except OSError:
        logger.warning("Failed to persist activity %s", activity.id, exc_info=True)


def _delete_persisted_activity(activity_id: str) -> None:
    """Remove a persisted activity from disk."""
    if _data_dir is None:
        return
    path = _activity_path(_data_dir, activity_id)
    path.unlink(missing_ok=True)


def _persist_ledger() -> None:
    """Write the current ledger to disk as JSON."""
    if _data_dir is None:
        return
    try:
        out = _data_dir / _LEDGER_FILE
        out.write_text(json.dumps(ledger_to_dict(_ledger), indent=2), encoding="utf-8")
    except OSError:
        logger.warning("Failed to persist personal-best ledger", exc_info=True)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_persisted() -> int:
    """Load activities and the ledger from disk. Returns the activity count.

    Corrupt activity files are skipped.  A missing or unreadable ledger file
    is rebuilt from the loaded activities.
    """
    global _ledger  # noqa: PLW0603
    if _data_dir is None:
        return 0

    count = 0
    for path in sorted((_data_dir / "activities").glob("*.json")):
        try:
            activity = activity_from_dict(json.loads(path.read_text(encoding="utf-8")))
            validate_track(activity.track, min_points=0, tolerance_ms=_tolerance_ms)
        except (OSError, ValueError, KeyError, TypeError):
            logger.warning("Skipping unreadable activity file %s", path.name, exc_info=True)
            continue
        _activities[activity.id] = activity
        count += 1

    ledger_path = _data_dir / _LEDGER_FILE
    try:
        _ledger = ledger_from_dict(json.loads(ledger_path.read_text(encoding="utf-8")))
    except FileNotFoundError:
        _ledger = rebuild_ledger(_activities.values(), tolerance_ms=_tolerance_ms)
    except (OSError, ValueError, KeyError, TypeError):
        logger.warning("Could not read %s, rebuilding from activities", _LEDGER_FILE, exc_info=True)
        _ledger = rebuild_ledger(_activities.values(), tolerance_ms=_tolerance_ms)
        _persist_ledger()

    return count


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def add_activity(activity: Activity) -> list[PersonalBest]:
    """Store an activity and fold it into the ledger.

    Returns the personal bests it newly achieved.

    Raises
    ------
    MalformedInputError
        If the activity's track is structurally invalid.
    ValueError
        If persistence is enabled and the ID is not a safe file name.
    """
    global _ledger  # noqa: PLW0603
    if _data_dir is not None:
        _activity_path(_data_dir, activity.id)
    _ledger, achieved = update(_ledger, activity, tolerance_ms=_tolerance_ms)
    _activities[activity.id] = activity
    _persist_activity(activity)
    if achieved:
        _persist_ledger()
    return achieved


def get_activity(activity_id: str) -> Activity | None:
    """Retrieve an activity by ID, or None if not found."""
    return _activities.get(activity_id)


def list_summaries(activity_type: ActivityType | None = None) -> list[ActivitySummary]:
    """Summaries of all stored activities, newest first, optionally filtered by type."""
    summaries = sort_by_date(a.to_summary() for a in _activities.values())
    if activity_type is not None:
        summaries = filter_by_type(summaries, activity_type)
    return summaries


def delete_activity(activity_id: str) -> bool:
    """Delete an activity and rebuild the ledger without it.

    Returns True if it existed.
    """
    global _ledger  # noqa: PLW0603
    if _activities.pop(activity_id, None) is None:
        return False
    _delete_persisted_activity(activity_id)
    _ledger = rebuild_ledger(_activities.values(), tolerance_ms=_tolerance_ms)
    _persist_ledger()
    return True


def get_ledger() -> PersonalBestLedger:
    """Return the current personal-best ledger."""
    return _ledger


def clear_all() -> int:
    """Delete all in-memory activities and reset the ledger. Returns the count."""
    global _ledger, _data_dir, _tolerance_ms  # noqa: PLW0603
    count = len(_activities)
    _activities.clear()
    _ledger = EMPTY_LEDGER
    _data_dir = None
    _tolerance_ms = 0
    return count
