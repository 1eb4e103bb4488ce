"""Personal-best ledger: fastest milestone times per activity type.

Every operation here is a pure function of its inputs.  A ledger value is
never mutated; updates return a new ledger and the list of entries that
were added or improved.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from banshee.activity import Activity, ActivityType, pace_min_per_km
from banshee.constants import MILESTONE_KEY_TOLERANCE_M
from banshee.milestones import detect_milestones, milestone_name, milestones_for
from banshee.track import validate_track

logger = logging.getLogger(__name__)

LedgerKey = tuple[ActivityType, float]

_TYPE_ORDER: dict[ActivityType, int] = {t: i for i, t in enumerate(ActivityType)}


def _key(activity_type: ActivityType, distance_m: float) -> LedgerKey:
    return activity_type, round(float(distance_m), 1)


@dataclass(frozen=True)
class PersonalBest:
    """Fastest recorded time to reach a milestone distance for one activity type."""

    activity_type: ActivityType
    distance_m: float
    duration_ms: int
    activity_id: str
    achieved_at: int  # epoch ms of the achieving activity

    @property
    def name(self) -> str:
        return milestone_name(self.distance_m)

    @property
    def pace_min_per_km(self) -> float:
        return pace_min_per_km(self.distance_m, self.duration_ms)


@dataclass(frozen=True)
class PersonalBestLedger:
    """Mapping of ``(activity_type, distance_m)`` to the current best."""

    entries: Mapping[LedgerKey, PersonalBest] = field(default_factory=dict)

    @classmethod
    def from_records(cls, records: Iterable[PersonalBest]) -> PersonalBestLedger:
        """Build a ledger from a flat list, keeping the fastest entry per key."""
        entries: dict[LedgerKey, PersonalBest] = {}
        for pb in records:
            key = _key(pb.activity_type, pb.distance_m)
            current = entries.get(key)
            if current is None or pb.duration_ms < current.duration_ms:
                entries[key] = pb
        return cls(entries=entries)

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, activity_type: ActivityType, distance_m: float) -> PersonalBest | None:
        """Current best for a type and distance (1 m tolerance), or None."""
        exact = self.entries.get(_key(activity_type, distance_m))
        if exact is not None:
            return exact
        for (entry_type, entry_distance), pb in self.entries.items():
            if (
                entry_type == activity_type
                and abs(entry_distance - distance_m) < MILESTONE_KEY_TOLERANCE_M
            ):
                return pb
        return None

    def records(self) -> list[PersonalBest]:
        """All entries ordered by activity type, then ascending distance."""
        return sorted(
            self.entries.values(),
            key=lambda pb: (_TYPE_ORDER[pb.activity_type], pb.distance_m),
        )


EMPTY_LEDGER = PersonalBestLedger()


def update(
    existing: PersonalBestLedger | None,
    activity: Activity,
    *,
    tolerance_ms: int = 0,
) -> tuple[PersonalBestLedger, list[PersonalBest]]:
    """Merge an activity's milestone times into a ledger.

    An entry is replaced only when the candidate is strictly faster; ties
    keep the existing entry and are not reported.

    Returns
    -------
    ``(new_ledger, newly_achieved)`` where *newly_achieved* lists the added
    or improved entries in ascending distance order.

    Raises
    ------
    MalformedInputError
        If the activity's track has invalid coordinates or timestamps that
        step backwards by more than *tolerance_ms*.  Tracks too short to
        reach any milestone are accepted and contribute nothing.
    """
    validate_track(activity.track, min_points=0, tolerance_ms=tolerance_ms)
    ledger = existing if existing is not None else EMPTY_LEDGER
    distances = [m.distance_m for m in milestones_for(activity.activity_type)]
    candidates = detect_milestones(activity.track, distances)

    entries = dict(ledger.entries)
    newly_achieved: list[PersonalBest] = []
    for candidate in candidates:
        key = _key(activity.activity_type, candidate.distance_m)
        current = entries.get(key)
        if current is not None and candidate.duration_ms >= current.duration_ms:
            continue
        pb = PersonalBest(
            activity_type=activity.activity_type,
            distance_m=candidate.distance_m,
            duration_ms=candidate.duration_ms,
            activity_id=activity.id,
            achieved_at=activity.recorded_at,
        )
        entries[key] = pb
        newly_achieved.append(pb)

    if newly_achieved:
        logger.info(
            "Activity %s set %d new %s PB(s): %s",
            activity.id,
            len(newly_achieved),
            activity.activity_type,
            ", ".join(pb.name for pb in newly_achieved),
        )

    return PersonalBestLedger(entries=entries), newly_achieved


def calculate_pbs(activity: Activity, *, tolerance_ms: int = 0) -> list[PersonalBest]:
    """Milestone times of *activity* as PB candidates, without any history."""
    _, achieved = update(None, activity, tolerance_ms=tolerance_ms)
    return achieved


def get_pbs_for_type(
    ledger: PersonalBestLedger | None,
    activity_type: ActivityType,
) -> list[PersonalBest]:
    """Bests for one activity type, ascending by distance."""
    if ledger is None:
        return []
    return sorted(
        (pb for pb in ledger.entries.values() if pb.activity_type == activity_type),
        key=lambda pb: pb.distance_m,
    )


def remove_for_activity(ledger: PersonalBestLedger, activity_id: str) -> PersonalBestLedger:
    """Return a ledger without the entries achieved by *activity_id*.

    Removed entries are not backfilled; use :func:`rebuild_ledger` to
    recover the next-best times from the remaining activities.
    """
    return PersonalBestLedger(
        entries={k: pb for k, pb in ledger.entries.items() if pb.activity_id != activity_id}
    )


def rebuild_ledger(
    activities: Iterable[Activity], *, tolerance_ms: int = 0
) -> PersonalBestLedger:
    """Replay *activities* in chronological order into a fresh ledger."""
    ledger = EMPTY_LEDGER
    for activity in sorted(activities, key=lambda a: a.recorded_at):
        ledger, _ = update(ledger, activity, tolerance_ms=tolerance_ms)
    return ledger
