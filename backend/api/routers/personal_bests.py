"""Personal-best ledger query endpoint."""

from __future__ import annotations

from typing import Annotated

from banshee.activity import ActivityType
from banshee.personal_best import get_pbs_for_type
from fastapi import APIRouter, Query

from backend.api.schemas.personal_best import PersonalBestList
from backend.api.services import ledger_store
from backend.api.services.serializers import personal_best_to_schema

router = APIRouter()


@router.get("")
async def list_personal_bests(
    activity_type: Annotated[ActivityType, Query(alias="type")] = ActivityType.RUN,
) -> PersonalBestList:
    """Current bests for one activity type, ascending by distance."""
    pbs = get_pbs_for_type(ledger_store.get_ledger(), activity_type)
    return PersonalBestList(
        activity_type=activity_type,
        items=[personal_best_to_schema(pb) for pb in pbs],
    )
