"""
Calendar API: per-week slot tables.

GET reads one week (?weekKey=) or every week; POST replaces a week's table; PUT marks or unmarks one
slot for one user. Any caller may write for any userId (no authentication).
"""
import logging
from typing import Any, NoReturn

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from whentomeet.api.deps import get_slot_store
from whentomeet.core.constants import DAYS_PER_WEEK, SLOTS_PER_DAY
from whentomeet.core.errors import ValidationError, WhenToMeetError, error_to_http
from whentomeet.core.week import canonical_week_key
from whentomeet.services.slot_store import SlotStore
from whentomeet.services.types import SlotEntry

router = APIRouter()
logger = logging.getLogger(__name__)


class ReplaceWeekRequest(BaseModel):
    week_key: str = Field(..., alias="weekKey", min_length=1)
    data: dict[str, Any]


class UpdateSlotRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    week_key: str = Field(..., alias="weekKey", min_length=1)
    day: int = Field(..., ge=0, le=DAYS_PER_WEEK - 1)
    time_index: int = Field(..., alias="timeIndex", ge=0, le=SLOTS_PER_DAY - 1)
    user_id: str = Field(..., alias="userId", min_length=1)
    user_name: str = Field(..., alias="userName", min_length=1)
    color: str = Field(..., min_length=1)
    is_selected: bool = Field(..., alias="isSelected")


def _handle_store_error(exc: Exception, log_message: str, fallback: str) -> NoReturn:
    if isinstance(exc, ValidationError):
        logger.warning("%s: %s", log_message, exc)
    else:
        logger.exception(log_message)
    raise error_to_http(exc, fallback) from exc


@router.get("/calendar")
def get_calendar(
    week_key: str | None = Query(None, alias="weekKey"),
    slots: SlotStore = Depends(get_slot_store),
) -> dict[str, Any]:
    """
    With weekKey: that week's table ({} if nobody marked anything yet).
    Without: { weekKey: table } for every stored week.
    """
    try:
        if week_key:
            return slots.get_table(canonical_week_key(week_key))
        return slots.get_all()
    except WhenToMeetError as e:
        _handle_store_error(e, "Error fetching calendar data", "Failed to fetch calendar data")


@router.post("/calendar")
def replace_week(body: ReplaceWeekRequest, slots: SlotStore = Depends(get_slot_store)) -> dict[str, bool]:
    """Replace a whole week's table. Last writer wins."""
    try:
        slots.put_table(canonical_week_key(body.week_key), body.data)
    except WhenToMeetError as e:
        _handle_store_error(e, "Error saving calendar data", "Failed to save calendar data")
    return {"success": True}


@router.put("/calendar")
def update_slot(body: UpdateSlotRequest, slots: SlotStore = Depends(get_slot_store)) -> dict[str, bool]:
    """
    Mark (isSelected=true) or unmark one slot for one user. Idempotent: marking twice leaves one entry
    with the latest name/color; unmarking a slot the user never marked is a no-op.
    """
    try:
        key = canonical_week_key(body.week_key)
        entry = SlotEntry(user_id=body.user_id, user_name=body.user_name, color=body.color)
        slots.mark_slot(key, body.day, body.time_index, entry, body.is_selected)
    except WhenToMeetError as e:
        _handle_store_error(e, "Error updating calendar slot", "Failed to update calendar slot")
    return {"success": True}
