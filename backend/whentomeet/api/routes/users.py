"""
Users API: the shared roster of profiles.

Saving a profile creates or overwrites it by id; PUT rewrites name/color on every slot entry the user
made; DELETE removes the profile and all of its entries from every week.
"""
import logging
from typing import Any, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from whentomeet.api.deps import get_roster_store
from whentomeet.core.errors import STATUS_BAD_REQUEST, NotFoundError, ValidationError, WhenToMeetError, error_to_http
from whentomeet.services.roster_store import RosterStore
from whentomeet.services.types import Profile

router = APIRouter()
logger = logging.getLogger(__name__)


class RenameRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1)
    user_name: str = Field(..., alias="userName", min_length=1)
    color: str = Field(..., min_length=1)


def _handle_store_error(exc: Exception, log_message: str, fallback: str) -> NoReturn:
    if isinstance(exc, (ValidationError, NotFoundError)):
        logger.warning("%s: %s", log_message, exc)
    else:
        logger.exception(log_message)
    raise error_to_http(exc, fallback) from exc


@router.get("/users")
def list_users(roster: RosterStore = Depends(get_roster_store)) -> list[dict[str, str]]:
    try:
        return [p.to_json() for p in roster.list_all()]
    except WhenToMeetError as e:
        _handle_store_error(e, "Error fetching users", "Failed to fetch users")


@router.get("/users/lookup")
def lookup_user(
    name: str = Query(..., min_length=1),
    roster: RosterStore = Depends(get_roster_store),
) -> dict[str, str]:
    """Find a profile by display name (trimmed, case-insensitive) so a returning user can log back in."""
    try:
        return roster.require_by_name(name).to_json()
    except WhenToMeetError as e:
        _handle_store_error(e, "Error looking up user", "Failed to look up user")


@router.post("/users")
def save_user(body: Profile, roster: RosterStore = Depends(get_roster_store)) -> dict[str, Any]:
    """Create or overwrite a profile by id. A changed name/color is also rewritten on existing slot entries."""
    try:
        user = roster.save_profile(body)
    except WhenToMeetError as e:
        _handle_store_error(e, "Error saving user", "Failed to save user")
    return {"success": True, "user": user.to_json()}


@router.put("/users")
def rename_user(body: RenameRequest, roster: RosterStore = Depends(get_roster_store)) -> dict[str, Any]:
    """Rewrite name/color of userId on the roster and on every slot entry in every week."""
    name = body.user_name.strip()
    color = body.color.strip()
    if not name or not color:
        raise HTTPException(status_code=STATUS_BAD_REQUEST, detail="userName and color are required")
    try:
        updated = roster.rename(body.user_id.strip(), name, color)
    except WhenToMeetError as e:
        _handle_store_error(e, "Error updating user entries", "Failed to update user entries")
    return {"success": True, "updated": updated}


@router.delete("/users")
def delete_user(
    user_id: str | None = Query(None, alias="userId"),
    roster: RosterStore = Depends(get_roster_store),
) -> dict[str, bool]:
    """Delete the profile and cascade: its entries disappear from every week."""
    if not user_id or not user_id.strip():
        raise HTTPException(status_code=STATUS_BAD_REQUEST, detail="userId is required")
    try:
        roster.delete(user_id.strip())
    except WhenToMeetError as e:
        _handle_store_error(e, "Error deleting user", "Failed to delete user")
    return {"success": True}
