"""
Profile flows on the client: sign in (or log back in by name), edit, delete.
"""
import logging

from whentomeet.client.api_client import AvailabilityClient
from whentomeet.client.identity import LocalIdentity
from whentomeet.core.errors import ValidationError
from whentomeet.services.types import Profile, new_user_id

logger = logging.getLogger(__name__)


def save_profile(client: AvailabilityClient, identity: LocalIdentity, name: str, color: str) -> Profile:
    """
    Signed out: an existing profile with this name (trimmed, case-insensitive) is adopted instead of
    creating a duplicate identity; otherwise a new profile is created.
    Signed in: the current profile is renamed/recolored; the server rewrites its slot entries.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationError("Please enter your name")
    current = identity.load()
    if current is None:
        existing = client.find_user_by_name(name)
        if existing is not None:
            identity.save(existing)
            logger.info("Logged in as existing profile %s", existing.id)
            return existing
        user = Profile(id=new_user_id(), name=name, color=color)
    else:
        user = Profile(id=current.id, name=name, color=color)
    saved = client.save_user(user)
    identity.save(saved)
    return saved


def delete_profile(client: AvailabilityClient, identity: LocalIdentity) -> bool:
    """Delete the signed-in profile everywhere (roster + all weeks), then sign out. False if signed out."""
    current = identity.load()
    if current is None:
        return False
    client.delete_user(current.id)
    identity.sign_out()
    logger.info("Deleted profile %s", current.id)
    return True
