"""
Roster: every participant's Profile, persisted as one ordered list blob.

Slot entries carry a copy of name/color, so renames and deletes cascade into the slot store.
"""
import logging
import threading

from pydantic import ValidationError as PydanticValidationError

from whentomeet.core.constants import USERS_KEY
from whentomeet.core.errors import NotFoundError
from whentomeet.services.slot_store import SlotStore
from whentomeet.services.types import Profile
from whentomeet.storage.base import BlobStore

logger = logging.getLogger(__name__)


def _normalize_name(name: str) -> str:
    return (name or "").strip().lower()


class RosterStore:
    def __init__(self, blobs: BlobStore, slots: SlotStore) -> None:
        self._blobs = blobs
        self._slots = slots
        self._lock = threading.RLock()

    def _load(self) -> list[dict]:
        data = self._blobs.get(USERS_KEY)
        return data if isinstance(data, list) else []

    def list_all(self) -> list[Profile]:
        """All profiles in insertion order. Malformed rows are skipped (logged)."""
        out: list[Profile] = []
        for row in self._load():
            try:
                out.append(Profile.model_validate(row))
            except PydanticValidationError:
                logger.warning("Skipping malformed roster row: %r", row)
        return out

    def get(self, user_id: str) -> Profile | None:
        for p in self.list_all():
            if p.id == user_id:
                return p
        return None

    def find_by_name(self, name: str) -> Profile | None:
        """First profile whose trimmed, case-folded name equals name's. Lets a returning user log in by name."""
        wanted = _normalize_name(name)
        if not wanted:
            return None
        for p in self.list_all():
            if _normalize_name(p.name) == wanted:
                return p
        return None

    def require_by_name(self, name: str) -> Profile:
        profile = self.find_by_name(name)
        if profile is None:
            raise NotFoundError(f"No profile named {name.strip()!r}")
        return profile

    def upsert(self, profile: Profile) -> bool:
        """Append if id is new, else overwrite that row in place. Returns True if created."""
        with self._lock:
            rows = self._load()
            for i, row in enumerate(rows):
                if isinstance(row, dict) and row.get("id") == profile.id:
                    rows[i] = profile.to_json()
                    self._blobs.set(USERS_KEY, rows)
                    return False
            rows.append(profile.to_json())
            self._blobs.set(USERS_KEY, rows)
        logger.info("Created profile %s (%s)", profile.id, profile.name)
        return True

    def save_profile(self, profile: Profile) -> Profile:
        """Upsert; when an existing profile's name or color changed, cascade into every slot entry."""
        with self._lock:
            previous = self.get(profile.id)
            self.upsert(profile)
            changed = previous is not None and (previous.name, previous.color) != (profile.name, profile.color)
            if changed:
                self._slots.cascade_rename(profile.id, profile.name, profile.color)
        return profile

    def rename(self, user_id: str, new_name: str, new_color: str) -> int:
        """
        Change name/color of user_id: roster row (when present) then every slot entry.
        Returns the number of slot entries rewritten.
        """
        with self._lock:
            rows = self._load()
            for row in rows:
                if isinstance(row, dict) and row.get("id") == user_id:
                    row["name"] = new_name
                    row["color"] = new_color
                    self._blobs.set(USERS_KEY, rows)
                    break
        return self._slots.cascade_rename(user_id, new_name, new_color)

    def delete(self, user_id: str) -> bool:
        """
        Remove the profile, then remove its entries from every week. The cascade runs even when the
        id is not on the roster, so orphaned entries get cleaned up. Returns True if a profile was removed.
        """
        with self._lock:
            rows = self._load()
            kept = [r for r in rows if not (isinstance(r, dict) and r.get("id") == user_id)]
            removed = len(kept) != len(rows)
            if removed:
                self._blobs.set(USERS_KEY, kept)
        self._slots.cascade_delete(user_id)
        logger.info("Deleted profile %s (on roster: %s)", user_id, removed)
        return removed
