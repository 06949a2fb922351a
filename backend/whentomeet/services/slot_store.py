"""
Slot store: week key -> slot table, persisted as one calendar blob.

Per slot the entry list is a set keyed by userId (never two entries for one user) kept in
first-mark order, and a slot whose list becomes empty is deleted from its table. Every mutation is a
full read-modify-write of the calendar blob; mutations inside this process are serialized by one
lock, so concurrent requests to the same server never lose each other's writes. Separate server
processes sharing a backend still race, last writer wins.
"""
import logging
import threading
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from whentomeet.core.constants import CALENDAR_KEY
from whentomeet.core.errors import ValidationError
from whentomeet.core.week import parse_slot_key, slot_key
from whentomeet.services.types import Calendar, SlotEntry, SlotTable
from whentomeet.storage.base import BlobStore

logger = logging.getLogger(__name__)


# --- Pure table operations (no I/O) ---


def upsert_entry(entries: list[dict[str, Any]], entry: SlotEntry) -> list[dict[str, Any]]:
    """Append entry, or overwrite the existing entry for entry.user_id in place (position kept)."""
    new = entry.to_json()
    for i, existing in enumerate(entries):
        if existing.get("userId") == entry.user_id:
            entries[i] = new
            return entries
    entries.append(new)
    return entries


def remove_entry(table: SlotTable, key: str, user_id: str) -> bool:
    """Drop user_id's entry at key; delete key when its list empties. Returns True if anything changed."""
    entries = table.get(key)
    if entries is None:
        return False
    kept = [e for e in entries if e.get("userId") != user_id]
    if len(kept) == len(entries):
        return False
    if kept:
        table[key] = kept
    else:
        del table[key]
    return True


def normalize_table(table: dict[str, Any]) -> SlotTable:
    """
    Validate an incoming table (from a whole-table replace) and bring it to the stored invariants:
    valid "day-timeIndex" keys rewritten to their canonical form ("01-4" -> "1-4", lists merged when two
    spellings name one slot), well-formed entries, one entry per user (first position, last values),
    no empty lists. Raises ValidationError before anything is written.
    """
    if not isinstance(table, dict):
        raise ValidationError("data must be an object mapping 'day-timeIndex' to entry lists")
    out: SlotTable = {}
    for key, raw_entries in table.items():
        canonical = slot_key(*parse_slot_key(key))
        if not isinstance(raw_entries, list):
            raise ValidationError(f"Slot {key!r} must map to a list of entries")
        entries = out.setdefault(canonical, [])
        for raw in raw_entries:
            try:
                entry = SlotEntry.model_validate(raw)
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid entry in slot {key!r}: {e.errors()[0]['msg']}") from None
            upsert_entry(entries, entry)
        if not entries:
            del out[canonical]
    return out


class SlotStore:
    def __init__(self, blobs: BlobStore) -> None:
        self._blobs = blobs
        self._lock = threading.RLock()

    # --- Reads ---

    def get_all(self) -> Calendar:
        """Every week's table. {} when nothing was ever stored."""
        data = self._blobs.get(CALENDAR_KEY)
        return data if isinstance(data, dict) else {}

    def get_table(self, week_key: str) -> SlotTable:
        """One week's table; {} for a week nobody has written yet (not an error)."""
        return self.get_all().get(week_key) or {}

    def is_marked(self, week_key: str, day: int, time_index: int, user_id: str) -> bool:
        entries = self.get_table(week_key).get(slot_key(day, time_index)) or []
        return any(e.get("userId") == user_id for e in entries)

    # --- Single-week mutations ---

    def put_table(self, week_key: str, table: dict[str, Any]) -> None:
        """Whole-table replace for one week."""
        cleaned = normalize_table(table)
        with self._lock:
            calendar = self.get_all()
            calendar[week_key] = cleaned
            self._blobs.set(CALENDAR_KEY, calendar)
        logger.info("Replaced table for week %s (%d slots)", week_key, len(cleaned))

    def upsert_slot(self, week_key: str, day: int, time_index: int, entry: SlotEntry) -> None:
        key = slot_key(day, time_index)
        with self._lock:
            calendar = self.get_all()
            table = calendar.setdefault(week_key, {})
            upsert_entry(table.setdefault(key, []), entry)
            self._blobs.set(CALENDAR_KEY, calendar)
        logger.debug("Marked %s %s for %s", week_key, key, entry.user_id)

    def remove_slot(self, week_key: str, day: int, time_index: int, user_id: str) -> bool:
        """Unmark; a user with no entry there is a no-op (nothing is written). Returns True if removed."""
        key = slot_key(day, time_index)
        with self._lock:
            calendar = self.get_all()
            table = calendar.get(week_key)
            if table is None or not remove_entry(table, key, user_id):
                return False
            self._blobs.set(CALENDAR_KEY, calendar)
        logger.debug("Unmarked %s %s for %s", week_key, key, user_id)
        return True

    def mark_slot(self, week_key: str, day: int, time_index: int, entry: SlotEntry, selected: bool) -> None:
        """Mark (upsert) when selected, else unmark (remove) entry.user_id."""
        if selected:
            self.upsert_slot(week_key, day, time_index, entry)
        else:
            self.remove_slot(week_key, day, time_index, entry.user_id)

    # --- Cascades over the whole calendar (no per-user index: O(total entries)) ---

    def cascade_rename(self, user_id: str, new_name: str, new_color: str) -> int:
        """Rewrite user_id's name/color in every slot of every week, positions kept. Returns entries touched."""
        replacement = SlotEntry(user_id=user_id, user_name=new_name, color=new_color).to_json()
        touched = 0
        with self._lock:
            calendar = self.get_all()
            for table in calendar.values():
                for entries in table.values():
                    for i, e in enumerate(entries):
                        if e.get("userId") == user_id:
                            entries[i] = replacement
                            touched += 1
            if touched:
                self._blobs.set(CALENDAR_KEY, calendar)
        logger.info("Cascade rename for %s: %d entries updated", user_id, touched)
        return touched

    def cascade_delete(self, user_id: str) -> int:
        """Remove user_id from every slot of every week, dropping emptied slots. Returns entries removed."""
        removed = 0
        changed = False
        with self._lock:
            calendar = self.get_all()
            for table in calendar.values():
                for key in list(table.keys()):
                    if not table[key]:
                        # empty list left by an older writer
                        del table[key]
                        changed = True
                        continue
                    before = len(table[key])
                    if remove_entry(table, key, user_id):
                        removed += before - len(table.get(key, []))
                        changed = True
            if changed:
                self._blobs.set(CALENDAR_KEY, calendar)
        logger.info("Cascade delete for %s: %d entries removed", user_id, removed)
        return removed
