from whentomeet.services.roster_store import RosterStore
from whentomeet.services.slot_store import SlotStore
from whentomeet.services.types import Calendar, Profile, SlotEntry, SlotTable, new_user_id

__all__ = [
    "Calendar",
    "Profile",
    "RosterStore",
    "SlotEntry",
    "SlotStore",
    "SlotTable",
    "new_user_id",
]
