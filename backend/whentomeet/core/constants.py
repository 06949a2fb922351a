"""
Centralized constants for the availability grid, storage keys and the client poll loop.

Change grid dimensions, palette or key names here instead of scattering literals across stores and routes.
"""

# Grid: 7 days (0 = Sunday) x 18 half-hour buckets from 8:00 to 17:00
DAYS = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
DAYS_PER_WEEK = len(DAYS)
FIRST_HOUR = 8
SLOT_MINUTES = 30
SLOTS_PER_DAY = 18


def _format_time(hour: int, minute: int) -> str:
    return f"{hour}:{minute:02d}"


def _slot_label(i: int) -> str:
    start_hour = FIRST_HOUR + i // 2
    start_minute = 0 if i % 2 == 0 else SLOT_MINUTES
    end_hour = FIRST_HOUR + (i + 1) // 2
    end_minute = 0 if (i + 1) % 2 == 0 else SLOT_MINUTES
    return f"{_format_time(start_hour, start_minute)} - {_format_time(end_hour, end_minute)}"


# "8:00 - 8:30", ..., "16:30 - 17:00"
TIME_SLOTS = [_slot_label(i) for i in range(SLOTS_PER_DAY)]

# Profile colors (name, value). Profiles store the value.
COLOR_OPTIONS = [
    ("Red", "#ef4444"),
    ("Orange", "#f97316"),
    ("Amber", "#f59e0b"),
    ("Yellow", "#eab308"),
    ("Green", "#22c55e"),
    ("Teal", "#14b8a6"),
    ("Blue", "#3b82f6"),
    ("Indigo", "#6366f1"),
    ("Purple", "#a855f7"),
    ("Pink", "#ec4899"),
]
COLOR_VALUES = frozenset(value for _, value in COLOR_OPTIONS)
DEFAULT_COLOR = COLOR_OPTIONS[0][1]

# Logical blob keys (suffixes; backends prepend REDIS_KEY_PREFIX where they namespace keys)
USERS_KEY = "users"
CALENDAR_KEY = "calendar"
LOGICAL_KEYS = (USERS_KEY, CALENDAR_KEY)

# Client poll loop (must match id used in SyncLoop.start add_job)
SYNC_JOB_ID = "calendar_sync"
DEFAULT_POLL_INTERVAL_SECONDS = 2.0

# Selection batches: concurrent slot updates per drag release
SELECTION_MAX_WORKERS = 8
