"""
Week keys and grid coordinates.

A week is identified by its Sunday at midnight and encoded as YYYY-MM-DD. A slot inside a week is
(day, time_index) with day 0 = Sunday, serialized as "day-timeIndex".
"""
import re
from datetime import date, datetime, timedelta

from whentomeet.core.constants import DAYS_PER_WEEK, SLOTS_PER_DAY
from whentomeet.core.errors import ValidationError

_WEEK_KEY_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
_SLOT_KEY_RE = re.compile(r"([0-9]+)-([0-9]+)")


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


def week_start_of(value: date | datetime) -> datetime:
    """Most recent Sunday at midnight <= value. Keeps value's tzinfo when it has one."""
    day = _as_date(value)
    tz = value.tzinfo if isinstance(value, datetime) else None
    # date.weekday(): Monday=0 .. Sunday=6
    sunday = day - timedelta(days=(day.weekday() + 1) % 7)
    return datetime(sunday.year, sunday.month, sunday.day, tzinfo=tz)


def week_key(week_start: date | datetime) -> str:
    d = _as_date(week_start)
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def current_week_key(now: datetime | None = None) -> str:
    return week_key(week_start_of(now or datetime.now()))


def parse_week_key(key: str) -> date:
    """YYYY-MM-DD -> date. Raises ValidationError for malformed keys or dates that are not Sundays."""
    s = (key or "").strip()
    if not _WEEK_KEY_RE.fullmatch(s):
        raise ValidationError(f"Invalid weekKey {key!r}. Use YYYY-MM-DD.")
    try:
        d = date.fromisoformat(s)
    except ValueError:
        raise ValidationError(f"Invalid weekKey {key!r}. Use YYYY-MM-DD.") from None
    if d.weekday() != 6:
        raise ValidationError(f"weekKey {key!r} is not a Sunday.")
    return d


def canonical_week_key(key: str) -> str:
    """Validated, normalized form of a client-supplied week key (surrounding whitespace dropped)."""
    return week_key(parse_week_key(key))


def week_dates(week_start: date | datetime) -> list[date]:
    start = _as_date(week_start)
    return [start + timedelta(days=i) for i in range(DAYS_PER_WEEK)]


def add_weeks(value: date | datetime, weeks: int):
    return value + timedelta(days=7 * weeks)


def _day_suffix(day: int) -> str:
    if 11 <= day <= 13:
        return "th"
    return {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")


def week_range_text(week_start: date | datetime) -> str:
    """'Week of Mar 1st - 7th', or 'Week of Feb 28th - Mar 6th' when the week spans two months."""
    start = _as_date(week_start)
    end = start + timedelta(days=DAYS_PER_WEEK - 1)
    start_label = f"{start.strftime('%b')} {start.day}{_day_suffix(start.day)}"
    if start.month == end.month:
        return f"Week of {start_label} - {end.day}{_day_suffix(end.day)}"
    return f"Week of {start_label} - {end.strftime('%b')} {end.day}{_day_suffix(end.day)}"


# --- Slot coordinates ---


def validate_coord(day: int, time_index: int) -> None:
    if not 0 <= day < DAYS_PER_WEEK:
        raise ValidationError(f"day must be between 0 and {DAYS_PER_WEEK - 1}; got {day}")
    if not 0 <= time_index < SLOTS_PER_DAY:
        raise ValidationError(f"timeIndex must be between 0 and {SLOTS_PER_DAY - 1}; got {time_index}")


def slot_key(day: int, time_index: int) -> str:
    validate_coord(day, time_index)
    return f"{day}-{time_index}"


def parse_slot_key(key: str) -> tuple[int, int]:
    m = _SLOT_KEY_RE.fullmatch(key or "")
    if not m:
        raise ValidationError(f"Invalid slot key {key!r}. Use day-timeIndex.")
    day, time_index = int(m.group(1)), int(m.group(2))
    validate_coord(day, time_index)
    return day, time_index
