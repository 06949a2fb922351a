"""Plain-text rendering of a week: one row per half-hour, one column per day, initials per cell."""
from datetime import date, datetime

from whentomeet.core.constants import DAYS, SLOTS_PER_DAY, TIME_SLOTS
from whentomeet.core.week import week_dates, week_range_text
from whentomeet.services.types import Profile, SlotTable

CELL_WIDTH = 9


def initials(name: str) -> str:
    """'Ann Lee' -> 'AL', 'Ann' -> 'A'."""
    words = (name or "").split()
    if not words:
        return ""
    if len(words) == 1:
        return words[0][0].upper()
    return (words[0][0] + words[-1][0]).upper()


def _cell(entries: list[dict], me: str | None) -> str:
    text = ",".join(initials(e.get("userName", "")) for e in entries)
    if me and any(e.get("userId") == me for e in entries):
        text = f"*{text}"
    if len(text) > CELL_WIDTH:
        text = text[: CELL_WIDTH - 1] + "+"
    return text.ljust(CELL_WIDTH)


def render_week(week_start: date | datetime, table: SlotTable, me: Profile | None = None) -> str:
    """Grid for one week; cells the acting user marked are prefixed with '*'."""
    dates = week_dates(week_start)
    time_width = max(len(t) for t in TIME_SLOTS)
    header = " " * time_width + " | " + " ".join(
        f"{DAYS[i][:3]} {d.day}".ljust(CELL_WIDTH) for i, d in enumerate(dates)
    )
    lines = [week_range_text(week_start), header, "-" * len(header)]
    my_id = me.id if me else None
    for t in range(SLOTS_PER_DAY):
        cells = [_cell(table.get(f"{d}-{t}") or [], my_id) for d in range(len(DAYS))]
        lines.append(TIME_SLOTS[t].rjust(time_width) + " | " + " ".join(cells))
    return "\n".join(lines)


def render_legend(roster: list[Profile]) -> str:
    if not roster:
        return ""
    return "Participants: " + ", ".join(f"{initials(p.name)}={p.name} ({p.color})" for p in roster)
