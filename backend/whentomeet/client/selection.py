"""
Drag selection over the day x time grid.

Press picks one action for the whole gesture: deselect if the pressed cell is already marked by the
acting user, else select. Every move recomputes the selection as the full rectangle between the press
cell and the current cell. Release applies the action to every selected cell as independent slot
updates, then re-fetches the week so the local view shows true server state.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from whentomeet.core.constants import DAYS_PER_WEEK, SELECTION_MAX_WORKERS, SLOTS_PER_DAY
from whentomeet.core.errors import WhenToMeetError
from whentomeet.services.types import Profile, SlotTable

logger = logging.getLogger(__name__)

Coord = tuple[int, int]


class DragAction(str, Enum):
    SELECT = "select"
    DESELECT = "deselect"


class SlotWriter(Protocol):
    def update_slot(self, week_key: str, day: int, time_index: int, profile: Profile, selected: bool) -> None:
        ...


class WeekView(Protocol):
    """The locally cached week (SyncLoop implements this)."""

    @property
    def week_key(self) -> str:
        ...

    @property
    def table(self) -> SlotTable:
        ...

    def refresh_now(self) -> bool:
        ...


@dataclass
class BatchResult:
    action: DragAction | None = None
    week_key: str | None = None
    applied: list[Coord] = field(default_factory=list)
    failed: list[Coord] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def clamp(day: int, time_index: int) -> Coord:
    return min(max(day, 0), DAYS_PER_WEEK - 1), min(max(time_index, 0), SLOTS_PER_DAY - 1)


def rectangle(start: Coord, end: Coord) -> set[Coord]:
    """Every cell of the inclusive rectangle spanned by two corners."""
    (d0, t0), (d1, t1) = start, end
    return {
        (d, t)
        for d in range(min(d0, d1), max(d0, d1) + 1)
        for t in range(min(t0, t1), max(t0, t1) + 1)
    }


def is_marked(table: SlotTable, day: int, time_index: int, user_id: str) -> bool:
    return any(e.get("userId") == user_id for e in table.get(f"{day}-{time_index}") or [])


class SelectionController:
    def __init__(
        self,
        writer: SlotWriter,
        profile: Profile,
        view: WeekView,
        *,
        max_workers: int = SELECTION_MAX_WORKERS,
    ) -> None:
        self.writer = writer
        self.profile = profile
        self.view = view
        self._max_workers = max_workers
        self._start: Coord | None = None
        self._action: DragAction | None = None
        self._selection: set[Coord] = set()
        # One batch at a time per acting user; a second release waits for the first to land
        self._batch_lock = threading.Lock()

    # --- State ---

    @property
    def dragging(self) -> bool:
        return self._start is not None

    @property
    def action(self) -> DragAction | None:
        return self._action

    @property
    def selection(self) -> frozenset[Coord]:
        return frozenset(self._selection)

    def preview(self, day: int, time_index: int) -> DragAction | None:
        """Action the current drag would apply to this cell, or None if the cell is outside it."""
        if self.dragging and (day, time_index) in self._selection:
            return self._action
        return None

    def _reset(self) -> None:
        self._start = None
        self._action = None
        self._selection = set()

    # --- Gesture events ---

    def press(self, day: int, time_index: int) -> DragAction:
        cell = clamp(day, time_index)
        marked = is_marked(self.view.table, cell[0], cell[1], self.profile.id)
        self._action = DragAction.DESELECT if marked else DragAction.SELECT
        self._start = cell
        self._selection = {cell}
        return self._action

    def move(self, day: int, time_index: int) -> None:
        if self._start is None:
            return
        self._selection = rectangle(self._start, clamp(day, time_index))

    def cancel(self) -> None:
        """Pointer lost: back to idle, nothing is written."""
        self._reset()

    def release(self) -> BatchResult:
        """Apply the drag to every selected cell, re-fetch the week, return to idle."""
        if self._start is None or self._action is None:
            self._reset()
            return BatchResult()
        action = self._action
        cells = sorted(self._selection)
        profile = self.profile
        week_key = self.view.week_key
        self._reset()
        with self._batch_lock:
            result = self._apply(week_key, cells, action, profile)
            try:
                self.view.refresh_now()
            except WhenToMeetError as e:
                logger.warning("Refresh after selection batch failed: %s", e)
        return result

    def _apply(self, week_key: str, cells: list[Coord], action: DragAction, profile: Profile) -> BatchResult:
        result = BatchResult(action=action, week_key=week_key)
        selected = action is DragAction.SELECT
        workers = max(1, min(len(cells), self._max_workers))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="slot_update") as executor:
            future_to_cell = {
                executor.submit(self.writer.update_slot, week_key, d, t, profile, selected): (d, t)
                for d, t in cells
            }
            for future in as_completed(future_to_cell):
                cell = future_to_cell[future]
                try:
                    future.result()
                    result.applied.append(cell)
                except Exception as e:
                    logger.error("Slot update %s %s-%s failed: %s", week_key, cell[0], cell[1], e)
                    result.failed.append(cell)
        result.applied.sort()
        result.failed.sort()
        if result.failed:
            logger.warning(
                "Selection batch %s on %s: %d applied, %d failed",
                action.value,
                week_key,
                len(result.applied),
                len(result.failed),
            )
        return result
