from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Protocol, Sequence

from core.timeutil import normalize_to_minute_precision, slot_matches


class SlotEntry(Protocol):
    day_of_week: str
    start_time: str


@dataclass(frozen=True)
class GridCell:
    day: str
    slot: str
    entry: SlotEntry | None = None


@dataclass(frozen=True)
class WeeklyGrid:
    """Read-only (day, slot) -> entry projection; slots are keyed as "HH:MM"."""

    days: tuple[str, ...]
    slots: tuple[str, ...]
    cells: dict[tuple[str, str], SlotEntry | None] = field(default_factory=dict)

    def cell(self, day: str, slot: str) -> SlotEntry | None:
        return self.cells.get((day, normalize_to_minute_precision(slot)))

    def rows(self) -> list[tuple[str, list[GridCell]]]:
        return [
            (slot, [GridCell(day=day, slot=slot, entry=self.cells.get((day, slot))) for day in self.days])
            for slot in self.slots
        ]

    def filled_count(self) -> int:
        return sum(1 for entry in self.cells.values() if entry is not None)


def build_grid(entries: Iterable[SlotEntry], days: Sequence[str], slots: Sequence[str]) -> WeeklyGrid:
    """Place entries on the weekly grid.

    A cell takes the first entry, in input order, on the same day whose start
    time matches the slot to the minute. Later duplicates for a cell are
    ignored.
    """

    entries = list(entries)
    slot_keys = tuple(normalize_to_minute_precision(s) for s in slots)

    cells: dict[tuple[str, str], SlotEntry | None] = {}
    for slot in slot_keys:
        for day in days:
            cells[(day, slot)] = next(
                (e for e in entries if e.day_of_week == day and slot_matches(e.start_time, slot)),
                None,
            )
    return WeeklyGrid(days=tuple(days), slots=slot_keys, cells=cells)
