"""Half-open interval algebra shared by availability, gap search and conflict detection.

All overlap decisions in the engine go through ``overlaps``. Intervals are ``[start, end)``:
an interval ending exactly when another begins does not overlap it.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """True if ``[a_start, a_end)`` and ``[b_start, b_end)`` overlap"""
    return a_start < b_end and b_start < a_end


@dataclass(frozen=True)
class BusyInterval:
    """A reservation on the property's booking calendar"""

    start: datetime
    end: datetime

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return overlaps(self.start, self.end, start, end)

    def abuts(self, other: "BusyInterval") -> bool:
        """True if this reservation ends on the same date the other one begins, without overlap"""
        return self.end.date() == other.start.date() and not overlaps(
            self.start, self.end, other.start, other.end
        )


@dataclass(frozen=True)
class ScheduledWindow:
    """Planned shoot dates of a task; start == end is a single-day shoot"""

    start: datetime
    end: datetime

    def overlapping(self, busy: Iterable[BusyInterval]) -> list[BusyInterval]:
        return [interval for interval in busy if interval.overlaps(self.start, self.end)]


def occupied_at(busy: Iterable[BusyInterval], instant: datetime) -> bool:
    """True if a reservation is in progress at ``instant`` (zero-width instant check)"""
    return any(interval.overlaps(instant, instant) for interval in busy)


def sort_intervals(busy: Iterable[BusyInterval]) -> list[BusyInterval]:
    return sorted(busy, key=lambda interval: (interval.start, interval.end))
