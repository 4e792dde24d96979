"""
Gap Finder
Enumerates free windows of at least ``min_gap_days`` whole days on a property's calendar.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

from ...shared.exceptions import InvalidGapRequest
from .intervals import BusyInterval, sort_intervals

logger = logging.getLogger(__name__)

MIN_GAP_DAYS = 2
SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class Gap:
    """Free window [start, end); ``last_day`` is the inclusive end shown to users"""

    start: datetime
    end: datetime

    @property
    def days(self) -> int:
        return whole_days(self.start, self.end)

    @property
    def last_day(self) -> datetime:
        return self.end - timedelta(days=1)

    @property
    def label(self) -> str:
        return f"{_format_date(self.start)} - {_format_date(self.last_day)}"


def _format_date(value: datetime) -> str:
    return f"{value.strftime('%B')} {value.day}, {value.year}"


def whole_days(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // SECONDS_PER_DAY)


def validate_min_gap_days(min_gap_days: int) -> None:
    """Reject searches shorter than the minimum stay instead of clamping them"""
    if min_gap_days is None or min_gap_days < MIN_GAP_DAYS:
        raise InvalidGapRequest(f"Minimum gap must be at least {MIN_GAP_DAYS} days.")


def find_gaps(
    busy: Iterable[BusyInterval],
    horizon_start: datetime,
    horizon_end: datetime,
    min_gap_days: int,
) -> list[Gap]:
    """
    Sweep the sorted reservations with a monotonic pointer; every stretch between the
    pointer and the next check-in (or the horizon end) long enough is a gap.
    """
    validate_min_gap_days(min_gap_days)
    if horizon_end <= horizon_start:
        return []

    gaps: list[Gap] = []
    pointer = horizon_start

    def _consider(next_start: datetime) -> None:
        if pointer < next_start and whole_days(pointer, next_start) >= min_gap_days:
            gaps.append(Gap(start=pointer, end=next_start))

    for interval in sort_intervals(busy):
        if interval.start >= horizon_end:
            break
        _consider(interval.start)
        pointer = max(pointer, interval.end)

    # Synthetic trailing reservation closes the final gap at the horizon
    _consider(horizon_end)

    logger.debug(f"Gap search found {len(gaps)} gaps of >= {min_gap_days} days")
    return gaps
