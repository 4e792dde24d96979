"""
Availability Aggregator
Builds the per-day view of which tasks' properties can be shot on which days.

For a task and a day d = [d, d + 1 day):
- the task is only considered on days overlapping its scheduled window, taken as whole dates
- the property is blocked if a reservation is in progress at d's opening instant
- d is a turn if a reservation begins on d (check-in day)
- d is a changeover if two reservations abut on d (one checks out, the next checks in)
The task occupies d when the property is not blocked, or when d is a turn.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Optional, Sequence, Union

from ...shared.exceptions import FeedFetchError
from .feed_client import ICalFeedClient
from .intervals import BusyInterval, ScheduledWindow, occupied_at, overlaps

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)
DateLike = Union[date, datetime]


@dataclass(frozen=True)
class AvailabilityOccupant:
    task: Any
    is_turn: bool
    is_changeover: bool = False


@dataclass
class AvailabilityDay:
    date: date
    occupants: list[AvailabilityOccupant] = field(default_factory=list)

    @property
    def has_turn(self) -> bool:
        return any(occupant.is_turn for occupant in self.occupants)


@dataclass
class AvailabilityResult:
    days: list[AvailabilityDay]
    tasks_without_ical: list[Any]


def _as_date(value: DateLike) -> date:
    return value.date() if isinstance(value, datetime) else value


def _midnight(day: date) -> datetime:
    return datetime.combine(day, datetime.min.time())


def _normalize(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def resolve_ical_url(task: Any, properties: Iterable[Any] = ()) -> Optional[str]:
    """
    Effective feed URL of a task: its own ical_url, else the property directory entry
    whose unit code or name matches the task's unit code / property name.
    """
    if getattr(task, "ical_url", None):
        return task.ical_url

    unit_code = _normalize(getattr(task, "unit_code", None) or getattr(task, "property_name", None))
    property_name = _normalize(getattr(task, "property_name", None))
    if not unit_code and not property_name:
        return None

    for prop in properties:
        candidates = {_normalize(prop.unit_code), _normalize(prop.name)} - {""}
        if candidates & ({unit_code, property_name} - {""}) and prop.ical_url:
            return prop.ical_url
    return None


def task_window(task: Any) -> Optional[ScheduledWindow]:
    start = getattr(task, "scheduled_start", None)
    end = getattr(task, "scheduled_end", None)
    if start is None and end is None:
        return None
    # A half-filled window collapses to a single-day shoot
    start = start or end
    end = end or start
    if end < start:
        return None
    return ScheduledWindow(start=start, end=end)


def day_flags(busy: Sequence[BusyInterval], day: date) -> tuple[bool, bool, bool]:
    """Return (blocked, is_turn, is_changeover) for one property on one day"""
    day_start = _midnight(day)
    day_end = day_start + ONE_DAY

    blocked = occupied_at(busy, day_start)
    # Reservations that start, run through, or end on this day (end-of-day checkouts included)
    touching = [
        interval
        for interval in busy
        if overlaps(interval.start, interval.end + ONE_DAY, day_start, day_end)
    ]
    is_turn = any(interval.start.date() == day for interval in touching)
    is_changeover = any(
        first is not second and first.end.date() == day and first.abuts(second)
        for first in touching
        for second in touching
    )
    return blocked, is_turn or is_changeover, is_changeover


def build_availability(
    tasks: Iterable[Any],
    range_start: DateLike,
    range_end: DateLike,
    not_before: DateLike,
    feeds: dict[str, Optional[list[BusyInterval]]],
    properties: Iterable[Any] = (),
) -> AvailabilityResult:
    """
    Pure aggregation over already-fetched feeds.

    ``feeds`` maps feed URL to busy intervals, or None when the feed was unavailable.
    Days cover [max(range_start, not_before), range_end).
    """
    properties = list(properties)
    first_day = max(_as_date(range_start), _as_date(not_before))
    last_day = _as_date(range_end)

    days: list[AvailabilityDay] = []
    current = first_day
    while current < last_day:
        days.append(AvailabilityDay(date=current))
        current += ONE_DAY

    tasks_without_ical: list[Any] = []
    placed: list[tuple[Any, ScheduledWindow, list[BusyInterval]]] = []
    for task in tasks:
        url = resolve_ical_url(task, properties)
        window = task_window(task)
        if not url or window is None:
            tasks_without_ical.append(task)
            continue
        busy = feeds.get(url)
        if busy is None:
            # Feed unavailable this run: surface with the calendar-less tasks
            tasks_without_ical.append(task)
            continue
        placed.append((task, window, busy))

    placed.sort(key=lambda item: str(item[0].id))

    for day in days:
        day_start = _midnight(day.date)
        for task, window, busy in placed:
            presence_start = _midnight(window.start.date())
            presence_end = _midnight(window.end.date()) + ONE_DAY
            if not overlaps(presence_start, presence_end, day_start, day_start + ONE_DAY):
                continue
            blocked, is_turn, is_changeover = day_flags(busy, day.date)
            if not blocked or is_turn:
                day.occupants.append(
                    AvailabilityOccupant(task=task, is_turn=is_turn, is_changeover=is_changeover)
                )

    return AvailabilityResult(days=days, tasks_without_ical=tasks_without_ical)


async def fetch_feeds(
    urls: Iterable[str],
    feed_client: ICalFeedClient,
    max_concurrency: int = 10,
) -> dict[str, Optional[list[BusyInterval]]]:
    """Fetch each distinct feed once; unavailable feeds map to None"""
    unique_urls = sorted(set(urls))
    semaphore = asyncio.Semaphore(max_concurrency)

    async def _fetch(url: str) -> Optional[list[BusyInterval]]:
        async with semaphore:
            try:
                return await feed_client.fetch_busy(url)
            except FeedFetchError as e:
                logger.warning(f"⚠️ Feed unavailable, tasks on it listed without calendar: {e}")
                return None

    results = await asyncio.gather(*(_fetch(url) for url in unique_urls))
    return dict(zip(unique_urls, results))


async def compute_availability(
    tasks: Sequence[Any],
    range_start: DateLike,
    range_end: DateLike,
    not_before: DateLike,
    feed_client: Optional[ICalFeedClient] = None,
    properties: Iterable[Any] = (),
    max_concurrency: int = 10,
) -> AvailabilityResult:
    """Fetch every task's feed and build the per-day availability view"""
    properties = list(properties)
    feed_client = feed_client or ICalFeedClient()

    urls = []
    for task in tasks:
        url = resolve_ical_url(task, properties)
        if url and task_window(task) is not None:
            urls.append(url)

    feeds = await fetch_feeds(urls, feed_client, max_concurrency=max_concurrency)
    return build_availability(tasks, range_start, range_end, not_before, feeds, properties)


async def weekly_availability(
    tasks: Sequence[Any],
    now: datetime,
    feed_client: Optional[ICalFeedClient] = None,
    properties: Iterable[Any] = (),
) -> AvailabilityResult:
    """Seven-day view starting today"""
    today = now.date()
    return await compute_availability(
        tasks,
        range_start=today,
        range_end=today + timedelta(days=7),
        not_before=today,
        feed_client=feed_client,
        properties=properties,
    )
