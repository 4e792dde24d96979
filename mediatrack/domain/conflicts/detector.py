"""
Reservation Conflict Detector
Decides whether a task's scheduled shoot overlaps a reservation, and whether that
conflict is new enough to alert about.

The fingerprint summarises the scheduled window plus the set of reservations overlapping
it. Alerts fire only when the fingerprint differs from the last one notified, and, for
tasks that were scheduled over an existing reservation, only once the conflict set
differs from the one known at scheduling time.
"""

import hashlib
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional

from ..availability.intervals import BusyInterval, ScheduledWindow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskConflictState:
    """Persisted per-task fields the detector reads"""

    task_id: str
    window: Optional[ScheduledWindow]
    last_fingerprint: Optional[str] = None
    creation_fingerprint: Optional[str] = None
    was_conflicted_at_creation: bool = False
    opted_out: bool = False


@dataclass(frozen=True)
class ConflictDecision:
    has_conflict: bool
    fingerprint: Optional[str]
    should_notify: bool
    overlaps: list[BusyInterval] = field(default_factory=list)


NO_CONFLICT = ConflictDecision(has_conflict=False, fingerprint=None, should_notify=False)


def build_fingerprint(
    task_id: str,
    start: datetime,
    end: datetime,
    overlaps: Iterable[BusyInterval],
) -> str:
    """
    SHA-256 over the task id, the window dates and the sorted overlap dates.

    Date granularity only; overlaps are sorted so feed ordering never changes the digest.
    """
    parts = sorted(
        f"{interval.start.date().isoformat()}_{interval.end.date().isoformat()}"
        for interval in overlaps
    )
    base = "|".join([str(task_id), start.date().isoformat(), end.date().isoformat(), *parts])
    return hashlib.sha256(base.encode("utf-8")).hexdigest()


def window_is_past(window: ScheduledWindow, now: datetime) -> bool:
    """A window that ended before today's midnight can no longer conflict"""
    today = datetime.combine(now.date(), datetime.min.time())
    return window.end < today


def should_notify(
    fingerprint: str,
    last_fingerprint: Optional[str],
    creation_fingerprint: Optional[str],
    was_conflicted_at_creation: bool,
) -> bool:
    """Notification policy for a conflicting task"""
    is_new_since_last = last_fingerprint is None or fingerprint != last_fingerprint
    is_new_since_creation = creation_fingerprint is None or fingerprint != creation_fingerprint
    return is_new_since_last and (not was_conflicted_at_creation or is_new_since_creation)


def evaluate(state: TaskConflictState, busy: Iterable[BusyInterval], now: datetime) -> ConflictDecision:
    """Evaluate one task against its property's current reservations"""
    window = state.window
    if window is None or window_is_past(window, now):
        return NO_CONFLICT

    overlapping = window.overlapping(busy)
    if not overlapping:
        return NO_CONFLICT

    fingerprint = build_fingerprint(state.task_id, window.start, window.end, overlapping)
    notify = should_notify(
        fingerprint,
        state.last_fingerprint,
        state.creation_fingerprint,
        state.was_conflicted_at_creation,
    )
    return ConflictDecision(
        has_conflict=True,
        fingerprint=fingerprint,
        should_notify=notify,
        overlaps=overlapping,
    )


def capture_creation_state(
    task_id: str, window: ScheduledWindow, busy: Iterable[BusyInterval]
) -> tuple[bool, str]:
    """
    Conflict snapshot taken when a shoot is scheduled.

    Returns (was_conflicted, fingerprint); the fingerprint is computed even without
    overlaps so a later conflict always differs from it.
    """
    overlapping = window.overlapping(busy)
    fingerprint = build_fingerprint(task_id, window.start, window.end, overlapping)
    return bool(overlapping), fingerprint
