"""Task service - Scheduling a shoot and snapshotting its conflict state"""

import logging
from datetime import date, datetime, time
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Task
from ...shared.exceptions import FeedFetchError
from ..availability.aggregator import resolve_ical_url
from ..availability.feed_client import ICalFeedClient
from ..availability.intervals import ScheduledWindow
from ..conflicts.detector import capture_creation_state
from .repository import TaskRepository
from .schemas import ScheduleShootRequest

logger = logging.getLogger(__name__)

SHOOTING_STAGE = "Shooting"
# Shoot days are stored at local noon so a single-day window still sits inside that day
SHOOT_TIME = time(12, 0)


def shoot_datetime(day: date) -> datetime:
    return datetime.combine(day, SHOOT_TIME)


class TaskService:
    """Service layer for task scheduling"""

    def __init__(self, db: Session, feed_client: Optional[ICalFeedClient] = None):
        self.db = db
        self.repo = TaskRepository()
        self.feed_client = feed_client or ICalFeedClient()

    def get_task(self, task_id: str) -> Task:
        task = self.repo.get_task(self.db, task_id)
        if not task:
            raise HTTPException(status_code=404, detail="Task not found")
        return task

    async def schedule_shoot(self, task_id: str, data: ScheduleShootRequest) -> Task:
        """
        Assign the shoot window, move the task to Shooting and, the first time, record
        whether the window already overlapped a reservation.
        """
        task = self.get_task(task_id)
        if task.archived:
            raise HTTPException(status_code=400, detail="Task is archived")

        window = ScheduledWindow(
            start=shoot_datetime(data.start), end=shoot_datetime(data.end or data.start)
        )
        updates = {
            "scheduled_start": window.start,
            "scheduled_end": window.end,
            "stage": SHOOTING_STAGE,
        }
        if data.scheduledByEmail is not None:
            updates["scheduled_by_email"] = data.scheduledByEmail
        if data.assignedPhotographerEmail is not None:
            updates["assigned_photographer_email"] = data.assignedPhotographerEmail

        if task.creation_conflict_fingerprint is None:
            updates.update(await self._creation_snapshot(task, window))

        logger.info(f"📸 Scheduling task {task.id}: {window.start.date()} → {window.end.date()}")
        return self.repo.update_task(self.db, task, **updates)

    async def _creation_snapshot(self, task: Task, window: ScheduledWindow) -> dict:
        # Best effort: without a readable calendar the task is scheduled without the flags
        ical_url = resolve_ical_url(task, self.repo.get_properties(self.db))
        if not ical_url:
            return {}
        try:
            busy = await self.feed_client.fetch_busy(ical_url)
        except FeedFetchError as e:
            logger.warning(f"⚠️ Could not snapshot conflicts for task {task.id}: {e}")
            return {}

        was_conflicted, fingerprint = capture_creation_state(task.id, window, busy)
        if was_conflicted:
            logger.info(f"Task {task.id} scheduled over an existing reservation")
        return {
            "scheduled_over_blocked_at_create": was_conflicted,
            "creation_conflict_fingerprint": fingerprint,
        }
