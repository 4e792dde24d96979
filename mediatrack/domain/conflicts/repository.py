"""Conflict repository - Read/write of per-task conflict alert state"""

from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...models import NotificationSettings, Task
from ...shared.exceptions import PersistenceConflict
from ..availability.aggregator import task_window
from .detector import TaskConflictState

SHOOTING_STAGE = "Shooting"


def state_from_task(task: Task) -> TaskConflictState:
    return TaskConflictState(
        task_id=task.id,
        window=task_window(task),
        last_fingerprint=task.last_conflict_fingerprint,
        creation_fingerprint=task.creation_conflict_fingerprint,
        was_conflicted_at_creation=bool(task.scheduled_over_blocked_at_create),
        opted_out=bool(task.opted_out_of_conflict_alerts),
    )


class TaskConflictStateRepository:
    """Narrow read-modify-write interface over the task store"""

    def __init__(self, db: Session):
        self.db = db

    def get_candidate_tasks(self) -> list[Task]:
        """Non-archived Shooting tasks with a scheduled window"""
        return (
            self.db.query(Task)
            .filter(
                Task.stage == SHOOTING_STAGE,
                Task.archived.is_(False),
                Task.scheduled_start.isnot(None) | Task.scheduled_end.isnot(None),
            )
            .order_by(Task.id)
            .all()
        )

    def get_task(self, task_id: str) -> Optional[Task]:
        return self.db.query(Task).filter(Task.id == task_id).first()

    def get_task_conflict_state(self, task_id: str) -> Optional[TaskConflictState]:
        task = self.get_task(task_id)
        return state_from_task(task) if task else None

    def set_task_conflict_state(
        self, task_id: str, fingerprint: str, alerted_at: Optional[datetime] = None
    ) -> None:
        """Record the fingerprint that was just notified; raises PersistenceConflict"""
        try:
            task = self.get_task(task_id)
            if not task:
                raise PersistenceConflict(task_id, "task no longer exists")
            task.last_conflict_fingerprint = fingerprint
            task.last_conflict_alert_at = alerted_at or datetime.utcnow()
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceConflict(task_id, str(e)) from e

    def set_opted_out(self, task_id: str) -> bool:
        """Turn off conflict alerts for a task; False if the task does not exist"""
        task = self.get_task(task_id)
        if not task:
            return False
        task.opted_out_of_conflict_alerts = True
        self.db.commit()
        return True

    def get_debug_override_email(self) -> Optional[str]:
        """Admin debug address when the notification override is enabled"""
        settings = self.db.query(NotificationSettings).first()
        if settings and settings.debug_override_enabled:
            email = (settings.admin_debug_email or "").strip()
            return email or None
        return None
