"""Task repository - Database operations for task scheduling"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Property, Task


class TaskRepository:
    """Repository for task database operations"""

    @staticmethod
    def get_task(db: Session, task_id: str) -> Optional[Task]:
        return db.query(Task).filter(Task.id == task_id).first()

    @staticmethod
    def get_properties(db: Session) -> list[Property]:
        return db.query(Property).order_by(Property.id).all()

    @staticmethod
    def update_task(db: Session, task: Task, **updates) -> Task:
        """Update a task with provided fields"""
        for key, value in updates.items():
            if hasattr(task, key):
                setattr(task, key, value)

        db.commit()
        db.refresh(task)
        return task
