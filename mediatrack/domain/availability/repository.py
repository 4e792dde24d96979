"""Availability repository - Database reads for tasks and the property directory"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Property, Task


class AvailabilityRepository:
    """Repository for availability-related database reads"""

    @staticmethod
    def get_active_scheduled_tasks(db: Session) -> list[Task]:
        """Non-archived tasks with shoot dates, whatever their workflow stage"""
        return (
            db.query(Task)
            .filter(
                Task.archived.is_(False),
                Task.scheduled_start.isnot(None) | Task.scheduled_end.isnot(None),
            )
            .order_by(Task.id)
            .all()
        )

    @staticmethod
    def get_properties(db: Session) -> list[Property]:
        return db.query(Property).order_by(Property.id).all()

    @staticmethod
    def get_property(db: Session, property_id: int) -> Optional[Property]:
        return db.query(Property).filter(Property.id == property_id).first()
