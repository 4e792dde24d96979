"""Task router - FastAPI endpoints for task scheduling"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import Task
from .schemas import ScheduleShootRequest, TaskResponse
from .service import TaskService

router = APIRouter(prefix="/tasks", tags=["Tasks"])


def get_task_service(db: Session = Depends(get_db)) -> TaskService:
    """Dependency injection for TaskService"""
    return TaskService(db)


def to_response(task: Task) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        publicId=task.public_id,
        propertyName=task.property_name,
        stage=task.stage,
        icalUrl=task.ical_url,
        scheduledStart=task.scheduled_start,
        scheduledEnd=task.scheduled_end,
        scheduledOverBlockedAtCreate=bool(task.scheduled_over_blocked_at_create),
        optedOutOfConflictAlerts=bool(task.opted_out_of_conflict_alerts),
    )


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, service: TaskService = Depends(get_task_service)):
    """Get a task with its scheduling and alert state"""
    return to_response(service.get_task(task_id))


@router.patch("/{task_id}/schedule", response_model=TaskResponse)
async def schedule_shoot(
    task_id: str,
    data: ScheduleShootRequest,
    service: TaskService = Depends(get_task_service),
):
    """Assign the shoot dates and move the task to Shooting"""
    task = await service.schedule_shoot(task_id, data)
    return to_response(task)
