"""Availability domain schemas - Pydantic models for responses"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel


class TaskSummary(BaseModel):
    """Minimal task card shown in availability views"""

    id: str
    publicId: Optional[int] = None
    propertyName: Optional[str] = None
    unitCode: Optional[str] = None
    mediaType: Optional[str] = None
    scheduledStart: Optional[datetime] = None
    scheduledEnd: Optional[datetime] = None

    @classmethod
    def from_task(cls, task) -> "TaskSummary":
        return cls(
            id=task.id,
            publicId=task.public_id,
            propertyName=task.property_name,
            unitCode=task.unit_code,
            mediaType=task.media_type,
            scheduledStart=task.scheduled_start,
            scheduledEnd=task.scheduled_end,
        )


class AvailabilityOccupantResponse(BaseModel):
    task: TaskSummary
    isTurn: bool
    isChangeover: bool = False


class AvailabilityDayResponse(BaseModel):
    date: date
    label: str
    hasTurn: bool
    tasks: list[AvailabilityOccupantResponse]


class AvailabilityResponse(BaseModel):
    days: list[AvailabilityDayResponse]
    tasksWithoutIcal: list[TaskSummary]


class GapResponse(BaseModel):
    start: date
    end: date  # Inclusive last free day
    days: int
    label: str


class GapSearchResponse(BaseModel):
    icalUrl: str
    minGapDays: int
    horizonStart: date
    horizonEnd: date
    gaps: list[GapResponse]
