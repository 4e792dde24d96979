"""Task domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, model_validator


class ScheduleShootRequest(BaseModel):
    """Schema for assigning the shoot dates of a task"""

    start: date
    end: Optional[date] = None  # Omitted for a single-day shoot
    scheduledByEmail: Optional[str] = None
    assignedPhotographerEmail: Optional[str] = None

    @model_validator(mode="after")
    def validate_range(self):
        if self.end is not None and self.end < self.start:
            raise ValueError("end must not be before start")
        return self


class TaskResponse(BaseModel):
    """Schema for task response"""

    id: str
    publicId: Optional[int] = None
    propertyName: Optional[str] = None
    stage: str
    icalUrl: Optional[str] = None
    scheduledStart: Optional[datetime] = None
    scheduledEnd: Optional[datetime] = None
    scheduledOverBlockedAtCreate: bool = False
    optedOutOfConflictAlerts: bool = False

    class Config:
        from_attributes = True
