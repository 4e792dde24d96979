import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_task_id():
    """Generate an opaque task ID (the task store's document key)"""
    return uuid.uuid4().hex


class Property(Base):
    """Property directory entry - maps unit codes and names to booking calendars"""

    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True)
    unit_code = Column(String(100), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    ical_url = Column(Text, nullable=True)  # Published iCal feed of the booking channel
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    tasks = relationship("Task", back_populates="property")


class Task(Base):
    """Media production task (photos / 3D tour) for a single property"""

    __tablename__ = "tasks"

    id = Column(String(64), primary_key=True, default=generate_task_id)
    public_id = Column(Integer, unique=True, nullable=True, index=True)  # Human-facing number
    property_id = Column(Integer, ForeignKey("properties.id"), nullable=True)
    property_name = Column(String(255), nullable=True)
    unit_code = Column(String(100), nullable=True)
    update_type = Column(String(100), nullable=True)
    media_type = Column(String(50), nullable=True)  # photos, 3d_tours
    stage = Column(String(50), default="Scheduling", nullable=False, index=True)
    archived = Column(Boolean, default=False, nullable=False)

    # Booking calendar of the property; falls back to the property directory when null
    ical_url = Column(Text, nullable=True)

    # Scheduled shoot window (half-open, start == end means a single-day shoot)
    scheduled_start = Column(DateTime, nullable=True)
    scheduled_end = Column(DateTime, nullable=True)
    scheduled_by_email = Column(String(255), nullable=True)
    assigned_photographer_email = Column(String(255), nullable=True)

    # Reservation conflict alert state
    scheduled_over_blocked_at_create = Column(
        Boolean, default=False, nullable=False
    )  # Conflict already existed when the shoot was scheduled
    creation_conflict_fingerprint = Column(String(64), nullable=True)  # Write-once
    last_conflict_fingerprint = Column(String(64), nullable=True)
    last_conflict_alert_at = Column(DateTime, nullable=True)
    opted_out_of_conflict_alerts = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    property = relationship("Property", back_populates="tasks")


class NotificationSettings(Base):
    """Single-row admin notification settings"""

    __tablename__ = "notification_settings"

    id = Column(Integer, primary_key=True)
    debug_override_enabled = Column(Boolean, default=False, nullable=False)
    admin_debug_email = Column(String(255), nullable=True)
