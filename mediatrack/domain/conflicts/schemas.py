"""Conflict domain schemas - Pydantic models for responses"""

from typing import Optional

from pydantic import BaseModel


class ConflictOutcomeResponse(BaseModel):
    taskId: str
    status: str
    fingerprint: Optional[str] = None
    error: Optional[str] = None


class ConflictRunResponse(BaseModel):
    message: str
    checked: int
    notified: int
    failed: int
    outcomes: list[ConflictOutcomeResponse]
