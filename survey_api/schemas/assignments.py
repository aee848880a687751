# survey_api/schemas/assignments.py
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

AssignmentStatus = Literal["pending", "in_progress", "completed", "refill_requested"]


class AssignmentCreateIn(BaseModel):
    survey_id: UUID
    user_ids: List[UUID] = Field(min_length=1)
    due_date: Optional[datetime] = None
    notes: Optional[str] = None


class AssignmentUpdateIn(BaseModel):
    status: Optional[AssignmentStatus] = None
    notes: Optional[str] = None
    due_date: Optional[datetime] = None


class RefillRequestIn(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=2000)


class AssignmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    survey_id: UUID
    user_id: UUID
    assigned_by: Optional[UUID] = None
    status: str
    notes: Optional[str] = None
    due_date: Optional[datetime] = None
    refill_count: int
    assigned_at: datetime
    completed_at: Optional[datetime] = None
