# survey_api/schemas/comments.py
from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

CommentType = Literal["general", "clarification", "feedback", "refill_request"]


class CommentCreateIn(BaseModel):
    # longitud y vacíos se validan en el servicio
    comment_text: str
    comment_type: CommentType = "general"
    recipient_id: Optional[UUID] = None
    assignment_id: Optional[UUID] = None
    parent_comment_id: Optional[UUID] = None


class CommentUpdateIn(BaseModel):
    comment_text: Optional[str] = None
    is_read: Optional[bool] = None


class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    survey_id: UUID
    assignment_id: Optional[UUID] = None
    user_id: UUID
    recipient_id: Optional[UUID] = None
    parent_comment_id: Optional[UUID] = None
    comment_text: str
    comment_type: str
    is_read: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
