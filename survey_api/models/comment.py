# survey_api/models/comment.py
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from survey_api.db.base_class import Base
from survey_api.db.types import utcnow

COMMENT_TYPES = ("general", "clarification", "feedback", "refill_request")


class SurveyComment(Base):
    __tablename__ = "survey_comments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    survey_id = Column(Uuid(as_uuid=True), ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False, index=True)
    assignment_id = Column(
        Uuid(as_uuid=True), ForeignKey("survey_assignments.id", ondelete="SET NULL"), nullable=True, index=True
    )
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    parent_comment_id = Column(
        Uuid(as_uuid=True), ForeignKey("survey_comments.id", ondelete="CASCADE"), nullable=True
    )
    comment_text = Column(Text, nullable=False)
    comment_type = Column(String(20), nullable=False, default="general")
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    survey = relationship("Survey", back_populates="comments")
    author = relationship("User", foreign_keys=[user_id])
