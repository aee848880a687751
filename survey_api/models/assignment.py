# survey_api/models/assignment.py
import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from survey_api.db.base_class import Base
from survey_api.db.types import utcnow

ASSIGNMENT_STATUSES = ("pending", "in_progress", "completed", "refill_requested")

# estado actual -> estados a los que puede pasar
STATUS_TRANSITIONS = {
    "pending": ("in_progress", "completed"),
    "in_progress": ("completed", "pending"),
    "completed": ("refill_requested",),
    "refill_requested": ("pending", "completed"),
}

# asignaciones que todavía esperan un envío del usuario
OPEN_STATUSES = ("pending", "in_progress", "refill_requested")


class SurveyAssignment(Base):
    """Encuesta asignada a un usuario concreto por un administrador."""
    __tablename__ = "survey_assignments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    survey_id = Column(Uuid(as_uuid=True), ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    assigned_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    status = Column(String(20), nullable=False, default="pending")
    notes = Column(Text)
    due_date = Column(DateTime(timezone=True))
    refill_count = Column(Integer, nullable=False, default=0)
    assigned_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    completed_at = Column(DateTime(timezone=True))

    survey = relationship("Survey", back_populates="assignments")
    user = relationship("User", foreign_keys=[user_id])
    assigner = relationship("User", foreign_keys=[assigned_by])
    responses = relationship("SurveyResponse", back_populates="assignment")
