# survey_api/models/audit_question.py
import uuid

from sqlalchemy import (
    Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
)
from sqlalchemy.orm import relationship

from survey_api.db.base_class import Base
from survey_api.db.types import JSONType, utcnow


class AuditQuestion(Base):
    """Pregunta de revisión interna, solo para administradores."""
    __tablename__ = "audit_questions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    survey_id = Column(Uuid(as_uuid=True), ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False, index=True)
    section_id = Column(Uuid(as_uuid=True), ForeignKey("survey_sections.id", ondelete="SET NULL"), nullable=True)
    question_text = Column(Text, nullable=False)
    question_type = Column(String(20), nullable=False)
    category = Column(String(100))
    description = Column(Text)
    is_required = Column(Boolean, nullable=False, default=False)
    has_other_option = Column(Boolean, nullable=False, default=False)
    order_index = Column(Integer, nullable=False, default=0)
    created_by = Column(String(200))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    survey = relationship("Survey", back_populates="audit_questions")
    section = relationship("SurveySection")
    options = relationship(
        "AuditQuestionOption",
        back_populates="question",
        order_by="AuditQuestionOption.order_index",
        cascade="all, delete-orphan",
    )
    responses = relationship("AuditResponse", back_populates="question", cascade="all, delete-orphan")


class AuditQuestionOption(Base):
    __tablename__ = "audit_question_options"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    audit_question_id = Column(
        Uuid(as_uuid=True), ForeignKey("audit_questions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    option_text = Column(String(500), nullable=False)
    order_index = Column(Integer, nullable=False, default=0)

    question = relationship("AuditQuestion", back_populates="options")


class AuditResponse(Base):
    """Una respuesta de auditoría por (encuesta, pregunta); se sobrescribe al guardar."""
    __tablename__ = "audit_responses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    survey_id = Column(Uuid(as_uuid=True), ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False, index=True)
    audit_question_id = Column(
        Uuid(as_uuid=True), ForeignKey("audit_questions.id", ondelete="CASCADE"), nullable=False, index=True
    )

    response_type = Column(String(10), nullable=False)
    text_response = Column(Text)
    number_response = Column(Float)
    array_response = Column(JSONType)
    object_response = Column(JSONType)

    responded_by = Column(String(200), nullable=False, default="admin")
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint("survey_id", "audit_question_id", name="uq_audit_response_question"),
    )

    question = relationship("AuditQuestion", back_populates="responses")
