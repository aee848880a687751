# survey_api/models/response.py
import uuid

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from survey_api.db.base_class import Base
from survey_api.db.types import JSONType, utcnow


class SurveyResponse(Base):
    """Un envío completo de un encuestado."""
    __tablename__ = "survey_responses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    survey_id = Column(Uuid(as_uuid=True), ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    assignment_id = Column(
        Uuid(as_uuid=True), ForeignKey("survey_assignments.id", ondelete="SET NULL"), nullable=True, index=True
    )

    employee_name = Column(String(200))
    employee_designation = Column(String(200))
    employee_department = Column(String(200), index=True)
    employee_supervisor = Column(String(200))
    employee_reports_to = Column(String(200))

    response_attempt = Column(Integer, nullable=False, default=1)
    is_refill = Column(Boolean, nullable=False, default=False)
    completion_time_minutes = Column(Float)
    submitted_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    survey = relationship("Survey", back_populates="responses")
    assignment = relationship("SurveyAssignment", back_populates="responses")
    answers = relationship("QuestionResponse", back_populates="survey_response", cascade="all, delete-orphan")


class QuestionResponse(Base):
    """
    Una respuesta a una pregunta. Solo una de las columnas *_response tiene
    valor, según response_type (text | number | array | object).
    """
    __tablename__ = "question_responses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    survey_response_id = Column(
        Uuid(as_uuid=True), ForeignKey("survey_responses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_id = Column(Uuid(as_uuid=True), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)

    response_type = Column(String(10), nullable=False)
    text_response = Column(Text)
    number_response = Column(Float)
    array_response = Column(JSONType)
    object_response = Column(JSONType)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    survey_response = relationship("SurveyResponse", back_populates="answers")
    question = relationship("Question", back_populates="responses")
