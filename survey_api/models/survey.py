# survey_api/models/survey.py
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from survey_api.db.base_class import Base
from survey_api.db.types import utcnow

QUESTION_TYPES = ("text", "select", "radio", "checkbox", "rating", "yes_no")


class Survey(Base):
    __tablename__ = "surveys"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(Uuid(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"), nullable=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)
    is_published = Column(Boolean, nullable=False, default=False)
    allows_refill = Column(Boolean, nullable=False, default=False)
    start_date = Column(DateTime(timezone=True))
    end_date = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    company = relationship("Company", back_populates="surveys")
    sections = relationship(
        "SurveySection",
        back_populates="survey",
        order_by="SurveySection.order_index",
        cascade="all, delete-orphan",
    )
    responses = relationship("SurveyResponse", back_populates="survey", cascade="all, delete-orphan")
    audit_questions = relationship("AuditQuestion", back_populates="survey", cascade="all, delete-orphan")
    assignments = relationship("SurveyAssignment", back_populates="survey", cascade="all, delete-orphan")
    comments = relationship("SurveyComment", back_populates="survey", cascade="all, delete-orphan")


class SurveySection(Base):
    __tablename__ = "survey_sections"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    survey_id = Column(Uuid(as_uuid=True), ForeignKey("surveys.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    # orden de despliegue; la BD no exige unicidad por encuesta
    order_index = Column(Integer, nullable=False, default=0)

    survey = relationship("Survey", back_populates="sections")
    questions = relationship(
        "Question",
        back_populates="section",
        order_by="Question.order_index",
        cascade="all, delete-orphan",
    )


class Question(Base):
    __tablename__ = "questions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    section_id = Column(Uuid(as_uuid=True), ForeignKey("survey_sections.id", ondelete="CASCADE"), nullable=False, index=True)
    question_text = Column(Text, nullable=False)
    question_type = Column(String(20), nullable=False)  # ver QUESTION_TYPES
    is_required = Column(Boolean, nullable=False, default=False)
    has_other_option = Column(Boolean, nullable=False, default=False)
    order_index = Column(Integer, nullable=False, default=0)

    section = relationship("SurveySection", back_populates="questions")
    options = relationship(
        "QuestionOption",
        back_populates="question",
        order_by="QuestionOption.order_index",
        cascade="all, delete-orphan",
    )
    responses = relationship("QuestionResponse", back_populates="question", cascade="all, delete-orphan")


class QuestionOption(Base):
    __tablename__ = "question_options"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    question_id = Column(Uuid(as_uuid=True), ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    option_text = Column(String(500), nullable=False)
    order_index = Column(Integer, nullable=False, default=0)

    question = relationship("Question", back_populates="options")
