# survey_api/schemas/surveys.py
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

QuestionType = Literal["text", "select", "radio", "checkbox", "rating", "yes_no"]


# ---------- Entradas ----------

class SurveyCreateIn(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    is_active: bool = True
    is_published: bool = False
    allows_refill: bool = False
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    # solo la respeta un super_admin; el resto crea en su empresa
    company_id: Optional[UUID] = None


class SurveyUpdateIn(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    is_active: Optional[bool] = None
    is_published: Optional[bool] = None
    allows_refill: Optional[bool] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class SectionCreateIn(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    order_index: int = 0


class SectionUpdateIn(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    order_index: Optional[int] = None


class OptionCreateIn(BaseModel):
    option_text: str = Field(min_length=1)
    order_index: int = 0


class OptionUpdateIn(BaseModel):
    option_text: Optional[str] = Field(default=None, min_length=1)
    order_index: Optional[int] = None


class QuestionCreateIn(BaseModel):
    question_text: str = Field(min_length=1)
    question_type: QuestionType
    is_required: bool = False
    has_other_option: bool = False
    order_index: int = 0
    options: List[OptionCreateIn] = Field(default_factory=list)


class QuestionUpdateIn(BaseModel):
    question_text: Optional[str] = Field(default=None, min_length=1)
    question_type: Optional[QuestionType] = None
    is_required: Optional[bool] = None
    has_other_option: Optional[bool] = None
    order_index: Optional[int] = None


# ---------- Salidas ----------

class OptionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    question_id: UUID
    option_text: str
    order_index: int


class QuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    section_id: UUID
    question_text: str
    question_type: str
    is_required: bool
    has_other_option: bool
    order_index: int
    options: List[OptionOut] = Field(default_factory=list)


class SectionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    survey_id: UUID
    title: str
    description: Optional[str] = None
    order_index: int


class SectionDetailOut(SectionOut):
    questions: List[QuestionOut] = Field(default_factory=list)


class SurveyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: Optional[UUID] = None
    title: str
    description: Optional[str] = None
    is_active: bool
    is_published: bool
    allows_refill: bool
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class SurveyDetailOut(SurveyOut):
    sections: List[SectionDetailOut] = Field(default_factory=list)
