# survey_api/schemas/responses.py
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class EmployeeInfoIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    designation: Optional[str] = None
    department: Optional[str] = None
    supervisor: Optional[str] = None
    reports_to: Optional[str] = Field(default=None, alias="reportsTo")


class SubmitResponseIn(BaseModel):
    employee_info: Optional[EmployeeInfoIn] = None
    # question_id -> valor; la forma se valida en el servicio
    answers: Any = Field(default=None, validation_alias=AliasChoices("answers", "responses"))
    completion_time_minutes: Optional[float] = Field(default=None, ge=0)


class SubmitResponseOut(BaseModel):
    message: str = "Respuesta registrada"
    response_id: UUID
    survey_title: str


class RefillIn(BaseModel):
    answers: Any = Field(default=None, validation_alias=AliasChoices("answers", "responses"))
    completion_time_minutes: Optional[float] = Field(default=None, ge=0)
    reason: Optional[str] = Field(default=None, max_length=2000)


class AnswerOut(BaseModel):
    question_id: UUID
    response_type: str
    value: Any = None


class SurveyResponseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    survey_id: UUID
    user_id: Optional[UUID] = None
    assignment_id: Optional[UUID] = None
    employee_name: Optional[str] = None
    employee_designation: Optional[str] = None
    employee_department: Optional[str] = None
    employee_supervisor: Optional[str] = None
    employee_reports_to: Optional[str] = None
    response_attempt: int
    is_refill: bool
    completion_time_minutes: Optional[float] = None
    submitted_at: datetime
    answers: List[AnswerOut] = Field(default_factory=list)
