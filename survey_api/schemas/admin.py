# survey_api/schemas/admin.py
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Literal, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field

from survey_api.schemas.surveys import QuestionType


# ---------- Auditoría ----------

class AuditQuestionCreateIn(BaseModel):
    section_id: Optional[UUID] = None
    question_text: str = Field(min_length=1)
    question_type: QuestionType
    category: Optional[str] = None
    description: Optional[str] = None
    is_required: bool = False
    has_other_option: bool = False
    order_index: int = 0
    options: List[str] = Field(default_factory=list)
    created_by: Optional[str] = None


class AuditOptionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    option_text: str
    order_index: int


class AuditQuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    survey_id: UUID
    section_id: Optional[UUID] = None
    question_text: str
    question_type: str
    category: Optional[str] = None
    description: Optional[str] = None
    is_required: bool
    has_other_option: bool
    order_index: int
    options: List[AuditOptionOut] = Field(default_factory=list)


class AuditSectionGroupOut(BaseModel):
    section_id: Optional[UUID] = None
    section_title: str
    order_index: int
    questions: List[AuditQuestionOut] = Field(default_factory=list)


class AuditQuestionsOut(BaseModel):
    sections: List[AuditSectionGroupOut] = Field(default_factory=list)
    total_questions: int


class AuditResponsesIn(BaseModel):
    answers: Any = Field(default=None, validation_alias=AliasChoices("answers", "responses"))
    responded_by: Optional[str] = None


class AuditResponseOut(BaseModel):
    audit_question_id: UUID
    question_text: str
    question_type: str
    category: Optional[str] = None
    response_type: str
    value: Any = None
    responded_by: str
    updated_at: Optional[datetime] = None


class AuditResponsesSavedOut(BaseModel):
    message: str = "Respuestas de auditoría guardadas"
    saved: int
    cleared: int = 0


# ---------- Departamentos ----------

class DepartmentCreateIn(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    company_id: Optional[UUID] = None


class DepartmentUpdateIn(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class DepartmentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: Optional[UUID] = None
    name: str
    description: Optional[str] = None
    is_active: bool


# ---------- Usuarios ----------

class UserCreateIn(BaseModel):
    email: EmailStr
    name: Optional[str] = None
    password: str = Field(min_length=8)
    role: Literal["employee", "admin", "super_admin"] = "employee"
    department_id: Optional[UUID] = None
    company_id: Optional[UUID] = None


class UserUpdateIn(BaseModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=8)
    role: Optional[Literal["employee", "admin", "super_admin"]] = None
    department_id: Optional[UUID] = None
    company_id: Optional[UUID] = None
    is_active: Optional[bool] = None


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: EmailStr
    name: Optional[str] = None
    role: str
    department_id: Optional[UUID] = None
    company_id: Optional[UUID] = None
    is_active: bool
    last_login: Optional[datetime] = None
