# survey_api/schemas/auth.py
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr


class LoginIn(BaseModel):
    email: EmailStr
    password: str


class MeOut(BaseModel):
    # Permite construir desde objetos SQLAlchemy (Pydantic v2)
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: EmailStr
    name: Optional[str] = None
    role: str
    department_id: Optional[UUID] = None
    company_id: Optional[UUID] = None


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: MeOut
