# survey_api/schemas/companies.py
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

SubscriptionPlan = Literal["basic", "professional", "premium", "enterprise"]


class CompanyCreateIn(BaseModel):
    name: str = Field(min_length=2)
    domain: Optional[str] = None
    subscription_plan: SubscriptionPlan = "basic"
    max_users: int = Field(default=50, ge=1)
    max_surveys: int = Field(default=10, ge=1)


class CompanyUpdateIn(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2)
    domain: Optional[str] = None
    subscription_plan: Optional[SubscriptionPlan] = None
    max_users: Optional[int] = Field(default=None, ge=1)
    max_surveys: Optional[int] = Field(default=None, ge=1)
    is_active: Optional[bool] = None


class CompanyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    domain: Optional[str] = None
    subscription_plan: str
    max_users: int
    max_surveys: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CompanyStatsOut(CompanyOut):
    user_count: int = 0
    admin_count: int = 0
    survey_count: int = 0
    active_assignments: int = 0


# ---------- Estadísticas de plataforma ----------

class TotalActive(BaseModel):
    total: int
    active: int


class RecentCompany(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    created_at: Optional[datetime] = None


class RecentUser(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    company_id: Optional[UUID] = None
    created_at: Optional[datetime] = None


class RecentActivity(BaseModel):
    companies: List[RecentCompany] = Field(default_factory=list)
    users: List[RecentUser] = Field(default_factory=list)


class PlatformStatsOut(BaseModel):
    companies: TotalActive
    users: TotalActive
    surveys: TotalActive
    total_responses: int
    pending_issues: int
    recent_activity: RecentActivity
