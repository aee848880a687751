# survey_api/api/v1/endpoints/admin_companies.py
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from survey_api.api.deps.auth import require_super_admin
from survey_api.models.user import User
from survey_api.schemas.companies import (
    CompanyCreateIn,
    CompanyOut,
    CompanyStatsOut,
    CompanyUpdateIn,
    PlatformStatsOut,
)
from survey_api.services import companies as company_service
from survey_api.services.audit import audit_log
from survey_api.services.store import SurveyStore, get_store

router = APIRouter(tags=["admin-companies"], dependencies=[Depends(require_super_admin)])


def _with_stats(store: SurveyStore, company) -> CompanyStatsOut:
    return CompanyStatsOut(
        **CompanyOut.model_validate(company).model_dump(),
        **company_service.company_stats(store, company),
    )


@router.get("/companies", response_model=List[CompanyStatsOut])
def list_companies(
    is_active: Optional[bool] = Query(default=None),
    store: SurveyStore = Depends(get_store),
):
    return [_with_stats(store, c) for c in store.list_companies(is_active=is_active)]


@router.get("/companies/{company_id}", response_model=CompanyStatsOut)
def get_company(company_id: UUID, store: SurveyStore = Depends(get_store)):
    return _with_stats(store, company_service.get_company(store, company_id))


@router.post("/companies", response_model=CompanyOut, status_code=201)
def create_company(
    payload: CompanyCreateIn,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_super_admin),
):
    with store.transaction():
        company = company_service.create_company(store, payload.model_dump())
        audit_log(store, user_id=admin.id, action="company.create",
                  payload={"company_id": company.id, "name": company.name}, request=request)
    store.refresh(company)
    return company


@router.put("/companies/{company_id}", response_model=CompanyOut)
def update_company(
    company_id: UUID,
    payload: CompanyUpdateIn,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_super_admin),
):
    changes = payload.model_dump(exclude_unset=True)
    with store.transaction():
        company = company_service.update_company(store, company_id, changes)
        audit_log(store, user_id=admin.id, action="company.update",
                  payload={"company_id": company_id, "changes": changes}, request=request)
    store.refresh(company)
    return company


@router.delete("/companies/{company_id}", response_model=CompanyOut)
def delete_company(
    company_id: UUID,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_super_admin),
):
    """Baja lógica: devuelve la empresa ya inactiva."""
    with store.transaction():
        company = company_service.delete_company(store, company_id)
        audit_log(store, user_id=admin.id, action="company.delete",
                  payload={"company_id": company_id}, request=request)
    store.refresh(company)
    return company


@router.get("/stats", response_model=PlatformStatsOut)
def platform_stats(store: SurveyStore = Depends(get_store)):
    return company_service.platform_stats(store)
