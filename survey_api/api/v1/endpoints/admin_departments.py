# survey_api/api/v1/endpoints/admin_departments.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response

from survey_api.api.deps.auth import require_admin
from survey_api.api.deps.tenant import current_scope, department_in_scope
from survey_api.models.user import User
from survey_api.schemas.admin import DepartmentCreateIn, DepartmentOut, DepartmentUpdateIn
from survey_api.services import users as user_service
from survey_api.services.audit import audit_log
from survey_api.services.store import SurveyStore, get_store
from survey_api.services.tenancy import CompanyScope

router = APIRouter(prefix="/departments", tags=["admin-departments"], dependencies=[Depends(require_admin)])


@router.get("", response_model=List[DepartmentOut])
def list_departments(store: SurveyStore = Depends(get_store), scope: CompanyScope = Depends(current_scope)):
    return store.list_departments(active_only=False, scope=scope)


@router.post("", response_model=DepartmentOut, status_code=201)
def create_department(
    payload: DepartmentCreateIn,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
    scope: CompanyScope = Depends(current_scope),
):
    data = payload.model_dump()
    data["company_id"] = scope.owner_for(data.get("company_id"))
    with store.transaction():
        dept = user_service.create_department(store, data)
        audit_log(store, user_id=admin.id, action="department.create",
                  payload={"department_id": dept.id, "name": dept.name}, request=request)
    store.refresh(dept)
    return dept


@router.put(
    "/{department_id}", response_model=DepartmentOut,
    dependencies=[Depends(department_in_scope)],
)
def update_department(
    department_id: UUID,
    payload: DepartmentUpdateIn,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
):
    changes = payload.model_dump(exclude_unset=True)
    with store.transaction():
        dept = user_service.update_department(store, department_id, changes)
        audit_log(store, user_id=admin.id, action="department.update",
                  payload={"department_id": department_id, "changes": changes}, request=request)
    store.refresh(dept)
    return dept


@router.delete("/{department_id}", status_code=204, dependencies=[Depends(department_in_scope)])
def delete_department(
    department_id: UUID,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
):
    with store.transaction():
        user_service.delete_department(store, department_id)
        audit_log(store, user_id=admin.id, action="department.delete",
                  payload={"department_id": department_id}, request=request)
    return Response(status_code=204)
