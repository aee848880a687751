# survey_api/api/v1/endpoints/admin_assignments.py
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response

from survey_api.api.deps.auth import require_admin
from survey_api.api.deps.tenant import current_scope
from survey_api.models.user import User
from survey_api.schemas.assignments import (
    AssignmentCreateIn,
    AssignmentOut,
    AssignmentStatus,
    AssignmentUpdateIn,
)
from survey_api.services import assignments as assignment_service
from survey_api.services.audit import audit_log
from survey_api.services.store import SurveyStore, get_store
from survey_api.services.tenancy import CompanyScope

router = APIRouter(prefix="/assignments", tags=["admin-assignments"], dependencies=[Depends(require_admin)])


@router.get("", response_model=List[AssignmentOut])
def list_assignments(
    survey_id: Optional[UUID] = Query(default=None),
    user_id: Optional[UUID] = Query(default=None),
    status: Optional[AssignmentStatus] = Query(default=None),
    store: SurveyStore = Depends(get_store),
    scope: CompanyScope = Depends(current_scope),
):
    return store.list_assignments(scope=scope, survey_id=survey_id, user_id=user_id, status=status)


@router.post("", response_model=List[AssignmentOut], status_code=201)
def create_assignments(
    payload: AssignmentCreateIn,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
    scope: CompanyScope = Depends(current_scope),
):
    with store.transaction():
        created = assignment_service.create_assignments(
            store,
            payload.survey_id,
            payload.user_ids,
            scope=scope,
            assigned_by=admin.id,
            due_date=payload.due_date,
            notes=payload.notes,
        )
        audit_log(store, user_id=admin.id, action="assignment.create",
                  payload={"survey_id": payload.survey_id, "user_ids": payload.user_ids}, request=request)
    for assignment in created:
        store.refresh(assignment)
    return created


@router.get("/{assignment_id}", response_model=AssignmentOut)
def get_assignment(
    assignment_id: UUID,
    store: SurveyStore = Depends(get_store),
    scope: CompanyScope = Depends(current_scope),
):
    return assignment_service.get_assignment(store, assignment_id, scope)


@router.put("/{assignment_id}", response_model=AssignmentOut)
def update_assignment(
    assignment_id: UUID,
    payload: AssignmentUpdateIn,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
    scope: CompanyScope = Depends(current_scope),
):
    changes = payload.model_dump(exclude_unset=True)
    with store.transaction():
        assignment = assignment_service.update_assignment(store, assignment_id, changes, scope=scope)
        audit_log(store, user_id=admin.id, action="assignment.update",
                  payload={"assignment_id": assignment_id, "changes": changes}, request=request)
    store.refresh(assignment)
    return assignment


@router.delete("/{assignment_id}", status_code=204)
def delete_assignment(
    assignment_id: UUID,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
    scope: CompanyScope = Depends(current_scope),
):
    with store.transaction():
        assignment_service.delete_assignment(store, assignment_id, scope=scope)
        audit_log(store, user_id=admin.id, action="assignment.delete",
                  payload={"assignment_id": assignment_id}, request=request)
    return Response(status_code=204)
