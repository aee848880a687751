# survey_api/api/v1/endpoints/assignments.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from survey_api.api.deps.auth import require_employee
from survey_api.models.user import User
from survey_api.schemas.assignments import AssignmentOut, RefillRequestIn
from survey_api.services import assignments as assignment_service
from survey_api.services.store import SurveyStore, get_store

router = APIRouter(prefix="/assignments", tags=["assignments"])


@router.get("", response_model=List[AssignmentOut])
def my_assignments(store: SurveyStore = Depends(get_store), current: User = Depends(require_employee)):
    """Encuestas asignadas al usuario de la sesión."""
    return store.list_assignments(user_id=current.id)


@router.patch("/{assignment_id}/refill", response_model=AssignmentOut)
def request_refill(
    assignment_id: UUID,
    payload: RefillRequestIn,
    store: SurveyStore = Depends(get_store),
    current: User = Depends(require_employee),
):
    with store.transaction():
        assignment = assignment_service.request_refill(store, assignment_id, current, payload.reason)
    store.refresh(assignment)
    return assignment
