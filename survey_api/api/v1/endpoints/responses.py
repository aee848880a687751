# survey_api/api/v1/endpoints/responses.py
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from survey_api.api.deps.auth import has_role, require_employee
from survey_api.core.errors import NotFound
from survey_api.core.security import get_optional_user
from survey_api.models.response import SurveyResponse
from survey_api.models.user import User
from survey_api.schemas.responses import (
    RefillIn,
    SubmitResponseIn,
    SubmitResponseOut,
    SurveyResponseOut,
)
from survey_api.services.submissions import refill_submission, response_out, submit_response
from survey_api.services.store import SurveyStore, get_store
from survey_api.services.tenancy import CompanyScope

router = APIRouter(prefix="/surveys", tags=["responses"])


# -------------------- helpers -------------------- #

def _load_owned_response(store: SurveyStore, survey_id: UUID, response_id: UUID, user: User) -> SurveyResponse:
    response = store.get_response(response_id)
    if not response or response.survey_id != survey_id:
        raise NotFound("Respuesta no encontrada")
    if response.user_id == user.id:
        return response
    # un admin ve los envíos de las encuestas de su empresa
    if not has_role(user, "admin"):
        raise HTTPException(status_code=403, detail="Permisos insuficientes")
    if not CompanyScope.for_user(user).allows(response.survey.company_id):
        raise NotFound("Respuesta no encontrada")
    return response


# -------------------- endpoints -------------------- #

@router.post("/{survey_id}/responses", response_model=SubmitResponseOut, status_code=201)
def submit(
    survey_id: UUID,
    payload: SubmitResponseIn,
    store: SurveyStore = Depends(get_store),
    current: Optional[User] = Depends(get_optional_user),
):
    """
    Envío del formulario. Público: si llega un token válido el envío queda
    asociado al usuario (necesario para volver a responder).
    """
    response_id = submit_response(
        store,
        survey_id,
        payload.employee_info.model_dump() if payload.employee_info else None,
        payload.answers,
        payload.completion_time_minutes,
        user_id=current.id if current else None,
    )
    survey = store.get_survey(survey_id)
    return SubmitResponseOut(response_id=response_id, survey_title=survey.title)


@router.get("/{survey_id}/responses/{response_id}", response_model=SurveyResponseOut)
def get_response(
    survey_id: UUID,
    response_id: UUID,
    store: SurveyStore = Depends(get_store),
    current: User = Depends(require_employee),
):
    response = _load_owned_response(store, survey_id, response_id, current)
    return response_out(store, response)


@router.post("/{survey_id}/responses/{response_id}/refill", response_model=SurveyResponseOut)
def refill(
    survey_id: UUID,
    response_id: UUID,
    payload: RefillIn,
    store: SurveyStore = Depends(get_store),
    current: User = Depends(require_employee),
):
    _load_owned_response(store, survey_id, response_id, current)
    response = refill_submission(
        store, survey_id, response_id, payload.answers, payload.completion_time_minutes,
        requested_by=current.id, reason=payload.reason,
    )
    return response_out(store, response)
