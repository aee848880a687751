# survey_api/api/v1/endpoints/surveys.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from survey_api.api.deps.tenant import public_scope
from survey_api.core.errors import NotFound
from survey_api.schemas.surveys import SurveyDetailOut, SurveyOut
from survey_api.services import surveys as survey_service
from survey_api.services.store import SurveyStore, get_store
from survey_api.services.tenancy import CompanyScope

router = APIRouter(prefix="/surveys", tags=["surveys"])


@router.get("", response_model=List[SurveyOut])
def list_surveys(store: SurveyStore = Depends(get_store), scope: CompanyScope = Depends(public_scope)):
    """Solo encuestas activas, publicadas y vigentes; los borradores se ven desde /admin."""
    return survey_service.list_surveys(store, active_only=True, scope=scope)


@router.get("/{survey_id}", response_model=SurveyDetailOut)
def get_survey(
    survey_id: UUID,
    store: SurveyStore = Depends(get_store),
    scope: CompanyScope = Depends(public_scope),
):
    survey = survey_service.get_open_survey(store, survey_id)
    if not scope.allows(survey.company_id):
        raise NotFound("Encuesta no encontrada")
    return survey
