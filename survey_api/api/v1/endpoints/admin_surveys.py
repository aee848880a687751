# survey_api/api/v1/endpoints/admin_surveys.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response

from survey_api.api.deps.auth import require_admin
from survey_api.api.deps.tenant import (
    current_scope,
    option_in_scope,
    question_in_scope,
    section_in_scope,
    survey_in_scope,
)
from survey_api.models.user import User
from survey_api.schemas.responses import SurveyResponseOut
from survey_api.schemas.surveys import (
    OptionCreateIn,
    OptionOut,
    OptionUpdateIn,
    QuestionCreateIn,
    QuestionOut,
    QuestionUpdateIn,
    SectionCreateIn,
    SectionDetailOut,
    SectionOut,
    SectionUpdateIn,
    SurveyCreateIn,
    SurveyDetailOut,
    SurveyOut,
    SurveyUpdateIn,
)
from survey_api.services import surveys as survey_service
from survey_api.services.audit import audit_log
from survey_api.services.store import SurveyStore, get_store
from survey_api.services.submissions import response_out
from survey_api.services.tenancy import CompanyScope

router = APIRouter(tags=["admin-surveys"], dependencies=[Depends(require_admin)])


# --------------------------
# Encuestas
# --------------------------
@router.get("/surveys", response_model=List[SurveyOut])
def admin_list_surveys(
    store: SurveyStore = Depends(get_store),
    scope: CompanyScope = Depends(current_scope),
):
    # el admin ve también borradores e inactivas
    return survey_service.list_surveys(store, active_only=False, scope=scope)


@router.get(
    "/surveys/{survey_id}", response_model=SurveyDetailOut,
    dependencies=[Depends(survey_in_scope)],
)
def admin_get_survey(survey_id: UUID, store: SurveyStore = Depends(get_store)):
    return survey_service.get_survey(store, survey_id)


@router.post("/surveys", response_model=SurveyOut, status_code=201)
def admin_create_survey(
    payload: SurveyCreateIn,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
    scope: CompanyScope = Depends(current_scope),
):
    data = payload.model_dump()
    data["company_id"] = scope.owner_for(data.get("company_id"))
    with store.transaction():
        survey = survey_service.create_survey(store, data)
        audit_log(store, user_id=admin.id, action="survey.create",
                  payload={"survey_id": survey.id, "title": survey.title}, request=request)
    store.refresh(survey)
    return survey


@router.put(
    "/surveys/{survey_id}", response_model=SurveyOut,
    dependencies=[Depends(survey_in_scope)],
)
def admin_update_survey(
    survey_id: UUID,
    payload: SurveyUpdateIn,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
):
    changes = payload.model_dump(exclude_unset=True)
    with store.transaction():
        survey = survey_service.update_survey(store, survey_id, changes)
        audit_log(store, user_id=admin.id, action="survey.update",
                  payload={"survey_id": survey_id, "changes": changes}, request=request)
    store.refresh(survey)
    return survey


@router.delete("/surveys/{survey_id}", status_code=204, dependencies=[Depends(survey_in_scope)])
def admin_delete_survey(
    survey_id: UUID,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
):
    with store.transaction():
        survey_service.delete_survey(store, survey_id)
        audit_log(store, user_id=admin.id, action="survey.delete",
                  payload={"survey_id": survey_id}, request=request)
    return Response(status_code=204)


@router.get(
    "/surveys/{survey_id}/responses", response_model=List[SurveyResponseOut],
    dependencies=[Depends(survey_in_scope)],
)
def admin_list_responses(survey_id: UUID, store: SurveyStore = Depends(get_store)):
    survey_service.get_survey(store, survey_id)
    return [response_out(store, r) for r in store.responses_for_survey(survey_id)]


# --------------------------
# Secciones
# --------------------------
@router.get(
    "/surveys/{survey_id}/sections", response_model=List[SectionDetailOut],
    dependencies=[Depends(survey_in_scope)],
)
def admin_list_sections(survey_id: UUID, store: SurveyStore = Depends(get_store)):
    return survey_service.get_survey(store, survey_id).sections


@router.post(
    "/surveys/{survey_id}/sections", response_model=SectionOut, status_code=201,
    dependencies=[Depends(survey_in_scope)],
)
def admin_create_section(
    survey_id: UUID,
    payload: SectionCreateIn,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
):
    with store.transaction():
        section = survey_service.create_section(store, survey_id, payload.model_dump())
        audit_log(store, user_id=admin.id, action="section.create",
                  payload={"survey_id": survey_id, "section_id": section.id}, request=request)
    store.refresh(section)
    return section


@router.put(
    "/sections/{section_id}", response_model=SectionOut,
    dependencies=[Depends(section_in_scope)],
)
def admin_update_section(
    section_id: UUID,
    payload: SectionUpdateIn,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
):
    changes = payload.model_dump(exclude_unset=True)
    with store.transaction():
        section = survey_service.update_section(store, section_id, changes)
        audit_log(store, user_id=admin.id, action="section.update",
                  payload={"section_id": section_id, "changes": changes}, request=request)
    store.refresh(section)
    return section


@router.delete("/sections/{section_id}", status_code=204, dependencies=[Depends(section_in_scope)])
def admin_delete_section(
    section_id: UUID,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
):
    with store.transaction():
        survey_service.delete_section(store, section_id)
        audit_log(store, user_id=admin.id, action="section.delete",
                  payload={"section_id": section_id}, request=request)
    return Response(status_code=204)


# --------------------------
# Preguntas
# --------------------------
@router.post(
    "/sections/{section_id}/questions", response_model=QuestionOut, status_code=201,
    dependencies=[Depends(section_in_scope)],
)
def admin_create_question(
    section_id: UUID,
    payload: QuestionCreateIn,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
):
    with store.transaction():
        question = survey_service.create_question(store, section_id, payload.model_dump())
        audit_log(store, user_id=admin.id, action="question.create",
                  payload={"section_id": section_id, "question_id": question.id}, request=request)
    store.refresh(question)
    return question


@router.put(
    "/questions/{question_id}", response_model=QuestionOut,
    dependencies=[Depends(question_in_scope)],
)
def admin_update_question(
    question_id: UUID,
    payload: QuestionUpdateIn,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
):
    changes = payload.model_dump(exclude_unset=True)
    with store.transaction():
        question = survey_service.update_question(store, question_id, changes)
        audit_log(store, user_id=admin.id, action="question.update",
                  payload={"question_id": question_id, "changes": changes}, request=request)
    store.refresh(question)
    return question


@router.delete(
    "/questions/{question_id}", status_code=204,
    dependencies=[Depends(question_in_scope)],
)
def admin_delete_question(
    question_id: UUID,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
):
    with store.transaction():
        survey_service.delete_question(store, question_id)
        audit_log(store, user_id=admin.id, action="question.delete",
                  payload={"question_id": question_id}, request=request)
    return Response(status_code=204)


# --------------------------
# Opciones
# --------------------------
@router.post(
    "/questions/{question_id}/options", response_model=OptionOut, status_code=201,
    dependencies=[Depends(question_in_scope)],
)
def admin_create_option(
    question_id: UUID,
    payload: OptionCreateIn,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
):
    with store.transaction():
        option = survey_service.create_option(store, question_id, payload.model_dump())
        audit_log(store, user_id=admin.id, action="option.create",
                  payload={"question_id": question_id, "option_id": option.id}, request=request)
    store.refresh(option)
    return option


@router.put(
    "/options/{option_id}", response_model=OptionOut,
    dependencies=[Depends(option_in_scope)],
)
def admin_update_option(
    option_id: UUID,
    payload: OptionUpdateIn,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
):
    changes = payload.model_dump(exclude_unset=True)
    with store.transaction():
        option = survey_service.update_option(store, option_id, changes)
        audit_log(store, user_id=admin.id, action="option.update",
                  payload={"option_id": option_id, "changes": changes}, request=request)
    store.refresh(option)
    return option


@router.delete("/options/{option_id}", status_code=204, dependencies=[Depends(option_in_scope)])
def admin_delete_option(
    option_id: UUID,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
):
    with store.transaction():
        survey_service.delete_option(store, option_id)
        audit_log(store, user_id=admin.id, action="option.delete",
                  payload={"option_id": option_id}, request=request)
    return Response(status_code=204)
