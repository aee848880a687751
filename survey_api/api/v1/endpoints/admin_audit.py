# survey_api/api/v1/endpoints/admin_audit.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, Response

from survey_api.api.deps.auth import require_admin
from survey_api.api.deps.tenant import audit_question_in_scope, survey_in_scope
from survey_api.models.user import User
from survey_api.schemas.admin import (
    AuditQuestionCreateIn,
    AuditQuestionOut,
    AuditQuestionsOut,
    AuditResponseOut,
    AuditResponsesIn,
    AuditResponsesSavedOut,
)
from survey_api.services import audit_questions as audit_service
from survey_api.services.audit import audit_log
from survey_api.services.store import SurveyStore, get_store

router = APIRouter(tags=["admin-audit"], dependencies=[Depends(require_admin)])


@router.get(
    "/surveys/{survey_id}/audit-questions", response_model=AuditQuestionsOut,
    dependencies=[Depends(survey_in_scope)],
)
def list_audit_questions(survey_id: UUID, store: SurveyStore = Depends(get_store)):
    return audit_service.list_audit_questions(store, survey_id)


@router.post(
    "/surveys/{survey_id}/audit-questions", response_model=AuditQuestionOut, status_code=201,
    dependencies=[Depends(survey_in_scope)],
)
def create_audit_question(
    survey_id: UUID,
    payload: AuditQuestionCreateIn,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
):
    data = payload.model_dump()
    data["created_by"] = data.get("created_by") or admin.email
    with store.transaction():
        question = audit_service.create_audit_question(store, survey_id, data)
        audit_log(store, user_id=admin.id, action="audit_question.create",
                  payload={"survey_id": survey_id, "audit_question_id": question.id}, request=request)
    store.refresh(question)
    return question


@router.delete(
    "/audit-questions/{question_id}", status_code=204,
    dependencies=[Depends(audit_question_in_scope)],
)
def delete_audit_question(
    question_id: UUID,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
):
    with store.transaction():
        audit_service.delete_audit_question(store, question_id)
        audit_log(store, user_id=admin.id, action="audit_question.delete",
                  payload={"audit_question_id": question_id}, request=request)
    return Response(status_code=204)


@router.get(
    "/surveys/{survey_id}/audit-responses", response_model=List[AuditResponseOut],
    dependencies=[Depends(survey_in_scope)],
)
def list_audit_responses(survey_id: UUID, store: SurveyStore = Depends(get_store)):
    return audit_service.list_audit_responses(store, survey_id)


@router.post(
    "/surveys/{survey_id}/audit-responses", response_model=AuditResponsesSavedOut,
    dependencies=[Depends(survey_in_scope)],
)
def save_audit_responses(
    survey_id: UUID,
    payload: AuditResponsesIn,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_admin),
):
    with store.transaction():
        saved, cleared = audit_service.save_audit_responses(
            store, survey_id, payload.answers, payload.responded_by or admin.email,
        )
        audit_log(store, user_id=admin.id, action="audit_responses.save",
                  payload={"survey_id": survey_id, "saved": saved, "cleared": cleared}, request=request)
    return AuditResponsesSavedOut(saved=saved, cleared=cleared)
