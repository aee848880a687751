# survey_api/services/submissions.py
from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any, Optional
from uuid import UUID

from survey_api.core.config import settings
from survey_api.core.errors import NotFound, RateLimited, ValidationError
from survey_api.db.types import as_utc, utcnow
from survey_api.models.comment import SurveyComment
from survey_api.models.response import QuestionResponse, SurveyResponse
from survey_api.models.survey import Question, Survey
from survey_api.schemas.responses import AnswerOut, SurveyResponseOut
from survey_api.services.answers import AnswerValue
from survey_api.services.assignments import change_status, open_assignment_for
from survey_api.services.store import SurveyStore

logger = logging.getLogger(__name__)

# clave del formulario -> columna de survey_responses
EMPLOYEE_FIELDS = {
    "name": "employee_name",
    "designation": "employee_designation",
    "department": "employee_department",
    "supervisor": "employee_supervisor",
    "reports_to": "employee_reports_to",
}


# -------------------- helpers -------------------- #

def ensure_survey_open(survey: Survey, now: Optional[datetime] = None) -> None:
    """La encuesta debe estar activa, publicada y dentro de su ventana de fechas."""
    now = now or utcnow()
    if not survey.is_active or not survey.is_published:
        raise ValidationError("La encuesta no está disponible para respuestas")
    start, end = as_utc(survey.start_date), as_utc(survey.end_date)
    if start and start > now:
        raise ValidationError("La encuesta aún no ha comenzado")
    if end and end < now:
        raise ValidationError("La encuesta ha finalizado")


def _employee_columns(employee_info: Any) -> dict[str, Optional[str]]:
    if employee_info is None:
        raise ValidationError("Se requiere la información del empleado")
    if not isinstance(employee_info, Mapping):
        raise ValidationError("employee_info debe ser un objeto")
    # el formulario web envía reportsTo
    info = dict(employee_info)
    if "reports_to" not in info and "reportsTo" in info:
        info["reports_to"] = info["reportsTo"]
    return {col: info.get(key) for key, col in EMPLOYEE_FIELDS.items()}


def classify_answers(
    answers: Any,
    questions: dict[UUID, Any],
    *,
    enforce_required: bool = False,
) -> list[tuple[UUID, AnswerValue]]:
    """
    Valida el mapa pregunta -> valor y devuelve las respuestas clasificadas,
    omitiendo las vacías. No escribe nada.
    """
    if answers is None:
        raise ValidationError("Se requieren las respuestas")
    if not isinstance(answers, Mapping):
        raise ValidationError("Las respuestas deben ser un objeto con los IDs de pregunta como claves")

    classified: list[tuple[UUID, AnswerValue]] = []
    for raw_id, raw_value in answers.items():
        try:
            question_id = UUID(str(raw_id))
        except ValueError:
            raise ValidationError(f"ID de pregunta inválido: {raw_id}")
        if question_id not in questions:
            raise ValidationError(f"La pregunta {question_id} no pertenece a la encuesta")

        value = AnswerValue.classify(raw_value)
        if value is None:
            continue
        classified.append((question_id, value))

    if enforce_required:
        answered = {qid for qid, _ in classified}
        missing = [str(qid) for qid, q in questions.items() if q.is_required and qid not in answered]
        if missing:
            raise ValidationError(f"Faltan respuestas a preguntas obligatorias: {sorted(missing)}")

    return classified


def _question_rows(response_id: UUID, classified: list[tuple[UUID, AnswerValue]]) -> list[QuestionResponse]:
    return [
        QuestionResponse(survey_response_id=response_id, question_id=qid, **value.to_columns())
        for qid, value in classified
    ]


# -------------------- operaciones -------------------- #

def submit_response(
    store: SurveyStore,
    survey_id: UUID,
    employee_info: Any,
    answers: Any,
    completion_time_minutes: Optional[float] = None,
    *,
    user_id: Optional[UUID] = None,
    enforce_required: Optional[bool] = None,
    now: Optional[datetime] = None,
) -> UUID:
    """
    Registra un envío: una fila en survey_responses y una en question_responses
    por cada respuesta no vacía, en una sola transacción.
    """
    survey = store.get_survey(survey_id)
    if not survey:
        raise NotFound("Encuesta no encontrada")

    now = now or utcnow()
    ensure_survey_open(survey, now)
    employee = _employee_columns(employee_info)

    if enforce_required is None:
        enforce_required = settings.ENFORCE_REQUIRED_QUESTIONS
    questions: dict[UUID, Question] = {q.id: q for q in store.questions_for_survey(survey_id)}
    classified = classify_answers(answers, questions, enforce_required=enforce_required)

    assignment = open_assignment_for(store, survey_id, user_id) if user_id else None

    with store.transaction():
        response = SurveyResponse(
            survey_id=survey_id,
            user_id=user_id,
            assignment_id=assignment.id if assignment else None,
            completion_time_minutes=completion_time_minutes,
            submitted_at=now,
            **employee,
        )
        store.add(response)
        store.flush()  # necesitamos response.id antes de las respuestas
        store.add_all(_question_rows(response.id, classified))
        if assignment is not None:
            change_status(assignment, "completed", now)

    logger.info(
        "Survey response submitted: survey=%s response=%s answers=%d",
        survey_id, response.id, len(classified),
    )
    return response.id


def _check_cooldown(response: SurveyResponse, now: datetime) -> None:
    if not response.is_refill:
        return
    last = as_utc(response.submitted_at)
    window = timedelta(hours=settings.REFILL_COOLDOWN_HOURS)
    if last and now - last < window:
        raise RateLimited(
            f"Solo se permite una recarga cada {settings.REFILL_COOLDOWN_HOURS} horas"
        )


def refill_submission(
    store: SurveyStore,
    survey_id: UUID,
    response_id: UUID,
    answers: Any,
    completion_time_minutes: Optional[float] = None,
    *,
    requested_by: Optional[UUID] = None,
    reason: Optional[str] = None,
    enforce_required: Optional[bool] = None,
    now: Optional[datetime] = None,
) -> SurveyResponse:
    """
    Reemplaza las respuestas de un envío existente. El borrado y la nueva
    inserción van en la misma transacción.

    Entre dos recargas del mismo envío deben pasar REFILL_COOLDOWN_HOURS.
    Cada recarga deja un comentario refill_request y, si el envío viene de
    una asignación, suma uno a su refill_count.
    """
    survey = store.get_survey(survey_id)
    if not survey:
        raise NotFound("Encuesta no encontrada")
    response = store.get_response(response_id)
    if not response or response.survey_id != survey_id:
        raise NotFound("Respuesta no encontrada")
    if not survey.allows_refill:
        raise ValidationError("La encuesta no permite volver a responder")

    now = now or utcnow()
    ensure_survey_open(survey, now)
    _check_cooldown(response, now)

    if enforce_required is None:
        enforce_required = settings.ENFORCE_REQUIRED_QUESTIONS
    questions = {q.id: q for q in store.questions_for_survey(survey_id)}
    classified = classify_answers(answers, questions, enforce_required=enforce_required)

    author = requested_by or response.user_id
    reason = (reason or "").strip()
    with store.transaction():
        removed = store.delete_answers(response.id)
        store.flush()
        store.add_all(_question_rows(response.id, classified))
        response.response_attempt = (response.response_attempt or 1) + 1
        response.is_refill = True
        response.submitted_at = now
        if completion_time_minutes is not None:
            response.completion_time_minutes = completion_time_minutes

        assignment = response.assignment
        if assignment is not None:
            assignment.refill_count = (assignment.refill_count or 0) + 1
            assignment.status = "completed"
            assignment.completed_at = now
        if author is not None:
            store.add(SurveyComment(
                survey_id=survey_id,
                assignment_id=assignment.id if assignment else None,
                user_id=author,
                recipient_id=assignment.assigned_by if assignment else None,
                comment_text=reason or "Respuestas actualizadas (recarga)",
                comment_type="refill_request",
            ))

    logger.info(
        "Survey response refilled: survey=%s response=%s removed=%d answers=%d",
        survey_id, response.id, removed, len(classified),
    )
    return response


def response_out(store: SurveyStore, response: SurveyResponse) -> SurveyResponseOut:
    """Envío con sus respuestas ya decodificadas de la forma dispersa."""
    answers = []
    for row in store.answers_for_response(response.id):
        value = AnswerValue.from_row(row)
        answers.append(AnswerOut(question_id=row.question_id, response_type=value.kind.value, value=value.payload))
    fields = {
        name: getattr(response, name)
        for name in SurveyResponseOut.model_fields
        if name != "answers"
    }
    return SurveyResponseOut(**fields, answers=answers)
