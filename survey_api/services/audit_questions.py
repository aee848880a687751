# survey_api/services/audit_questions.py
"""Preguntas y respuestas de auditoría interna (solo administradores)."""
from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import UUID

from survey_api.core.errors import NotFound, ValidationError
from survey_api.models.audit_question import AuditQuestion, AuditQuestionOption, AuditResponse
from survey_api.schemas.admin import (
    AuditQuestionOut,
    AuditQuestionsOut,
    AuditResponseOut,
    AuditSectionGroupOut,
)
from survey_api.services.answers import AnswerValue, is_blank
from survey_api.services.store import SurveyStore
from survey_api.services.submissions import classify_answers

logger = logging.getLogger(__name__)

UNASSIGNED_SECTION_TITLE = "Preguntas sin sección"
UNASSIGNED_SECTION_ORDER = 999


def _require_survey(store: SurveyStore, survey_id: UUID) -> None:
    if not store.get_survey(survey_id):
        raise NotFound("Encuesta no encontrada")


def list_audit_questions(store: SurveyStore, survey_id: UUID) -> AuditQuestionsOut:
    """Preguntas agrupadas por sección; las que no tienen sección van al final."""
    _require_survey(store, survey_id)
    questions = store.audit_questions_for_survey(survey_id)

    groups: dict[Optional[UUID], AuditSectionGroupOut] = {}
    for q in questions:
        group = groups.get(q.section_id)
        if group is None:
            section = q.section
            group = AuditSectionGroupOut(
                section_id=section.id if section else None,
                section_title=section.title if section else UNASSIGNED_SECTION_TITLE,
                order_index=section.order_index if section else UNASSIGNED_SECTION_ORDER,
            )
            groups[q.section_id] = group
        group.questions.append(AuditQuestionOut.model_validate(q))

    sections = sorted(groups.values(), key=lambda g: g.order_index)
    return AuditQuestionsOut(sections=sections, total_questions=len(questions))


def create_audit_question(store: SurveyStore, survey_id: UUID, data: dict[str, Any]) -> AuditQuestion:
    _require_survey(store, survey_id)
    data = dict(data)
    options = data.pop("options", None) or []

    section_id = data.get("section_id")
    if section_id is not None:
        section = store.get_section(section_id)
        if not section or section.survey_id != survey_id:
            raise ValidationError("La sección no pertenece a la encuesta")

    question = AuditQuestion(survey_id=survey_id, **data)
    for i, text in enumerate(options):
        if not text or not str(text).strip():
            raise ValidationError("Las opciones no pueden estar vacías")
        question.options.append(AuditQuestionOption(option_text=text, order_index=i))
    store.add(question)
    store.flush()
    return question


def delete_audit_question(store: SurveyStore, question_id: UUID) -> None:
    question = store.get_audit_question(question_id)
    if not question:
        raise NotFound("Pregunta de auditoría no encontrada")
    store.delete(question)
    store.flush()


def save_audit_responses(
    store: SurveyStore,
    survey_id: UUID,
    answers: Any,
    responded_by: Optional[str] = None,
) -> tuple[int, int]:
    """
    Guarda una respuesta por pregunta de auditoría; si ya existe se
    reemplaza su valor. Un valor vacío borra la respuesta guardada.
    Devuelve (escritas, borradas).
    """
    _require_survey(store, survey_id)
    questions = {q.id: q for q in store.audit_questions_for_survey(survey_id)}
    classified = classify_answers(answers, questions)
    responded_by = responded_by or "admin"

    existing = {r.audit_question_id: r for r in store.audit_responses_for_survey(survey_id)}
    cleared = 0
    # classify_answers ya validó las claves
    for raw_id, raw_value in answers.items():
        if not is_blank(raw_value):
            continue
        row = existing.pop(UUID(str(raw_id)), None)
        if row is not None:
            store.delete(row)
            cleared += 1

    for question_id, value in classified:
        row = existing.get(question_id)
        if row is None:
            row = AuditResponse(survey_id=survey_id, audit_question_id=question_id)
            store.add(row)
            existing[question_id] = row
        for column, column_value in value.to_columns().items():
            setattr(row, column, column_value)
        row.responded_by = responded_by
    store.flush()

    logger.info(
        "Audit responses saved: survey=%s count=%d cleared=%d", survey_id, len(classified), cleared
    )
    return len(classified), cleared


def list_audit_responses(store: SurveyStore, survey_id: UUID) -> list[AuditResponseOut]:
    _require_survey(store, survey_id)
    questions = {q.id: q for q in store.audit_questions_for_survey(survey_id)}
    out = []
    for row in store.audit_responses_for_survey(survey_id):
        q = questions.get(row.audit_question_id)
        if q is None:
            continue
        value = AnswerValue.from_row(row)
        out.append(AuditResponseOut(
            audit_question_id=row.audit_question_id,
            question_text=q.question_text,
            question_type=q.question_type,
            category=q.category,
            response_type=value.kind.value,
            value=value.payload,
            responded_by=row.responded_by,
            updated_at=row.updated_at,
        ))
    return out
