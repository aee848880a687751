# survey_api/services/analytics.py
"""
Agregación de respuestas para el dashboard de administración.

Las funciones de cálculo (rating_values, summarize_question,
department_breakdown, ...) son puras y trabajan sobre AnswerValue; las
funciones get_* leen del store y arman la salida.
"""
from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from survey_api.core.errors import NotFound
from survey_api.db.types import utcnow
from survey_api.schemas.analytics import (
    AuditAnalytics,
    DepartmentCount,
    QuestionAnalytics,
    SectionAnalytics,
    SectionAnalyticsOut,
    SurveyAnalytics,
)
from survey_api.services.answers import AnswerValue, ResponseKind
from survey_api.services.store import SurveyStore

RATING_SCALE = (1, 2, 3, 4, 5)
OTHER_TYPES = ("text", "yes_no", "radio", "checkbox", "select")


# -------------------- cálculo puro -------------------- #

def _as_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def rating_values(answers: Iterable[AnswerValue]) -> list[float]:
    """Valor numérico, o el "main" de una respuesta compuesta si no lo hay."""
    values = []
    for answer in answers:
        if answer.kind not in (ResponseKind.NUMBER, ResponseKind.OBJECT):
            continue
        number = _as_number(answer.main)
        if number is not None:
            values.append(number)
    return values


def mean(values: Sequence[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def population_variance(values: Sequence[float]) -> Optional[float]:
    avg = mean(values)
    if avg is None:
        return None
    return sum((v - avg) ** 2 for v in values) / len(values)


def rating_distribution(values: Iterable[float]) -> list[int]:
    values = list(values)
    return [sum(1 for v in values if v == bucket) for bucket in RATING_SCALE]


def yes_no_counts(answers: Iterable[AnswerValue]) -> tuple[int, int]:
    # sensible a mayúsculas; otros valores no cuentan
    yes = no = 0
    for answer in answers:
        main = answer.main
        if main == "yes":
            yes += 1
        elif main == "no":
            no += 1
    return yes, no


def summarize_question(
    question_id: UUID,
    question_text: str,
    question_type: str,
    answers: Sequence[AnswerValue],
) -> QuestionAnalytics:
    out = QuestionAnalytics(
        question_id=question_id,
        question=question_text,
        type=question_type,
        response_count=len(answers),
    )
    if question_type == "rating":
        values = rating_values(answers)
        if values:
            out.avg_rating = mean(values)
            out.distribution = rating_distribution(values)
    elif question_type == "yes_no":
        out.yes_count, out.no_count = yes_no_counts(answers)
    return out


def department_breakdown(departments: Iterable[Optional[str]]) -> list[DepartmentCount]:
    """Conteo por texto exacto del departamento, en orden de aparición."""
    counts: dict[Optional[str], int] = {}
    for dept in departments:
        counts[dept] = counts.get(dept, 0) + 1
    return [DepartmentCount(name=name, count=n) for name, n in counts.items()]


def _group_by_question(rows: Iterable[Any], key: str) -> dict[UUID, list[AnswerValue]]:
    grouped: dict[UUID, list[AnswerValue]] = defaultdict(list)
    for row in rows:
        grouped[getattr(row, key)].append(AnswerValue.from_row(row))
    return grouped


def _require_survey(store: SurveyStore, survey_id: UUID):
    survey = store.get_survey(survey_id)
    if not survey:
        raise NotFound("Encuesta no encontrada")
    return survey


# -------------------- reportes -------------------- #

def get_survey_analytics(
    store: SurveyStore,
    survey_id: UUID,
    *,
    now: Optional[datetime] = None,
) -> SurveyAnalytics:
    _require_survey(store, survey_id)

    responses = store.responses_for_survey(survey_id)
    by_question = _group_by_question(store.answers_for_survey(survey_id), "question_id")

    question_analytics = [
        summarize_question(q.id, q.question_text, q.question_type, by_question.get(q.id, []))
        for q in store.questions_for_survey(survey_id)
    ]
    times = [r.completion_time_minutes for r in responses if r.completion_time_minutes is not None]

    return SurveyAnalytics(
        survey_id=survey_id,
        total_responses=len(responses),
        average_completion_time=mean(times),
        department_breakdown=department_breakdown(r.employee_department for r in responses),
        question_analytics=question_analytics,
        generated_at=now or utcnow(),
    )


def get_section_analytics(
    store: SurveyStore,
    survey_id: UUID,
    *,
    now: Optional[datetime] = None,
) -> SectionAnalyticsOut:
    _require_survey(store, survey_id)

    by_question = _group_by_question(store.answers_for_survey(survey_id), "question_id")
    sections = []
    for section in store.sections_for_survey(survey_id):
        ratings: list[float] = []
        other_counts = {t: 0 for t in OTHER_TYPES}
        total = 0
        for q in section.questions:
            answers = by_question.get(q.id, [])
            total += len(answers)
            if q.question_type == "rating":
                ratings.extend(rating_values(answers))
            elif q.question_type in other_counts:
                other_counts[q.question_type] += len(answers)

        variance = population_variance(ratings)
        sections.append(SectionAnalytics(
            section_id=section.id,
            section_title=section.title,
            section_order=section.order_index,
            rating_average=mean(ratings),
            rating_count=len(ratings),
            rating_variance=variance,
            rating_std_deviation=math.sqrt(variance) if variance is not None else None,
            other_question_counts=other_counts,
            total_questions=len(section.questions),
            total_responses=total,
        ))

    return SectionAnalyticsOut(survey_id=survey_id, sections=sections, generated_at=now or utcnow())


def get_audit_analytics(
    store: SurveyStore,
    survey_id: UUID,
    *,
    now: Optional[datetime] = None,
) -> AuditAnalytics:
    _require_survey(store, survey_id)

    rows = store.audit_responses_for_survey(survey_id)
    by_question = _group_by_question(rows, "audit_question_id")
    question_analytics = [
        summarize_question(q.id, q.question_text, q.question_type, by_question.get(q.id, []))
        for q in store.audit_questions_for_survey(survey_id)
    ]
    return AuditAnalytics(
        survey_id=survey_id,
        total_responses=len(rows),
        question_analytics=question_analytics,
        generated_at=now or utcnow(),
    )
