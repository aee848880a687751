# survey_api/services/surveys.py
"""
Lectura y CRUD de encuestas, secciones, preguntas y opciones.

Las funciones de escritura no hacen commit: el endpoint las envuelve en
store.transaction() junto con el registro de auditoría.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from survey_api.core.errors import NotFound, ValidationError
from survey_api.db.types import as_utc, utcnow
from survey_api.models.survey import QUESTION_TYPES, Question, QuestionOption, Survey, SurveySection
from survey_api.services.store import SurveyStore
from survey_api.services.tenancy import CompanyScope


# -------------------- helpers -------------------- #

def _require_text(data: dict[str, Any], *fields: str) -> None:
    for field in fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"El campo '{field}' es obligatorio")


def _require_if_present(changes: dict[str, Any], field: str) -> None:
    if changes.get(field) is not None:
        _require_text(changes, field)


def _check_question_type(data: dict[str, Any]) -> None:
    qtype = data.get("question_type")
    if qtype is not None and qtype not in QUESTION_TYPES:
        raise ValidationError(f"Tipo de pregunta inválido: {qtype}")


def _apply(obj: Any, changes: dict[str, Any]) -> None:
    columns = obj.__table__.columns
    for key, value in changes.items():
        # null explícito en una columna NOT NULL: se ignora
        if value is None and key in columns and not columns[key].nullable:
            continue
        setattr(obj, key, value)


def _is_within_window(survey: Survey, now: datetime) -> bool:
    start, end = as_utc(survey.start_date), as_utc(survey.end_date)
    if start and start > now:
        return False
    if end and end < now:
        return False
    return True


def is_survey_open(survey: Survey, now: Optional[datetime] = None) -> bool:
    """Activa, publicada y dentro de su ventana de fechas."""
    if not survey.is_active or not survey.is_published:
        return False
    return _is_within_window(survey, now or utcnow())


# -------------------- lectura -------------------- #

def list_surveys(
    store: SurveyStore,
    active_only: bool = False,
    now: Optional[datetime] = None,
    *,
    scope: Optional[CompanyScope] = None,
) -> list[Survey]:
    """Con active_only: activas, publicadas y dentro de su ventana de fechas."""
    surveys = store.list_surveys(active_only=active_only, scope=scope)
    if not active_only:
        return surveys
    now = now or utcnow()
    return [s for s in surveys if _is_within_window(s, now)]


def get_survey(store: SurveyStore, survey_id: UUID) -> Survey:
    """Encuesta con secciones -> preguntas -> opciones, cada nivel por order_index."""
    survey = store.get_survey(survey_id, with_tree=True)
    if not survey:
        raise NotFound("Encuesta no encontrada")
    return survey


def get_open_survey(store: SurveyStore, survey_id: UUID, now: Optional[datetime] = None) -> Survey:
    """Como get_survey, pero los borradores, inactivas y vencidas no existen."""
    survey = get_survey(store, survey_id)
    if not is_survey_open(survey, now):
        raise NotFound("Encuesta no encontrada")
    return survey


# -------------------- encuestas -------------------- #

def create_survey(store: SurveyStore, data: dict[str, Any]) -> Survey:
    _require_text(data, "title")
    company_id = data.get("company_id")
    if company_id is not None:
        company = store.get_company(company_id)
        if not company or not company.is_active:
            raise ValidationError("Empresa no encontrada o inactiva")
        active = store.count(Survey, Survey.company_id == company_id, Survey.is_active.is_(True))
        if active >= company.max_surveys:
            raise ValidationError(f"La empresa alcanzó su límite de encuestas ({company.max_surveys})")
    survey = Survey(**data)
    store.add(survey)
    store.flush()
    return survey


def update_survey(store: SurveyStore, survey_id: UUID, changes: dict[str, Any]) -> Survey:
    survey = store.get_survey(survey_id)
    if not survey:
        raise NotFound("Encuesta no encontrada")
    _require_if_present(changes, "title")
    _apply(survey, changes)
    store.flush()
    return survey


def delete_survey(store: SurveyStore, survey_id: UUID) -> None:
    survey = store.get_survey(survey_id)
    if not survey:
        raise NotFound("Encuesta no encontrada")
    store.delete(survey)
    store.flush()


# -------------------- secciones -------------------- #

def create_section(store: SurveyStore, survey_id: UUID, data: dict[str, Any]) -> SurveySection:
    if not store.get_survey(survey_id):
        raise NotFound("Encuesta no encontrada")
    _require_text(data, "title")
    section = SurveySection(survey_id=survey_id, **data)
    store.add(section)
    store.flush()
    return section


def update_section(store: SurveyStore, section_id: UUID, changes: dict[str, Any]) -> SurveySection:
    section = store.get_section(section_id)
    if not section:
        raise NotFound("Sección no encontrada")
    _require_if_present(changes, "title")
    _apply(section, changes)
    store.flush()
    return section


def delete_section(store: SurveyStore, section_id: UUID) -> None:
    section = store.get_section(section_id)
    if not section:
        raise NotFound("Sección no encontrada")
    store.delete(section)
    store.flush()


# -------------------- preguntas -------------------- #

def create_question(store: SurveyStore, section_id: UUID, data: dict[str, Any]) -> Question:
    if not store.get_section(section_id):
        raise NotFound("Sección no encontrada")
    data = dict(data)
    options = data.pop("options", None) or []
    _require_text(data, "question_text", "question_type")
    _check_question_type(data)

    question = Question(section_id=section_id, **data)
    for i, opt in enumerate(options):
        _require_text(opt, "option_text")
        question.options.append(
            QuestionOption(option_text=opt["option_text"], order_index=opt.get("order_index", i))
        )
    store.add(question)
    store.flush()
    return question


def update_question(store: SurveyStore, question_id: UUID, changes: dict[str, Any]) -> Question:
    question = store.get_question(question_id)
    if not question:
        raise NotFound("Pregunta no encontrada")
    _require_if_present(changes, "question_text")
    _check_question_type(changes)
    _apply(question, changes)
    store.flush()
    return question


def delete_question(store: SurveyStore, question_id: UUID) -> None:
    question = store.get_question(question_id)
    if not question:
        raise NotFound("Pregunta no encontrada")
    store.delete(question)
    store.flush()


# -------------------- opciones -------------------- #

def create_option(store: SurveyStore, question_id: UUID, data: dict[str, Any]) -> QuestionOption:
    if not store.get_question(question_id):
        raise NotFound("Pregunta no encontrada")
    _require_text(data, "option_text")
    option = QuestionOption(question_id=question_id, **data)
    store.add(option)
    store.flush()
    return option


def update_option(store: SurveyStore, option_id: UUID, changes: dict[str, Any]) -> QuestionOption:
    option = store.get_option(option_id)
    if not option:
        raise NotFound("Opción no encontrada")
    _require_if_present(changes, "option_text")
    _apply(option, changes)
    store.flush()
    return option


def delete_option(store: SurveyStore, option_id: UUID) -> None:
    option = store.get_option(option_id)
    if not option:
        raise NotFound("Opción no encontrada")
    store.delete(option)
    store.flush()
