# survey_api/api/deps/tenant.py
"""
Dependencias de alcance por empresa para las rutas de administración.

Cada guard resuelve el registro de la ruta y responde 404 si no existe o
pertenece a otra empresa, igual que si no existiera.
"""
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header

from survey_api.api.deps.auth import require_admin
from survey_api.core.errors import NotFound
from survey_api.core.security import get_optional_user
from survey_api.models.user import User
from survey_api.services.store import SurveyStore, get_store
from survey_api.services.tenancy import GLOBAL_SCOPE, CompanyScope


def current_scope(
    user: User = Depends(require_admin),
    x_company_id: Optional[UUID] = Header(default=None),
) -> CompanyScope:
    """Alcance del administrador; X-Company-Id solo lo respeta un super_admin."""
    return CompanyScope.for_user(user, x_company_id)


def public_scope(user: Optional[User] = Depends(get_optional_user)) -> CompanyScope:
    """Anónimo: todas las empresas. Con sesión: la empresa del usuario."""
    if user is None:
        return GLOBAL_SCOPE
    return CompanyScope.for_user(user)


def _check(scope: CompanyScope, company_id, message: str) -> None:
    if not scope.allows(company_id):
        raise NotFound(message)


def survey_in_scope(
    survey_id: UUID,
    store: SurveyStore = Depends(get_store),
    scope: CompanyScope = Depends(current_scope),
) -> UUID:
    survey = store.get_survey(survey_id)
    if not survey:
        raise NotFound("Encuesta no encontrada")
    _check(scope, survey.company_id, "Encuesta no encontrada")
    return survey_id


def section_in_scope(
    section_id: UUID,
    store: SurveyStore = Depends(get_store),
    scope: CompanyScope = Depends(current_scope),
) -> UUID:
    section = store.get_section(section_id)
    if not section:
        raise NotFound("Sección no encontrada")
    _check(scope, section.survey.company_id, "Sección no encontrada")
    return section_id


def question_in_scope(
    question_id: UUID,
    store: SurveyStore = Depends(get_store),
    scope: CompanyScope = Depends(current_scope),
) -> UUID:
    question = store.get_question(question_id)
    if not question:
        raise NotFound("Pregunta no encontrada")
    _check(scope, question.section.survey.company_id, "Pregunta no encontrada")
    return question_id


def option_in_scope(
    option_id: UUID,
    store: SurveyStore = Depends(get_store),
    scope: CompanyScope = Depends(current_scope),
) -> UUID:
    option = store.get_option(option_id)
    if not option:
        raise NotFound("Opción no encontrada")
    _check(scope, option.question.section.survey.company_id, "Opción no encontrada")
    return option_id


def audit_question_in_scope(
    question_id: UUID,
    store: SurveyStore = Depends(get_store),
    scope: CompanyScope = Depends(current_scope),
) -> UUID:
    question = store.get_audit_question(question_id)
    if not question:
        raise NotFound("Pregunta de auditoría no encontrada")
    _check(scope, question.survey.company_id, "Pregunta de auditoría no encontrada")
    return question_id


def department_in_scope(
    department_id: UUID,
    store: SurveyStore = Depends(get_store),
    scope: CompanyScope = Depends(current_scope),
) -> UUID:
    dept = store.get_department(department_id)
    if not dept:
        raise NotFound("Departamento no encontrado")
    _check(scope, dept.company_id, "Departamento no encontrado")
    return department_id
