# survey_api/services/companies.py
"""Empresas (tenants) y estadísticas globales de la plataforma."""
from __future__ import annotations

import logging
import re
from datetime import timedelta
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select

from survey_api.core.errors import NotFound, ValidationError
from survey_api.db.types import utcnow
from survey_api.models.assignment import SurveyAssignment
from survey_api.models.company import SUBSCRIPTION_PLANS, Company
from survey_api.models.response import SurveyResponse
from survey_api.models.survey import Survey
from survey_api.models.user import User
from survey_api.services.store import SurveyStore

logger = logging.getLogger(__name__)

DOMAIN_RE = re.compile(r"^[a-z0-9]+([\-.][a-z0-9]+)*\.[a-z]{2,}$")
RECENT_DAYS = 30


def _clean_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    if len(name) < 2:
        raise ValidationError("El nombre de la empresa debe tener al menos 2 caracteres")
    return name


def _clean_domain(domain: Optional[str]) -> Optional[str]:
    domain = (domain or "").strip().lower()
    if not domain:
        return None
    if not DOMAIN_RE.match(domain):
        raise ValidationError(f"Dominio inválido: {domain}")
    return domain


def _check_limits(data: dict[str, Any]) -> None:
    plan = data.get("subscription_plan")
    if plan is not None and plan not in SUBSCRIPTION_PLANS:
        raise ValidationError(f"Plan inválido: {plan}")
    for key in ("max_users", "max_surveys"):
        if data.get(key) is not None and data[key] < 1:
            raise ValidationError(f"'{key}' debe ser al menos 1")


def _ensure_unique(store: SurveyStore, company_id: Optional[UUID], **filters) -> None:
    clash = store.get_company_by(**filters)
    if clash and clash.id != company_id:
        field = next(iter(filters))
        raise ValidationError(f"Ya existe una empresa con ese {'nombre' if field == 'name' else 'dominio'}")


def active_users(store: SurveyStore, company_id: UUID) -> int:
    return store.count(User, User.company_id == company_id, User.is_active.is_(True))


def active_surveys(store: SurveyStore, company_id: UUID) -> int:
    return store.count(Survey, Survey.company_id == company_id, Survey.is_active.is_(True))


def company_stats(store: SurveyStore, company: Company) -> dict[str, int]:
    return {
        "user_count": active_users(store, company.id),
        "admin_count": store.count(
            User, User.company_id == company.id, User.is_active.is_(True), User.role == "admin"
        ),
        "survey_count": active_surveys(store, company.id),
        "active_assignments": store.count(
            SurveyAssignment,
            SurveyAssignment.survey_id.in_(select(Survey.id).where(Survey.company_id == company.id)),
            SurveyAssignment.status.in_(("pending", "in_progress")),
        ),
    }


def get_company(store: SurveyStore, company_id: UUID) -> Company:
    company = store.get_company(company_id)
    if not company:
        raise NotFound("Empresa no encontrada")
    return company


def create_company(store: SurveyStore, data: dict[str, Any]) -> Company:
    data = dict(data)
    data["name"] = _clean_name(data.get("name"))
    data["domain"] = _clean_domain(data.get("domain"))
    _check_limits(data)
    _ensure_unique(store, None, name=data["name"])
    if data["domain"]:
        _ensure_unique(store, None, domain=data["domain"])

    company = Company(**{k: v for k, v in data.items() if v is not None})
    store.add(company)
    store.flush()
    logger.info("Company created id=%s plan=%s", company.id, company.subscription_plan)
    return company


def update_company(store: SurveyStore, company_id: UUID, changes: dict[str, Any]) -> Company:
    """
    Los límites no pueden quedar por debajo del uso actual. Desactivar una
    empresa desactiva también a sus usuarios.
    """
    company = get_company(store, company_id)
    _check_limits(changes)

    if "name" in changes and changes["name"] is not None:
        name = _clean_name(changes["name"])
        _ensure_unique(store, company.id, name=name)
        company.name = name
    if "domain" in changes:
        domain = _clean_domain(changes["domain"])
        if domain:
            _ensure_unique(store, company.id, domain=domain)
        company.domain = domain
    if changes.get("subscription_plan") is not None:
        company.subscription_plan = changes["subscription_plan"]

    if changes.get("max_users") is not None:
        in_use = active_users(store, company.id)
        if changes["max_users"] < in_use:
            raise ValidationError(f"No se puede bajar max_users a menos de {in_use} usuarios activos")
        company.max_users = changes["max_users"]
    if changes.get("max_surveys") is not None:
        in_use = active_surveys(store, company.id)
        if changes["max_surveys"] < in_use:
            raise ValidationError(f"No se puede bajar max_surveys a menos de {in_use} encuestas activas")
        company.max_surveys = changes["max_surveys"]

    if changes.get("is_active") is not None and changes["is_active"] != company.is_active:
        company.is_active = changes["is_active"]
        if not company.is_active:
            for user in company.users:
                user.is_active = False
            logger.info("Company deactivated id=%s users=%d", company.id, len(company.users))

    store.flush()
    return company


def delete_company(store: SurveyStore, company_id: UUID) -> Company:
    """Baja lógica; solo sin usuarios activos. Sus encuestas quedan inactivas."""
    company = get_company(store, company_id)
    in_use = active_users(store, company.id)
    if in_use:
        raise ValidationError(f"La empresa tiene {in_use} usuarios activos; desactívalos primero")
    company.is_active = False
    for survey in company.surveys:
        survey.is_active = False
    store.flush()
    return company


def platform_stats(store: SurveyStore) -> dict[str, Any]:
    since = utcnow() - timedelta(days=RECENT_DAYS)
    return {
        "companies": {
            "total": store.count(Company),
            "active": store.count(Company, Company.is_active.is_(True)),
        },
        "users": {
            "total": store.count(User),
            "active": store.count(User, User.is_active.is_(True)),
        },
        "surveys": {
            "total": store.count(Survey),
            "active": store.count(Survey, Survey.is_active.is_(True), Survey.is_published.is_(True)),
        },
        "total_responses": store.count(SurveyResponse),
        "pending_issues": store.count(
            SurveyAssignment, SurveyAssignment.status.in_(("pending", "refill_requested"))
        ),
        "recent_activity": {
            "companies": store.recent(Company, since),
            "users": store.recent(User, since),
        },
    }
