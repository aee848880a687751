# survey_api/services/assignments.py
"""
Asignación de encuestas a usuarios concretos.

Ciclo de vida: pending -> in_progress -> completed -> refill_requested ->
(pending | completed). Las transiciones válidas están en STATUS_TRANSITIONS.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from survey_api.core.errors import NotFound, ValidationError
from survey_api.db.types import as_utc, utcnow
from survey_api.models.assignment import OPEN_STATUSES, STATUS_TRANSITIONS, SurveyAssignment
from survey_api.models.comment import SurveyComment
from survey_api.models.user import User
from survey_api.services.store import SurveyStore
from survey_api.services.tenancy import CompanyScope

logger = logging.getLogger(__name__)


def get_assignment(store: SurveyStore, assignment_id: UUID, scope: CompanyScope) -> SurveyAssignment:
    assignment = store.get_assignment(assignment_id)
    if not assignment or not scope.allows(assignment.survey.company_id):
        raise NotFound("Asignación no encontrada")
    return assignment


def create_assignments(
    store: SurveyStore,
    survey_id: UUID,
    user_ids: list[UUID],
    *,
    scope: CompanyScope,
    assigned_by: Optional[UUID] = None,
    due_date: Optional[datetime] = None,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> list[SurveyAssignment]:
    """Una asignación por usuario; todo o nada."""
    survey = store.get_survey(survey_id)
    if not survey or not scope.allows(survey.company_id):
        raise NotFound("Encuesta no encontrada")
    if not survey.is_active:
        raise ValidationError("No se puede asignar una encuesta inactiva")
    user_ids = list(dict.fromkeys(user_ids or []))
    if not user_ids:
        raise ValidationError("Se requiere al menos un usuario")

    users = store.users_by_ids(user_ids)
    valid = {u.id for u in users if u.is_active and u.company_id == survey.company_id}
    invalid = [str(uid) for uid in user_ids if uid not in valid]
    if invalid:
        raise ValidationError(f"Usuarios inválidos, inactivos o de otra empresa: {invalid}")

    busy = store.assignments_in_status(survey_id, user_ids, ("pending", "in_progress"))
    if busy:
        raise ValidationError(
            f"Usuarios con una asignación pendiente de esta encuesta: {sorted(str(a.user_id) for a in busy)}"
        )

    if due_date is not None:
        now = now or utcnow()
        due = as_utc(due_date)
        if due <= now:
            raise ValidationError("La fecha límite debe ser futura")
        end = as_utc(survey.end_date)
        if end and due > end:
            raise ValidationError("La fecha límite no puede ser posterior al cierre de la encuesta")

    created = [
        SurveyAssignment(
            survey_id=survey_id, user_id=uid, assigned_by=assigned_by, due_date=due_date, notes=notes
        )
        for uid in user_ids
    ]
    store.add_all(created)
    store.flush()
    logger.info("Survey assigned: survey=%s users=%d", survey_id, len(created))
    return created


def change_status(
    assignment: SurveyAssignment, status: str, now: Optional[datetime] = None
) -> SurveyAssignment:
    if status == assignment.status:
        return assignment
    allowed = STATUS_TRANSITIONS.get(assignment.status, ())
    if status not in allowed:
        raise ValidationError(f"Transición inválida: {assignment.status} -> {status}")
    assignment.status = status
    if status == "completed":
        assignment.completed_at = now or utcnow()
    else:
        assignment.completed_at = None
    return assignment


def update_assignment(
    store: SurveyStore, assignment_id: UUID, changes: dict[str, Any], *, scope: CompanyScope
) -> SurveyAssignment:
    assignment = get_assignment(store, assignment_id, scope)
    if changes.get("status") is not None:
        change_status(assignment, changes["status"])
    if "notes" in changes:
        assignment.notes = changes["notes"]
    if "due_date" in changes:
        assignment.due_date = changes["due_date"]
    store.flush()
    return assignment


def delete_assignment(store: SurveyStore, assignment_id: UUID, *, scope: CompanyScope) -> None:
    assignment = get_assignment(store, assignment_id, scope)
    if store.count_assignment_responses(assignment.id):
        raise ValidationError("La asignación tiene respuestas registradas y no se puede eliminar")
    store.delete(assignment)
    store.flush()


def open_assignment_for(store: SurveyStore, survey_id: UUID, user_id: UUID) -> Optional[SurveyAssignment]:
    """La asignación del usuario que espera un envío, si existe."""
    open_ = store.assignments_in_status(survey_id, [user_id], OPEN_STATUSES)
    return open_[0] if open_ else None


def request_refill(
    store: SurveyStore,
    assignment_id: UUID,
    user: User,
    reason: Optional[str] = None,
) -> SurveyAssignment:
    """
    El usuario pide volver a responder una encuesta ya completada. Deja un
    comentario refill_request para el administrador que la asignó.
    """
    assignment = store.get_assignment(assignment_id)
    if not assignment or assignment.user_id != user.id:
        raise NotFound("Asignación no encontrada")
    if not assignment.survey.allows_refill:
        raise ValidationError("La encuesta no permite volver a responder")
    if assignment.status != "completed":
        raise ValidationError("Solo se puede pedir una recarga de una asignación completada")

    change_status(assignment, "refill_requested")
    assignment.refill_count = (assignment.refill_count or 0) + 1
    reason = (reason or "").strip()
    assignment.notes = f"Refill requested: {reason}" if reason else "Refill requested"
    store.add(SurveyComment(
        survey_id=assignment.survey_id,
        assignment_id=assignment.id,
        user_id=user.id,
        recipient_id=assignment.assigned_by,
        comment_text=reason or "Solicitud de recarga de la encuesta",
        comment_type="refill_request",
    ))
    store.flush()
    logger.info("Refill requested: assignment=%s count=%d", assignment.id, assignment.refill_count)
    return assignment
