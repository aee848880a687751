# survey_api/services/comments.py
"""Comentarios sobre una encuesta entre empleados y administradores."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Optional
from uuid import UUID

from survey_api.core.errors import Forbidden, NotFound, ValidationError
from survey_api.db.types import as_utc, utcnow
from survey_api.models.comment import COMMENT_TYPES, SurveyComment
from survey_api.models.user import ROLES, User
from survey_api.services.store import SurveyStore
from survey_api.services.tenancy import CompanyScope

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 2000
EDIT_WINDOW = timedelta(hours=24)


def _is_admin(user: User) -> bool:
    return ROLES.index(user.role) >= ROLES.index("admin")


def _clean_text(text: Optional[str]) -> str:
    text = (text or "").strip()
    if not text:
        raise ValidationError("El comentario no puede estar vacío")
    if len(text) > MAX_COMMENT_LENGTH:
        raise ValidationError(f"El comentario supera los {MAX_COMMENT_LENGTH} caracteres")
    return text


def _visible_survey(store: SurveyStore, survey_id: UUID, user: User):
    survey = store.get_survey(survey_id)
    if not survey or not CompanyScope.for_user(user).allows(survey.company_id):
        raise NotFound("Encuesta no encontrada")
    return survey


def _get_comment(store: SurveyStore, comment_id: UUID, user: User) -> SurveyComment:
    comment = store.get_comment(comment_id)
    if not comment:
        raise NotFound("Comentario no encontrado")
    _visible_survey(store, comment.survey_id, user)
    if not _is_admin(user) and user.id not in (comment.user_id, comment.recipient_id):
        raise NotFound("Comentario no encontrado")
    return comment


def list_comments(
    store: SurveyStore, survey_id: UUID, user: User, *, assignment_id: Optional[UUID] = None
) -> list[SurveyComment]:
    """Los administradores ven todos; un empleado, solo los que escribió o recibió."""
    _visible_survey(store, survey_id, user)
    involving = None if _is_admin(user) else user.id
    return store.comments_for_survey(survey_id, assignment_id=assignment_id, involving=involving)


def create_comment(store: SurveyStore, survey_id: UUID, user: User, data: dict[str, Any]) -> SurveyComment:
    _visible_survey(store, survey_id, user)
    comment_type = data.get("comment_type") or "general"
    if comment_type not in COMMENT_TYPES:
        raise ValidationError(f"Tipo de comentario inválido: {comment_type}")

    assignment_id = data.get("assignment_id")
    if assignment_id is not None:
        assignment = store.get_assignment(assignment_id)
        if not assignment or assignment.survey_id != survey_id:
            raise ValidationError("La asignación no pertenece a la encuesta")

    parent_id = data.get("parent_comment_id")
    if parent_id is not None:
        parent = store.get_comment(parent_id)
        if not parent or parent.survey_id != survey_id:
            raise ValidationError("El comentario padre no pertenece a la encuesta")

    comment = SurveyComment(
        survey_id=survey_id,
        assignment_id=assignment_id,
        user_id=user.id,
        recipient_id=data.get("recipient_id"),
        parent_comment_id=parent_id,
        comment_text=_clean_text(data.get("comment_text")),
        comment_type=comment_type,
    )
    store.add(comment)
    store.flush()
    return comment


def _check_edit_window(comment: SurveyComment, user: User, now: datetime) -> None:
    if _is_admin(user):
        return
    if comment.user_id != user.id:
        raise Forbidden("Solo el autor puede modificar el comentario")
    if now - as_utc(comment.created_at) > EDIT_WINDOW:
        raise Forbidden("El comentario ya no se puede modificar (más de 24 horas)")


def update_comment(
    store: SurveyStore,
    comment_id: UUID,
    user: User,
    changes: dict[str, Any],
    now: Optional[datetime] = None,
) -> SurveyComment:
    """
    El texto lo cambia el autor (o un administrador). is_read lo marca el
    destinatario o un administrador.
    """
    comment = _get_comment(store, comment_id, user)
    now = now or utcnow()

    if changes.get("comment_text") is not None:
        _check_edit_window(comment, user, now)
        comment.comment_text = _clean_text(changes["comment_text"])
    if changes.get("is_read") is not None:
        if comment.recipient_id != user.id and not _is_admin(user):
            raise Forbidden("Solo el destinatario puede marcar el comentario como leído")
        comment.is_read = changes["is_read"]
    store.flush()
    return comment


def delete_comment(store: SurveyStore, comment_id: UUID, user: User, now: Optional[datetime] = None) -> None:
    comment = _get_comment(store, comment_id, user)
    _check_edit_window(comment, user, now or utcnow())
    if store.count_replies(comment.id):
        raise ValidationError("El comentario tiene respuestas y no se puede eliminar")
    store.delete(comment)
    store.flush()
    logger.info("Comment deleted id=%s by=%s", comment_id, user.id)
