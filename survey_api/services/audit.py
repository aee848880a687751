# survey_api/services/audit.py
from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import UUID

from fastapi import Request
from fastapi.encoders import jsonable_encoder

from survey_api.models.audit import AuditLog
from survey_api.services.store import SurveyStore

logger = logging.getLogger(__name__)


def audit_log(
    store: SurveyStore,
    *,
    user_id: Optional[UUID],
    action: str,
    payload: Optional[dict[str, Any]] = None,
    request: Optional[Request] = None,
) -> None:
    ip = request.client.host if (request and request.client) else None
    ua = request.headers.get("user-agent") if request else None
    store.add(AuditLog(
        user_id=user_id,
        action=action,
        payload=jsonable_encoder(payload) if payload is not None else None,
        ip=ip,
        user_agent=ua,
    ))
    logger.info("audit action=%s user=%s", action, user_id)
    # No hacemos commit aquí: se comitea junto con la transacción del endpoint.
