# survey_api/core/errors.py
"""
Errores de dominio. Los servicios los lanzan; main.py los traduce a
respuestas JSON con la forma {"detail": <mensaje>, "kind": <tipo>}.
"""
from __future__ import annotations


class ServiceError(Exception):
    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(ServiceError):
    kind = "not_found"
    status_code = 404


class ValidationError(ServiceError):
    kind = "validation_error"
    status_code = 400


class PersistenceError(ServiceError):
    kind = "persistence_error"
    status_code = 500


class InternalError(ServiceError):
    kind = "internal_error"
    status_code = 500


class Forbidden(ServiceError):
    kind = "forbidden"
    status_code = 403


class RateLimited(ServiceError):
    kind = "rate_limited"
    status_code = 429
