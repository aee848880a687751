# survey_api/services/answers.py
"""
Valor de una respuesta como variante etiquetada.

En la BD una respuesta se guarda como cuatro columnas opcionales más un
discriminador (response_type). Dentro de la aplicación se trabaja siempre con
AnswerValue; la forma dispersa solo aparece en to_columns() / from_row().
"""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from survey_api.core.errors import ValidationError


class ResponseKind(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    ARRAY = "array"
    OBJECT = "object"


_COLUMNS = {
    ResponseKind.TEXT: "text_response",
    ResponseKind.NUMBER: "number_response",
    ResponseKind.ARRAY: "array_response",
    ResponseKind.OBJECT: "object_response",
}


def is_blank(value: Any) -> bool:
    """None o cadena vacía: la respuesta se omite."""
    return value is None or (isinstance(value, str) and value == "")


def _number(value: float) -> int | float:
    # Float en BD; los enteros vuelven como int
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _fits_double(value: int) -> bool:
    # number_response es Float: el entero debe sobrevivir la conversión
    try:
        return int(float(value)) == value
    except OverflowError:
        return False


@dataclass(frozen=True)
class AnswerValue:
    kind: ResponseKind
    payload: Any

    @classmethod
    def classify(cls, value: Any) -> Optional["AnswerValue"]:
        """
        Clasifica un valor crudo del formulario:
        número -> number, lista -> array, objeto -> object, resto -> text.
        Devuelve None para valores vacíos (no se guarda fila).
        """
        if is_blank(value):
            return None
        if isinstance(value, bool):
            return cls(ResponseKind.TEXT, "true" if value else "false")
        if isinstance(value, (int, float)):
            if isinstance(value, int) and not _fits_double(value):
                raise ValidationError(f"Número fuera de rango: {value}")
            return cls(ResponseKind.NUMBER, value)
        if isinstance(value, (list, tuple)):
            return cls(ResponseKind.ARRAY, list(value))
        if isinstance(value, Mapping):
            return cls(ResponseKind.OBJECT, dict(value))
        return cls(ResponseKind.TEXT, str(value))

    @classmethod
    def from_row(cls, row: Any) -> "AnswerValue":
        kind = ResponseKind(row.response_type)
        payload = getattr(row, _COLUMNS[kind])
        if kind is ResponseKind.NUMBER and payload is not None:
            payload = _number(payload)
        return cls(kind, payload)

    def to_columns(self) -> dict[str, Any]:
        cols: dict[str, Any] = {c: None for c in _COLUMNS.values()}
        cols["response_type"] = self.kind.value
        cols[_COLUMNS[self.kind]] = self.payload
        return cols

    @property
    def main(self) -> Any:
        """
        Valor principal normalizado: el número o texto directo, o el campo
        "main" de una respuesta compuesta {main, other}.
        """
        if self.kind is ResponseKind.OBJECT:
            return (self.payload or {}).get("main")
        if self.kind is ResponseKind.ARRAY:
            return None
        return self.payload

    @property
    def other(self) -> Any:
        if self.kind is ResponseKind.OBJECT:
            return (self.payload or {}).get("other")
        return None
