"""Errores de decodificación y diagnósticos de ingesta.

Los errores del codec se lanzan como excepciones (subclases de ValueError).
Los normalizadores las capturan y las convierten en ``Diagnostic``, que viajan
adjuntos al resultado de la ingesta en lugar de abortarla.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Tipos de error reconocidos por el núcleo."""
    STRUCTURAL_MISMATCH = "StructuralMismatch"
    TRUNCATED_INPUT = "TruncatedInput"
    UNSUPPORTED_FORMAT = "UnsupportedFormat"
    TIMESTAMP_UNPARSABLE = "TimestampUnparsable"
    SCHEMA_MISMATCH = "SchemaMismatch"


class DecodeError(ValueError):
    """Fallo al decodificar un anuncio BLE.

    Attributes:
        field: Campo que se estaba leyendo
        expected: Valor (o tamaño) esperado
        got: Valor (o tamaño) encontrado
        offset: Posición del campo desde el inicio del anuncio
    """

    kind: ErrorKind = ErrorKind.STRUCTURAL_MISMATCH

    def __init__(self, field: str, expected: Any, got: Any, offset: int):
        self.field = field
        self.expected = expected
        self.got = got
        self.offset = offset
        super().__init__(self._describe())

    def _describe(self) -> str:
        return (
            f"{self.kind.value}: field={self.field} offset={self.offset} "
            f"expected={_fmt(self.expected)} got={_fmt(self.got)}"
        )

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "field": self.field,
            "expected": _fmt(self.expected),
            "got": _fmt(self.got),
            "offset": self.offset,
        }


class StructuralMismatch(DecodeError):
    """Constante estructural incorrecta (longitud, tipo, fabricante...)."""
    kind = ErrorKind.STRUCTURAL_MISMATCH


class TruncatedInput(DecodeError):
    """Menos bytes de los que requiere un campo."""
    kind = ErrorKind.TRUNCATED_INPUT


class UnsupportedFormat(DecodeError):
    """Versión de formato distinta de 5."""
    kind = ErrorKind.UNSUPPORTED_FORMAT


def _fmt(value: Any) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        return f"0x{value:X}"
    return str(value)


@dataclass(frozen=True)
class Diagnostic:
    """Diagnóstico no fatal adjunto a un resultado de ingesta."""

    kind: ErrorKind
    schema: str
    message: str
    sensor_id: Optional[str] = None

    @classmethod
    def from_decode_error(
        cls,
        error: DecodeError,
        schema: str,
        sensor_id: Optional[str] = None,
    ) -> "Diagnostic":
        return cls(kind=error.kind, schema=schema, message=str(error), sensor_id=sensor_id)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "schema": self.schema,
            "message": self.message,
            "sensor_id": self.sensor_id,
        }
