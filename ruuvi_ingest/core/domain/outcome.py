"""Resultados de normalización e ingesta."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from .errors import Diagnostic
from .reading import CanonicalReading


@dataclass(frozen=True)
class NormalizerResult:
    """Resultado de un normalizador.

    matched=False significa que el envelope no tiene la forma del esquema
    (SchemaMismatch); en ese caso readings está vacío.
    """

    schema: str
    matched: bool
    readings: Tuple[CanonicalReading, ...] = ()
    diagnostics: Tuple[Diagnostic, ...] = ()


@dataclass(frozen=True)
class IngestionOutcome:
    """Resultado de ingerir un payload opaco.

    accepted=True si al menos un esquema coincidió, aunque todas sus
    entradas hayan sido descartadas. Si ningún esquema coincide el payload
    se rechaza y los diagnósticos de ambos esquemas se conservan.
    """

    results: Tuple[NormalizerResult, ...] = field(default_factory=tuple)

    @property
    def accepted(self) -> bool:
        return any(r.matched for r in self.results)

    @property
    def readings(self) -> List[CanonicalReading]:
        out: List[CanonicalReading] = []
        for r in self.results:
            out.extend(r.readings)
        return out

    @property
    def diagnostics(self) -> List[Diagnostic]:
        # Aceptado: solo los diagnósticos de los esquemas que coincidieron
        accepted = self.accepted
        out: List[Diagnostic] = []
        for r in self.results:
            if accepted and not r.matched:
                continue
            out.extend(r.diagnostics)
        return out

    @property
    def matched_schemas(self) -> List[str]:
        return [r.schema for r in self.results if r.matched]

    def to_dict(self) -> dict:
        return {
            "accepted": self.accepted,
            "schemas": self.matched_schemas,
            "readings": [r.to_dict() for r in self.readings],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }
