"""Dispatcher de ingesta: payload opaco → IngestionOutcome.

No hay byte de tipo: la detección de esquema es "¿parsea?". Ambos
normalizadores se prueban de forma independiente sobre el mismo JSON y las
lecturas de todos los que coinciden se concatenan.

El dispatcher nunca lanza por entrada malformada; es una condición esperada
en esta frontera.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional, Sequence, Tuple, Union

from .domain.errors import Diagnostic, ErrorKind
from .domain.outcome import IngestionOutcome, NormalizerResult
from .normalizers.gateway import SCHEMA as GATEWAY_SCHEMA
from .normalizers.gateway import normalize_gateway
from .normalizers.naming import NameLookup
from .normalizers.station import SCHEMA as STATION_SCHEMA
from .normalizers.station import normalize_station

logger = logging.getLogger(__name__)

Normalizer = Callable[[Any, Optional[NameLookup]], NormalizerResult]

DEFAULT_NORMALIZERS: Tuple[Tuple[str, Normalizer], ...] = (
    (STATION_SCHEMA, normalize_station),
    (GATEWAY_SCHEMA, normalize_gateway),
)


class IngestionDispatcher:
    """Prueba todos los normalizadores sobre un payload y fusiona resultados.

    Sin estado mutable: seguro para invocar concurrentemente.

    Uso:
        dispatcher = IngestionDispatcher(name_lookup=tag_config.lookup)
        outcome = dispatcher.ingest(raw_body)
    """

    def __init__(
        self,
        name_lookup: Optional[NameLookup] = None,
        normalizers: Sequence[Tuple[str, Normalizer]] = DEFAULT_NORMALIZERS,
    ):
        self._name_lookup = name_lookup
        self._normalizers = tuple(normalizers)

    def ingest(self, raw: Union[bytes, str]) -> IngestionOutcome:
        """Ingiere un payload crudo.

        Returns:
            IngestionOutcome; outcome.accepted es False si ningún esquema coincide
        """
        try:
            envelope = _decode_json(raw)
        except (ValueError, RecursionError) as e:
            message = f"Invalid JSON payload: {e}"
            logger.warning("[DISPATCH] %s", message)
            return IngestionOutcome(
                results=tuple(
                    NormalizerResult(
                        schema=schema,
                        matched=False,
                        diagnostics=(Diagnostic(ErrorKind.SCHEMA_MISMATCH, schema, message),),
                    )
                    for schema, _ in self._normalizers
                )
            )

        return self.ingest_json(envelope)

    def ingest_json(self, envelope: Any) -> IngestionOutcome:
        """Ingiere un valor JSON ya decodificado."""
        results = tuple(
            normalizer(envelope, self._name_lookup)
            for _, normalizer in self._normalizers
        )
        outcome = IngestionOutcome(results=results)

        if outcome.accepted:
            logger.debug(
                "[DISPATCH] schemas=%s readings=%d diagnostics=%d",
                outcome.matched_schemas, len(outcome.readings), len(outcome.diagnostics),
            )
        else:
            logger.warning(
                "[DISPATCH] Payload rejected by all schemas: %s",
                "; ".join(f"{d.schema}: {d.message}" for d in outcome.diagnostics),
            )
        return outcome


def _decode_json(raw: Union[bytes, str]) -> Any:
    # json.JSONDecodeError y UnicodeDecodeError son ValueError; un anidamiento
    # excesivo lanza RecursionError
    if isinstance(raw, (bytes, bytearray)):
        raw = bytes(raw).decode("utf-8")
    return json.loads(raw)


def ingest(raw: Union[bytes, str], name_lookup: Optional[NameLookup] = None) -> IngestionOutcome:
    """Atajo funcional de IngestionDispatcher.ingest."""
    return IngestionDispatcher(name_lookup=name_lookup).ingest(raw)
