"""Normalizador del envelope Station (app móvil).

Los valores físicos ya vienen calculados; aquí solo se seleccionan campos,
se parsea el timestamp de cada tag y se copian los datos de la estación
(batería, ubicación) en cada lectura.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, List, Optional

from pydantic import ValidationError

from ..domain.errors import Diagnostic, ErrorKind
from ..domain.outcome import NormalizerResult
from ..domain.reading import CanonicalReading, ReadingSource
from .envelopes import StationInfo, StationTag, parse_station_envelope, summarize_validation_error
from .metric_table import extract_tag_metrics
from .naming import NameLookup, resolve_display_name

logger = logging.getLogger(__name__)

SCHEMA = "station"

# Se prueban en orden: ±hhmm y luego ±hh:mm. Las fracciones de segundo tras
# los segundos se aceptan aunque el formato no las declare.
_UPDATE_AT_FORMATS = (
    re.compile(r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(\.\d+)?([+-]\d{2})(\d{2})"),
    re.compile(r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(\.\d+)?([+-]\d{2}):(\d{2})"),
)


def parse_update_at(value: str) -> datetime:
    """Parsea el timestamp de un tag.

    Formatos aceptados:
        2020-04-09T15:01:59+0200
        2020-04-09T15:01:59+02:00

    Raises:
        ValueError: si ningún formato coincide
    """
    for pattern in _UPDATE_AT_FORMATS:
        match = pattern.fullmatch(value)
        if match is None:
            continue
        base, fraction, hours, minutes = match.groups()
        # %f admite hasta 6 dígitos
        micro = (fraction or ".0")[1:7]
        return datetime.strptime(f"{base}.{micro}{hours}{minutes}", "%Y-%m-%dT%H:%M:%S.%f%z")
    raise ValueError(f"Unable to parse {value!r} as tag update time")


def _tag_reading(
    info: StationInfo,
    tag: StationTag,
    updated_at: Optional[datetime],
    name_lookup: Optional[NameLookup],
) -> CanonicalReading:
    return CanonicalReading(
        sensor_id=tag.id,
        display_name=resolve_display_name(tag.id, tag.name, name_lookup),
        source=ReadingSource.STATION,
        updated_at=updated_at,
        battery_level_pct=float(info.battery_level),
        location_accuracy=info.location.accuracy,
        latitude=info.location.latitude,
        longitude=info.location.longitude,
        **extract_tag_metrics(tag),
    )


def normalize_station(
    envelope: Any,
    name_lookup: Optional[NameLookup] = None,
) -> NormalizerResult:
    """Normaliza un envelope Station ya decodificado de JSON.

    Args:
        envelope: Valor JSON (dict esperado)
        name_lookup: Override opcional de nombres por sensor_id

    Returns:
        NormalizerResult con una lectura por tag, o matched=False si el
        envelope no tiene forma de Station
    """
    try:
        info = parse_station_envelope(envelope)
    except ValidationError as e:
        message = summarize_validation_error(e)
        logger.debug("[STATION] Schema mismatch: %s", message)
        return NormalizerResult(
            schema=SCHEMA,
            matched=False,
            diagnostics=(Diagnostic(ErrorKind.SCHEMA_MISMATCH, SCHEMA, message),),
        )

    readings: List[CanonicalReading] = []
    diagnostics: List[Diagnostic] = []

    for tag in info.tags:
        try:
            updated_at: Optional[datetime] = parse_update_at(tag.update_at)
        except ValueError as e:
            updated_at = None
            logger.info("[STATION] %s (tag id=%r)", e, tag.id)
            diagnostics.append(
                Diagnostic(ErrorKind.TIMESTAMP_UNPARSABLE, SCHEMA, str(e), sensor_id=tag.id)
            )

        reading = _tag_reading(info, tag, updated_at, name_lookup)
        logger.debug(
            "[STATION] Tag %s: id=%r name=%r temp=%f pressure=%f humidity=%f",
            reading.display_name, tag.id, tag.name,
            reading.temperature_c, reading.pressure_pa, reading.humidity_pct,
        )
        readings.append(reading)

    return NormalizerResult(
        schema=SCHEMA,
        matched=True,
        readings=tuple(readings),
        diagnostics=tuple(diagnostics),
    )
