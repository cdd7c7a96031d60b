"""Normalizador del envelope Gateway.

Cada entrada trae el anuncio BLE crudo en hex. Se valida y decodifica
entrada por entrada: una entrada que falla se descarta con un diagnóstico
y el resto del envelope sigue produciendo lecturas (un lote normalmente
incluye sensores de otros tipos o tramas corruptas).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import ValidationError

from ..codec.advertisement_codec import decode
from ..codec.units import to_physical
from ..domain.errors import DecodeError, Diagnostic, ErrorKind
from ..domain.outcome import NormalizerResult
from ..domain.reading import CanonicalReading, ReadingSource
from .envelopes import (
    GatewayTagEntry,
    parse_gateway_entry,
    parse_gateway_envelope,
    summarize_validation_error,
)
from .naming import NameLookup, resolve_display_name

logger = logging.getLogger(__name__)

SCHEMA = "gateway"


def _mismatch(message: str) -> NormalizerResult:
    logger.debug("[GATEWAY] Schema mismatch: %s", message)
    return NormalizerResult(
        schema=SCHEMA,
        matched=False,
        diagnostics=(Diagnostic(ErrorKind.SCHEMA_MISMATCH, SCHEMA, message),),
    )


def _entry_reading(
    address: str,
    entry: GatewayTagEntry,
    updated_at: Optional[datetime],
    name_lookup: Optional[NameLookup],
) -> CanonicalReading:
    """Decodifica una entrada. Lanza DecodeError si el anuncio no es válido."""
    adv = decode(entry.data)
    phys = to_physical(adv.sample)
    return CanonicalReading(
        sensor_id=address,
        display_name=resolve_display_name(address, address, name_lookup),
        source=ReadingSource.GATEWAY,
        temperature_c=phys.temperature_c,
        pressure_pa=float(phys.pressure_pa),
        humidity_pct=phys.humidity_pct,
        accel_x_g=phys.accel_x_g,
        accel_y_g=phys.accel_y_g,
        accel_z_g=phys.accel_z_g,
        battery_voltage_v=phys.battery_voltage_v,
        tx_power_dbm=float(phys.tx_power_dbm),
        # RSSI lo mide el receptor: siempre el del envelope, nunca del payload
        rssi_dbm=entry.rssi,
        data_format_version=phys.data_format_version,
        movement_counter=phys.movement_counter,
        measurement_sequence=phys.measurement_sequence,
        updated_at=updated_at,
        mac_address=phys.mac_address,
    )


def normalize_gateway(
    envelope: Any,
    name_lookup: Optional[NameLookup] = None,
) -> NormalizerResult:
    """Normaliza un envelope Gateway ya decodificado de JSON.

    El orden de las lecturas no está garantizado.
    """
    try:
        entries = parse_gateway_envelope(envelope)
    except ValidationError as e:
        return _mismatch(summarize_validation_error(e))

    if not entries:
        return _mismatch("empty gateway envelope")

    readings: List[CanonicalReading] = []
    diagnostics: List[Diagnostic] = []
    shaped = 0

    for address, raw_entry in entries.items():
        try:
            entry = parse_gateway_entry(raw_entry)
        except ValidationError as e:
            message = summarize_validation_error(e)
            logger.debug("[GATEWAY] Skipping %s: %s", address, message)
            diagnostics.append(
                Diagnostic(ErrorKind.SCHEMA_MISMATCH, SCHEMA, message, sensor_id=address)
            )
            continue
        shaped += 1

        try:
            updated_at: Optional[datetime] = datetime.fromtimestamp(entry.timestamp, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            updated_at = None
            diagnostics.append(
                Diagnostic(
                    ErrorKind.TIMESTAMP_UNPARSABLE,
                    SCHEMA,
                    f"Invalid receive timestamp {entry.timestamp}: {e}",
                    sensor_id=address,
                )
            )

        try:
            reading = _entry_reading(address, entry, updated_at, name_lookup)
        except DecodeError as e:
            logger.debug("[GATEWAY] Skipping %s: %s", address, e)
            diagnostics.append(Diagnostic.from_decode_error(e, SCHEMA, sensor_id=address))
            continue

        readings.append(reading)

    # Ninguna entrada con forma de gateway: el envelope es de otro esquema
    if not shaped:
        return _mismatch(f"no gateway entries; {diagnostics[0].sensor_id}: {diagnostics[0].message}")

    if diagnostics:
        logger.info(
            "[GATEWAY] Envelope entries=%d readings=%d skipped=%d",
            len(entries), len(readings), len(entries) - len(readings),
        )

    return NormalizerResult(
        schema=SCHEMA,
        matched=True,
        readings=tuple(readings),
        diagnostics=tuple(diagnostics),
    )
