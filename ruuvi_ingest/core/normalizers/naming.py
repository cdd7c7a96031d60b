"""Resolución del nombre visible de un sensor."""

from __future__ import annotations

from typing import Callable, Optional

# Capacidad de solo lectura: sensor_id -> nombre configurado (o None)
NameLookup = Callable[[str], Optional[str]]


def resolve_display_name(
    sensor_id: str,
    default: Optional[str],
    name_lookup: Optional[NameLookup] = None,
) -> str:
    """Prioridad: override configurado > nombre reportado > sensor_id."""
    if name_lookup is not None:
        override = name_lookup(sensor_id)
        if override:
            return override
    return default or sensor_id
