"""Normalizadores de envelopes Station y Gateway."""

from .gateway import normalize_gateway
from .naming import NameLookup, resolve_display_name
from .station import normalize_station, parse_update_at

__all__ = [
    "normalize_gateway",
    "normalize_station",
    "parse_update_at",
    "NameLookup",
    "resolve_display_name",
]
