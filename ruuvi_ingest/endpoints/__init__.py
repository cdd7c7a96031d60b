"""Módulo de endpoints HTTP.

Contiene los endpoints del servicio de ingesta organizados por función.
"""

from .health import router as health_router
from .ingest import router as ingest_router
from .metrics import router as metrics_router
from .diagnostics import router as diagnostics_router

__all__ = [
    "health_router",
    "ingest_router",
    "metrics_router",
    "diagnostics_router",
]
