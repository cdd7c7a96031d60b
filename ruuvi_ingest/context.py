"""Colaboradores compartidos por los endpoints de una app."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from common.config import Settings

from .core.dispatcher import IngestionDispatcher
from .debug import DebugSnapshot
from .metrics.exporter import ReadingExporter
from .metrics.service import IngestionStatsService


@dataclass(frozen=True)
class ServiceContext:
    settings: Settings
    dispatcher: IngestionDispatcher
    exporter: ReadingExporter
    snapshot: DebugSnapshot
    stats: IngestionStatsService


def get_context(request: Request) -> ServiceContext:
    """Dependencia FastAPI: contexto de la app que atiende el request."""
    return request.app.state.context
