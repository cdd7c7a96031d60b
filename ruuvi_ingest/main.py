"""Aplicación FastAPI del servicio de ingesta Ruuvi.

Ejecutar con el CLI (`ruuvi-ingest`) o directamente con uvicorn:

    uvicorn ruuvi_ingest.main:create_app --factory --port 7361
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI

from common.config import Settings, TagConfig, get_settings, load_tag_config

from . import __version__
from .context import ServiceContext
from .core.dispatcher import IngestionDispatcher
from .debug import DebugSnapshot
from .endpoints import diagnostics_router, health_router, ingest_router, metrics_router
from .metrics import ReadingExporter, get_ingestion_stats
from .metrics.service import IngestionStatsService

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    tag_config: Optional[TagConfig] = None,
    stats: Optional[IngestionStatsService] = None,
) -> FastAPI:
    """Construye la app con sus colaboradores.

    Cada app tiene su propio exporter (registro Prometheus) y snapshot de
    debug; las estadísticas usan el singleton salvo que se inyecten.

    Raises:
        ConfigError: si el YAML de overrides no se puede cargar
    """
    settings = settings or get_settings()
    if tag_config is None:
        tag_config = load_tag_config(settings.config_file)

    app = FastAPI(title="Ruuvi Ingest Service", version=__version__)
    app.state.context = ServiceContext(
        settings=settings,
        dispatcher=IngestionDispatcher(name_lookup=tag_config.lookup),
        exporter=ReadingExporter(),
        snapshot=DebugSnapshot(),
        stats=stats or get_ingestion_stats(),
    )

    app.include_router(ingest_router)
    app.include_router(metrics_router)
    app.include_router(health_router)
    app.include_router(diagnostics_router)

    logger.info(
        "[APP] Ready debug=%s tag_overrides=%d",
        settings.debug, len(tag_config.names()),
    )
    return app
