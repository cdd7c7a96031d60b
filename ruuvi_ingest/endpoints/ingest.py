"""Endpoint de ingesta: recibe los POST de Ruuvi Station y Ruuvi Gateway."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import HTMLResponse

from ..context import ServiceContext, get_context
from ..debug import render_index
from ..schemas import IngestResult

router = APIRouter(tags=["ingest"])
logger = logging.getLogger(__name__)


@router.post("/", response_model=IngestResult)
async def ingest_payload(request: Request, ctx: ServiceContext = Depends(get_context)):
    """Ingesta de un payload opaco.

    El cuerpo se prueba contra ambos esquemas (Station y Gateway). Si
    ninguno coincide se responde 422 con los diagnósticos de los dos; si
    alguno coincide se exportan sus lecturas, aunque sean cero.
    """
    raw = await request.body()
    if ctx.settings.debug:
        logger.info("[HTTP] Request method=%s url=%s bytes=%d", request.method, request.url, len(raw))

    outcome = ctx.dispatcher.ingest(raw)
    ctx.snapshot.record(raw, outcome)

    exported = ctx.exporter.export_all(outcome.readings) if outcome.accepted else 0
    ctx.stats.record_outcome(outcome, exported=exported)

    result = IngestResult.from_outcome(outcome)
    if not outcome.accepted:
        raise HTTPException(status_code=422, detail=result.model_dump(mode="json"))

    if ctx.settings.debug:
        for reading in outcome.readings:
            logger.info(
                "[HTTP] %s id=%s name=%r temp=%.2f hum=%.2f pres=%.0f rssi=%d",
                reading.source.value,
                reading.sensor_id,
                reading.display_name,
                reading.temperature_c,
                reading.humidity_pct,
                reading.pressure_pa,
                reading.rssi_dbm,
            )
    return result


@router.get("/", response_class=HTMLResponse)
def index(ctx: ServiceContext = Depends(get_context)):
    """Banner; en modo debug muestra el último payload y su resultado."""
    return HTMLResponse(render_index(ctx.snapshot, ctx.settings.debug))
