"""Endpoint de scrape Prometheus."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST

from ..context import ServiceContext, get_context

router = APIRouter(tags=["metrics"])


@router.get("/metrics")
def metrics(ctx: ServiceContext = Depends(get_context)):
    """Últimos valores exportados por sensor, en formato texto Prometheus."""
    return Response(content=ctx.exporter.render(), media_type=CONTENT_TYPE_LATEST)
