"""Diagnostics endpoint for ingestion observability.

Only aggregated counters are exposed: payloads received, accepted and
rejected, matches per schema, readings exported and entries skipped.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..context import ServiceContext, get_context

router = APIRouter(tags=["diagnostics"])


@router.get("/api/ingestion/diagnostics")
def get_ingestion_diagnostics(ctx: ServiceContext = Depends(get_context)):
    """Get ingestion counters.

    Example response:
    ```json
    {
        "timestamp": "2026-01-29T12:00:00+00:00",
        "uptime_seconds": 3600.5,
        "summary": {
            "payloads_received": 120,
            "payloads_accepted": 118,
            "payloads_rejected": 2,
            "readings_exported": 354,
            "entries_skipped": 1,
            "timestamp_failures": 0
        },
        "schemas": {"station": 60, "gateway": 58},
        "last_payload_at": 1769688000.0,
        "rejection_rate": 0.0167
    }
    ```
    """
    return ctx.stats.get_diagnostics()
