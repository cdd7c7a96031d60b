"""Metrics module: Prometheus export of readings + ingestion statistics."""

from .exporter import ReadingExporter
from .models import IngestionStats
from .service import IngestionStatsService, get_ingestion_stats

__all__ = [
    "ReadingExporter",
    "IngestionStats",
    "IngestionStatsService",
    "get_ingestion_stats",
]
