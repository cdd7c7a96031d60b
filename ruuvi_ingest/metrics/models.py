"""Data models for ingestion statistics."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass
class IngestionStats:
    """Aggregated ingestion counters since process start."""

    timestamp: str
    uptime_seconds: float

    payloads_received: int
    payloads_accepted: int
    payloads_rejected: int

    # Per-schema matches (station / gateway)
    schema_matches: Dict[str, int]

    readings_exported: int
    entries_skipped: int
    timestamp_failures: int

    last_payload_at: Optional[float]

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "uptime_seconds": self.uptime_seconds,
            "summary": {
                "payloads_received": self.payloads_received,
                "payloads_accepted": self.payloads_accepted,
                "payloads_rejected": self.payloads_rejected,
                "readings_exported": self.readings_exported,
                "entries_skipped": self.entries_skipped,
                "timestamp_failures": self.timestamp_failures,
            },
            "schemas": dict(self.schema_matches),
            "last_payload_at": self.last_payload_at,
        }
