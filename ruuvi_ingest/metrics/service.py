"""Ingestion statistics service.

Counts payloads and outcomes for the diagnostics endpoint. Only aggregated
counters are kept; no payload content is retained here.
"""

from __future__ import annotations

import threading
import time
from collections import Counter
from datetime import datetime, timezone
from typing import Optional

from ..core.domain.errors import ErrorKind
from ..core.domain.outcome import IngestionOutcome
from .models import IngestionStats


# Diagnósticos de entradas descartadas (en un outcome aceptado, SchemaMismatch
# solo aparece por entradas de gateway sin la forma esperada)
_SKIP_KINDS = {
    ErrorKind.SCHEMA_MISMATCH,
    ErrorKind.STRUCTURAL_MISMATCH,
    ErrorKind.TRUNCATED_INPUT,
    ErrorKind.UNSUPPORTED_FORMAT,
}


class IngestionStatsService:
    """Service for tracking ingestion outcomes.

    Thread-safe singleton.

    Usage:
        service = IngestionStatsService.get_instance()
        service.record_outcome(outcome)
        stats = service.get_stats()
    """

    _instance: Optional["IngestionStatsService"] = None
    _lock = threading.Lock()

    def __init__(self):
        self._start_time = time.time()
        self._data_lock = threading.Lock()

        self._payloads_received = 0
        self._payloads_accepted = 0
        self._payloads_rejected = 0
        self._schema_matches: Counter = Counter()
        self._readings_exported = 0
        self._entries_skipped = 0
        self._timestamp_failures = 0
        self._last_payload_at: Optional[float] = None

    @classmethod
    def get_instance(cls) -> "IngestionStatsService":
        """Get singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset singleton (for testing)."""
        with cls._lock:
            cls._instance = None

    def record_outcome(self, outcome: IngestionOutcome, exported: int = 0) -> None:
        """Record one ingested payload."""
        with self._data_lock:
            self._payloads_received += 1
            self._last_payload_at = time.time()

            if not outcome.accepted:
                self._payloads_rejected += 1
                return

            self._payloads_accepted += 1
            self._schema_matches.update(outcome.matched_schemas)
            self._readings_exported += exported

            for diag in outcome.diagnostics:
                if diag.kind in _SKIP_KINDS:
                    self._entries_skipped += 1
                elif diag.kind is ErrorKind.TIMESTAMP_UNPARSABLE:
                    self._timestamp_failures += 1

    def get_stats(self) -> IngestionStats:
        """Get aggregated counters."""
        with self._data_lock:
            return IngestionStats(
                timestamp=datetime.now(timezone.utc).isoformat(),
                uptime_seconds=round(time.time() - self._start_time, 2),
                payloads_received=self._payloads_received,
                payloads_accepted=self._payloads_accepted,
                payloads_rejected=self._payloads_rejected,
                schema_matches=dict(self._schema_matches),
                readings_exported=self._readings_exported,
                entries_skipped=self._entries_skipped,
                timestamp_failures=self._timestamp_failures,
                last_payload_at=self._last_payload_at,
            )

    def get_diagnostics(self) -> dict:
        """Diagnostics report for the HTTP endpoint."""
        stats = self.get_stats()
        report = stats.to_dict()
        received = stats.payloads_received
        report["rejection_rate"] = round(stats.payloads_rejected / received, 4) if received else 0.0
        return report


def get_ingestion_stats() -> IngestionStatsService:
    """Get the ingestion stats service singleton."""
    return IngestionStatsService.get_instance()
