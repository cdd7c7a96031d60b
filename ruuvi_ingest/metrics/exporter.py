"""Exportación de lecturas canónicas como gauges Prometheus.

Un gauge por métrica de tag, etiquetado por nombre visible e ID:

    ruuvi_temperature{name="Office",id="AA:BB:CC:DD:EE:FF"} 21.5

Los gauges de estación (batería y ubicación del teléfono) solo se fijan para
lecturas que vienen del envelope Station; ruuvi_updateat solo cuando el
timestamp se pudo parsear.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from ..core.domain.reading import CanonicalReading
from ..core.normalizers.metric_table import METRICS, TAG_METRIC_NAMES

logger = logging.getLogger(__name__)

METRIC_PREFIX = "ruuvi_"
LABELS = ["name", "id"]


class ReadingExporter:
    """Mantiene los gauges por tag en un CollectorRegistry propio.

    Thread-safe: prometheus_client sincroniza cada gauge internamente.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()

        self._tag_metrics: Dict[str, Gauge] = {
            name: Gauge(METRIC_PREFIX + name, f"Tag {name}", LABELS, registry=self.registry)
            for name in TAG_METRIC_NAMES
        }
        self._update_at = Gauge(
            METRIC_PREFIX + "updateat", "Tag update time (Unix seconds)", LABELS, registry=self.registry
        )
        self._station_battery = Gauge(
            METRIC_PREFIX + "station_batterylevel", "Station battery level", LABELS, registry=self.registry
        )
        self._station_accuracy = Gauge(
            METRIC_PREFIX + "station_location_accuracy", "Station location accuracy", LABELS,
            registry=self.registry,
        )
        self._station_latitude = Gauge(
            METRIC_PREFIX + "station_location_latitude", "Station latitude", LABELS, registry=self.registry
        )
        self._station_longitude = Gauge(
            METRIC_PREFIX + "station_location_longitude", "Station longitude", LABELS, registry=self.registry
        )

    def export(self, reading: CanonicalReading) -> None:
        """Vuelca una lectura en los gauges."""
        labels = {"name": reading.display_name, "id": reading.sensor_id}

        for name in TAG_METRIC_NAMES:
            self._tag_metrics[name].labels(**labels).set(METRICS[name].from_reading(reading))

        updated_at = reading.updated_at_unix
        if updated_at is not None:
            self._update_at.labels(**labels).set(updated_at)

        if reading.has_station_info:
            self._station_battery.labels(**labels).set(reading.battery_level_pct)
            self._station_accuracy.labels(**labels).set(reading.location_accuracy or 0.0)
            self._station_latitude.labels(**labels).set(reading.latitude or 0.0)
            self._station_longitude.labels(**labels).set(reading.longitude or 0.0)

    def export_all(self, readings: Iterable[CanonicalReading]) -> int:
        count = 0
        for reading in readings:
            self.export(reading)
            count += 1
        logger.debug("[EXPORT] readings=%d", count)
        return count

    def render(self) -> bytes:
        """Exposición en formato texto de Prometheus."""
        return generate_latest(self.registry)
