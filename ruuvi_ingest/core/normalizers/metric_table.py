"""Tabla explícita de métricas por tag.

Cada nombre de métrica canónico tiene:
- un extractor sobre el tag del envelope Station
- el atributo correspondiente en CanonicalReading
- su tipo (entero o flotante)

La tabla se valida al importar el módulo: un nombre sin entrada o un
atributo inexistente falla en el arranque, no en la primera lectura.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Callable, Dict, Tuple, Union

from ..domain.reading import CanonicalReading
from .envelopes import StationTag

TAG_METRIC_NAMES: Tuple[str, ...] = (
    "temperature", "pressure", "humidity",
    "accelx", "accely", "accelz",
    "voltage", "txpower", "rssi",
    "dataformat",
    "movementcounter",
    "measurementsequencenumber",
)


class MetricKind(str, Enum):
    INTEGER = "integer"
    FLOAT = "float"


@dataclass(frozen=True)
class MetricField:
    kind: MetricKind
    reading_attr: str
    extract: Callable[[StationTag], Union[int, float]]

    def from_tag(self, tag: StationTag) -> Union[int, float]:
        value = self.extract(tag)
        if self.kind is MetricKind.INTEGER:
            return int(value)
        return float(value)

    def from_reading(self, reading: CanonicalReading) -> float:
        return float(getattr(reading, self.reading_attr))


METRICS: Dict[str, MetricField] = {
    "temperature": MetricField(MetricKind.FLOAT, "temperature_c", lambda t: t.temperature),
    "pressure": MetricField(MetricKind.FLOAT, "pressure_pa", lambda t: t.pressure),
    "humidity": MetricField(MetricKind.FLOAT, "humidity_pct", lambda t: t.humidity),
    "accelx": MetricField(MetricKind.FLOAT, "accel_x_g", lambda t: t.accel_x),
    "accely": MetricField(MetricKind.FLOAT, "accel_y_g", lambda t: t.accel_y),
    "accelz": MetricField(MetricKind.FLOAT, "accel_z_g", lambda t: t.accel_z),
    "voltage": MetricField(MetricKind.FLOAT, "battery_voltage_v", lambda t: t.voltage),
    "txpower": MetricField(MetricKind.FLOAT, "tx_power_dbm", lambda t: t.tx_power),
    "rssi": MetricField(MetricKind.INTEGER, "rssi_dbm", lambda t: t.rssi),
    "dataformat": MetricField(MetricKind.INTEGER, "data_format_version", lambda t: t.data_format),
    "movementcounter": MetricField(MetricKind.INTEGER, "movement_counter", lambda t: t.movement_counter),
    "measurementsequencenumber": MetricField(
        MetricKind.INTEGER, "measurement_sequence", lambda t: t.measurement_sequence_number
    ),
}


def _check_table() -> None:
    missing = set(TAG_METRIC_NAMES) ^ set(METRICS)
    if missing:
        raise RuntimeError(f"Metric table out of sync: {sorted(missing)}")
    reading_attrs = {f.name for f in fields(CanonicalReading)}
    for name, metric in METRICS.items():
        if metric.reading_attr not in reading_attrs:
            raise RuntimeError(f"Metric {name!r} maps to unknown reading field {metric.reading_attr!r}")


_check_table()


def extract_tag_metrics(tag: StationTag) -> Dict[str, Union[int, float]]:
    """Extrae todas las métricas de un tag, indexadas por atributo de lectura."""
    return {metric.reading_attr: metric.from_tag(tag) for metric in METRICS.values()}
