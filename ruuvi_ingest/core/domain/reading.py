"""Modelo canónico de lectura de sensor."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class ReadingSource(str, Enum):
    """Origen de la lectura."""
    STATION = "station"
    GATEWAY = "gateway"


@dataclass(frozen=True)
class CanonicalReading:
    """Lectura normalizada - una por sensor físico y payload ingerido.

    Este es el contrato único que sale del núcleo, independiente del esquema:
    Station / Gateway → Normalizer → CanonicalReading → Exporter
    """

    sensor_id: str
    display_name: str
    source: ReadingSource

    temperature_c: float = 0.0
    pressure_pa: float = 0.0
    humidity_pct: float = 0.0
    accel_x_g: float = 0.0
    accel_y_g: float = 0.0
    accel_z_g: float = 0.0
    battery_voltage_v: float = 0.0
    tx_power_dbm: float = 0.0
    rssi_dbm: int = 0
    data_format_version: int = 0
    movement_counter: int = 0
    measurement_sequence: int = 0

    updated_at: Optional[datetime] = None

    # Solo lecturas de Station (datos de la estación, no del sensor)
    battery_level_pct: Optional[float] = None
    location_accuracy: Optional[float] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    # Solo lecturas de Gateway: MAC embebida en el anuncio
    mac_address: Optional[str] = None

    @property
    def updated_at_unix(self) -> Optional[float]:
        if self.updated_at is None:
            return None
        return self.updated_at.timestamp()

    @property
    def has_station_info(self) -> bool:
        return self.battery_level_pct is not None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["source"] = self.source.value
        data["updated_at"] = self.updated_at.isoformat() if self.updated_at else None
        return data
