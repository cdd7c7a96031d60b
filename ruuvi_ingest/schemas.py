from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .core.domain.errors import Diagnostic
from .core.domain.outcome import IngestionOutcome
from .core.domain.reading import CanonicalReading


class ReadingOut(BaseModel):
    sensor_id: str
    display_name: str
    source: str

    temperature_c: float
    pressure_pa: float
    humidity_pct: float
    accel_x_g: float
    accel_y_g: float
    accel_z_g: float
    battery_voltage_v: float
    tx_power_dbm: float
    rssi_dbm: int
    data_format_version: int
    movement_counter: int
    measurement_sequence: int

    updated_at: Optional[datetime] = None

    battery_level_pct: Optional[float] = None
    location_accuracy: Optional[float] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    mac_address: Optional[str] = None

    @classmethod
    def from_reading(cls, reading: CanonicalReading) -> "ReadingOut":
        data = reading.to_dict()
        data["updated_at"] = reading.updated_at
        return cls(**data)


class DiagnosticOut(BaseModel):
    kind: str
    schema_name: str
    message: str
    sensor_id: Optional[str] = None

    @classmethod
    def from_diagnostic(cls, diag: Diagnostic) -> "DiagnosticOut":
        return cls(
            kind=diag.kind.value,
            schema_name=diag.schema,
            message=diag.message,
            sensor_id=diag.sensor_id,
        )


class IngestResult(BaseModel):
    accepted: bool
    schemas: List[str] = Field(default_factory=list)
    readings: List[ReadingOut] = Field(default_factory=list)
    diagnostics: List[DiagnosticOut] = Field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome: IngestionOutcome) -> "IngestResult":
        return cls(
            accepted=outcome.accepted,
            schemas=outcome.matched_schemas,
            readings=[ReadingOut.from_reading(r) for r in outcome.readings],
            diagnostics=[DiagnosticOut.from_diagnostic(d) for d in outcome.diagnostics],
        )
