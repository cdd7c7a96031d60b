"""Esquemas Pydantic de los dos envelopes JSON de entrada.

Station: lista de tags con valores físicos ya calculados.
Doc: https://docs.ruuvi.com/ruuvi-station-app/gateway

    {
        "deviceId": "...",
        "eventId": "...",
        "batteryLevel": 85,
        "time": "2020-04-06T22:15:14+0200",
        "location": {"accuracy": 12.0, "latitude": 60.1, "longitude": 24.9},
        "tags": [
            {"id": "...", "name": "Office", "temperature": 21.5, ...,
             "updateAt": "2020-04-09T15:01:59+0200"}
        ]
    }

Gateway: mapa dirección → metadatos de recepción + anuncio en hex.

    {"AA:BB:CC:DD:EE:FF": {"rssi": -72, "timestamp": 1700000000, "data": "0201061BFF9904..."}}

La firmware del gateway también lo envía envuelto en
``{"data": {"tags": {...}}}``; se desenvuelve antes de validar.
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, model_validator


def lower_keys(value: Any) -> Any:
    """Pasa a minúsculas las claves de un objeto, solo en el primer nivel.

    El casing de los campos del envelope Station no es estable entre
    versiones de la app. Los valores no se recorren: el payload puede venir
    anidado a cualquier profundidad.
    """
    if isinstance(value, dict):
        return {str(k).lower(): v for k, v in value.items()}
    return value


def _lower_station_keys(value: Any) -> Any:
    # Solo los niveles conocidos: envelope, location y cada tag
    info = lower_keys(value)
    if not isinstance(info, dict):
        return info
    if "location" in info:
        info["location"] = lower_keys(info["location"])
    if isinstance(info.get("tags"), list):
        info["tags"] = [lower_keys(tag) for tag in info["tags"]]
    return info


class _Envelope(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        # null equivale a campo ausente (valor por defecto)
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class StationLocation(_Envelope):
    accuracy: float = 0.0
    latitude: float = 0.0
    longitude: float = 0.0


class StationTag(_Envelope):
    """Tag individual reportado por la app."""

    id: str = ""
    name: str = ""

    temperature: float = 0.0
    pressure: float = 0.0
    humidity: float = 0.0

    accel_x: float = Field(0.0, alias="accelx")
    accel_y: float = Field(0.0, alias="accely")
    accel_z: float = Field(0.0, alias="accelz")

    update_at: str = Field("", alias="updateat")  # "2020-04-09T15:01:59+0200"
    data_format: int = Field(0, alias="dataformat")
    measurement_sequence_number: int = Field(0, alias="measurementsequencenumber")
    movement_counter: int = Field(0, alias="movementcounter")

    rssi: int = 0
    tx_power: float = Field(0.0, alias="txpower")
    voltage: float = 0.0


class StationInfo(_Envelope):
    """Envelope completo de la app Station."""

    device_id: str = Field("", alias="deviceid")
    event_id: str = Field("", alias="eventid")
    battery_level: float = Field(0.0, alias="batterylevel")
    time: str = ""
    location: StationLocation = Field(default_factory=StationLocation)
    tags: List[StationTag]


class GatewayTagEntry(BaseModel):
    """Entrada de un dispositivo en el envelope Gateway."""

    model_config = ConfigDict(extra="ignore")

    rssi: int
    timestamp: int
    data: str


# Solo la forma exterior; cada entrada se valida por separado
GatewayEnvelope = Dict[str, Any]

_gateway_adapter = TypeAdapter(GatewayEnvelope)


def unwrap_gateway_envelope(value: Any) -> Any:
    """Devuelve el mapa de tags si el envelope viene envuelto."""
    if isinstance(value, dict):
        inner = value.get("data")
        if isinstance(inner, dict) and isinstance(inner.get("tags"), dict):
            return inner["tags"]
    return value


def parse_station_envelope(value: Any) -> StationInfo:
    """Valida un envelope Station (claves insensibles a mayúsculas).

    Raises:
        pydantic.ValidationError: si no tiene la forma esperada
    """
    return StationInfo.model_validate(_lower_station_keys(value))


def parse_gateway_envelope(value: Any) -> GatewayEnvelope:
    """Valida la forma exterior del envelope Gateway (mapa dirección → entrada).

    Las direcciones conservan su casing; las entradas quedan sin validar.

    Raises:
        pydantic.ValidationError: si no es un objeto
    """
    return _gateway_adapter.validate_python(unwrap_gateway_envelope(value))


def parse_gateway_entry(value: Any) -> GatewayTagEntry:
    """Valida una entrada del envelope Gateway (claves insensibles a mayúsculas).

    Raises:
        pydantic.ValidationError: si la entrada no tiene la forma esperada
    """
    return GatewayTagEntry.model_validate(lower_keys(value))


def summarize_validation_error(error: ValidationError) -> str:
    """Resumen de una línea de un ValidationError."""
    first = error.errors()[0]
    loc = ".".join(str(p) for p in first.get("loc", ())) or "<root>"
    return f"{error.error_count()} validation error(s); first at {loc}: {first.get('msg')}"
