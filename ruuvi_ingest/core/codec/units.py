"""Conversión de unidades crudas del formato 5 a magnitudes físicas.

Sin redondeo ni recorte: valores fuera del rango documentado (p.ej. humedad
> 100 %) se devuelven tal cual, el formato de cable los permite.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..domain.advertisement import Format5Sample, PowerWord

TEMPERATURE_STEP_C = 0.005
HUMIDITY_STEP_PCT = 0.0025
PRESSURE_OFFSET_PA = 50000
VOLTAGE_BASE_V = 1.6
TX_POWER_BASE_DBM = -40
TX_POWER_STEP_DBM = 2


def temperature_c(raw: int) -> float:
    return raw * TEMPERATURE_STEP_C


def humidity_pct(raw: int) -> float:
    return raw * HUMIDITY_STEP_PCT


def pressure_pa(raw: int) -> int:
    return raw + PRESSURE_OFFSET_PA


def acceleration_g(raw: int) -> float:
    return raw / 1000.0


def battery_voltage_v(power: PowerWord) -> float:
    return VOLTAGE_BASE_V + power.voltage_bits / 1000.0


def tx_power_dbm(power: PowerWord) -> int:
    return TX_POWER_BASE_DBM + TX_POWER_STEP_DBM * power.tx_power_bits


@dataclass(frozen=True)
class PhysicalSample:
    """Magnitudes físicas de una muestra formato 5."""

    temperature_c: float
    humidity_pct: float
    pressure_pa: int
    accel_x_g: float
    accel_y_g: float
    accel_z_g: float
    battery_voltage_v: float
    tx_power_dbm: int
    movement_counter: int
    measurement_sequence: int
    data_format_version: int
    mac_address: str


def to_physical(sample: Format5Sample) -> PhysicalSample:
    """Convierte una muestra cruda a unidades físicas."""
    return PhysicalSample(
        temperature_c=temperature_c(sample.temperature),
        humidity_pct=humidity_pct(sample.humidity),
        pressure_pa=pressure_pa(sample.pressure),
        accel_x_g=acceleration_g(sample.accel_x),
        accel_y_g=acceleration_g(sample.accel_y),
        accel_z_g=acceleration_g(sample.accel_z),
        battery_voltage_v=battery_voltage_v(sample.power),
        tx_power_dbm=tx_power_dbm(sample.power),
        movement_counter=sample.movement_counter,
        measurement_sequence=sample.measurement_sequence,
        data_format_version=sample.format_version,
        mac_address=sample.mac_address,
    )
