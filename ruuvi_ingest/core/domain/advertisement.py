"""Modelo de dominio del anuncio BLE (manufacturer specific data).

Documentación del fabricante:
https://docs.ruuvi.com/communication/bluetooth-advertisements/data-format-5-rawv2
"""

from __future__ import annotations

from dataclasses import dataclass

# Constantes estructurales del anuncio
ADVERTISEMENT_LENGTH = 27
AD_TYPE_MANUFACTURER = 0xFF
MANUFACTURER_ID = 0x0499
FORMAT_RAWV2 = 5

FLAGS_SIZE = 3
HEADER_SIZE = 7  # flags(3) + length(1) + type(1) + manufacturer(2)
PAYLOAD_SIZE = ADVERTISEMENT_LENGTH - 3
FRAME_SIZE = HEADER_SIZE + PAYLOAD_SIZE  # 31 bytes

VOLTAGE_BITS = 11
TX_POWER_BITS = 5


@dataclass(frozen=True)
class PowerWord:
    """Palabra de energía empaquetada (11 + 5 bits).

    Bits más significativos primero: ``[voltage:11][tx_power:5]``.
    - voltage_bits: milivoltios por encima de 1.6 V
    - tx_power_bits: pasos de 2 dBm por encima de -40 dBm
    """

    raw: int

    @property
    def voltage_bits(self) -> int:
        return (self.raw >> TX_POWER_BITS) & ((1 << VOLTAGE_BITS) - 1)

    @property
    def tx_power_bits(self) -> int:
        return self.raw & ((1 << TX_POWER_BITS) - 1)

    @classmethod
    def pack(cls, voltage_bits: int, tx_power_bits: int) -> "PowerWord":
        if not 0 <= voltage_bits < (1 << VOLTAGE_BITS):
            raise ValueError(f"voltage_bits out of range: {voltage_bits}")
        if not 0 <= tx_power_bits < (1 << TX_POWER_BITS):
            raise ValueError(f"tx_power_bits out of range: {tx_power_bits}")
        return cls(raw=(voltage_bits << TX_POWER_BITS) | tx_power_bits)


@dataclass(frozen=True)
class Format5Sample:
    """Campos crudos de un payload formato 5 (RAWv2)."""

    temperature: int  # int16, 0.005 °C
    humidity: int  # uint16, 0.0025 %
    pressure: int  # uint16, Pa con offset -50000
    accel_x: int  # int16, mG
    accel_y: int
    accel_z: int
    power: PowerWord
    movement_counter: int  # uint8
    measurement_sequence: int  # uint16
    mac: bytes  # 6 bytes, orden recibido

    format_version: int = FORMAT_RAWV2

    @property
    def mac_address(self) -> str:
        return ":".join(f"{b:02X}" for b in self.mac)


@dataclass(frozen=True)
class BleAdvertisement:
    """Anuncio BLE decodificado campo a campo."""

    flags: bytes
    length: int
    ad_type: int
    manufacturer_id: int
    payload: bytes
    sample: Format5Sample
