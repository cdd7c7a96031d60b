"""Codec del anuncio BLE del fabricante (formato 5 / RAWv2).

Layout (offsets desde el inicio del anuncio):

    0-2    flags                 raw (sin validar)
    3      length                u8, == 27
    4      AD type               u8, == 0xFF
    5-6    manufacturer ID       u16 little-endian, == 0x0499
    7      formato               u8, == 5
    8-9    temperatura           i16 big-endian
    10-11  humedad               u16 big-endian
    12-13  presión               u16 big-endian
    14-19  aceleración x/y/z     i16 big-endian
    20-21  power word            u16 big-endian, [voltage:11][tx_power:5]
    22     movement counter      u8
    23-24  measurement sequence  u16 big-endian
    25-30  MAC                   6 bytes

Los campos del sensor van en orden de red (big-endian); solo el ID de
fabricante va little-endian.
"""

from __future__ import annotations

import struct
from typing import Union

from ..domain.advertisement import (
    AD_TYPE_MANUFACTURER,
    ADVERTISEMENT_LENGTH,
    FLAGS_SIZE,
    FORMAT_RAWV2,
    MANUFACTURER_ID,
    BleAdvertisement,
    Format5Sample,
    PowerWord,
)
from ..domain.errors import StructuralMismatch, TruncatedInput, UnsupportedFormat


DEFAULT_FLAGS = b"\x02\x01\x06"

_SAMPLE_STRUCT = struct.Struct(">BhHHhhhHBH6s")


class _ByteCursor:
    """Consume bytes secuencialmente; falla al leer más allá del final."""

    def __init__(self, data: bytes):
        self._data = data
        self.offset = 0

    def take(self, size: int, field: str) -> bytes:
        remaining = len(self._data) - self.offset
        if remaining < size:
            raise TruncatedInput(field, expected=size, got=remaining, offset=self.offset)
        chunk = self._data[self.offset:self.offset + size]
        self.offset += size
        return chunk

    def u8(self, field: str) -> int:
        return self.take(1, field)[0]

    def u16_le(self, field: str) -> int:
        return struct.unpack("<H", self.take(2, field))[0]

    def u16_be(self, field: str) -> int:
        return struct.unpack(">H", self.take(2, field))[0]

    def i16_be(self, field: str) -> int:
        return struct.unpack(">h", self.take(2, field))[0]

    def rest(self) -> bytes:
        return self._data[self.offset:]


def _to_bytes(data: Union[str, bytes, bytearray]) -> bytes:
    if isinstance(data, (bytes, bytearray)):
        return bytes(data)
    if not isinstance(data, str):
        raise StructuralMismatch("hex", expected="hex string", got=type(data).__name__, offset=0)
    try:
        return bytes.fromhex(data.strip())
    except ValueError as e:
        raise StructuralMismatch("hex", expected="hex string", got=str(e), offset=0) from e


def _expect(field: str, expected: int, got: int, offset: int) -> None:
    if got != expected:
        raise StructuralMismatch(field, expected=expected, got=got, offset=offset)


def decode(data: Union[str, bytes, bytearray]) -> BleAdvertisement:
    """Decodifica un anuncio BLE (hex o bytes) a BleAdvertisement.

    Raises:
        StructuralMismatch: constante estructural incorrecta o hex inválido
        TruncatedInput: faltan bytes para un campo
        UnsupportedFormat: versión de formato distinta de 5
    """
    raw = _to_bytes(data)
    cursor = _ByteCursor(raw)

    flags = cursor.take(FLAGS_SIZE, "flags")

    offset = cursor.offset
    length = cursor.u8("length")
    _expect("length", ADVERTISEMENT_LENGTH, length, offset)

    offset = cursor.offset
    ad_type = cursor.u8("ad_type")
    _expect("ad_type", AD_TYPE_MANUFACTURER, ad_type, offset)

    offset = cursor.offset
    manufacturer_id = cursor.u16_le("manufacturer_id")
    _expect("manufacturer_id", MANUFACTURER_ID, manufacturer_id, offset)

    # Copia del resto; no avanza el cursor.
    payload = cursor.rest()
    expected_size = length - 3
    if len(payload) < expected_size:
        raise TruncatedInput("payload", expected=expected_size, got=len(payload), offset=cursor.offset)
    if len(payload) > expected_size:
        raise StructuralMismatch("payload", expected=expected_size, got=len(payload), offset=cursor.offset)

    offset = cursor.offset
    format_version = cursor.u8("format_version")
    if format_version != FORMAT_RAWV2:
        raise UnsupportedFormat("format_version", expected=FORMAT_RAWV2, got=format_version, offset=offset)

    sample = Format5Sample(
        temperature=cursor.i16_be("temperature"),
        humidity=cursor.u16_be("humidity"),
        pressure=cursor.u16_be("pressure"),
        accel_x=cursor.i16_be("accel_x"),
        accel_y=cursor.i16_be("accel_y"),
        accel_z=cursor.i16_be("accel_z"),
        power=PowerWord(cursor.u16_be("power")),
        movement_counter=cursor.u8("movement_counter"),
        measurement_sequence=cursor.u16_be("measurement_sequence"),
        mac=cursor.take(6, "mac"),
        format_version=format_version,
    )

    return BleAdvertisement(
        flags=flags,
        length=length,
        ad_type=ad_type,
        manufacturer_id=manufacturer_id,
        payload=payload,
        sample=sample,
    )


def encode_sample(sample: Format5Sample) -> bytes:
    """Serializa un Format5Sample a los 24 bytes del payload."""
    return _SAMPLE_STRUCT.pack(
        sample.format_version,
        sample.temperature,
        sample.humidity,
        sample.pressure,
        sample.accel_x,
        sample.accel_y,
        sample.accel_z,
        sample.power.raw,
        sample.movement_counter,
        sample.measurement_sequence,
        sample.mac,
    )


def encode_advertisement(adv: BleAdvertisement) -> bytes:
    """Serializa un BleAdvertisement a bytes de anuncio."""
    return (
        adv.flags
        + bytes([adv.length, adv.ad_type])
        + struct.pack("<H", adv.manufacturer_id)
        + encode_sample(adv.sample)
    )


def build_advertisement(sample: Format5Sample, flags: bytes = DEFAULT_FLAGS) -> BleAdvertisement:
    """Construye un anuncio válido a partir de una muestra."""
    return BleAdvertisement(
        flags=flags,
        length=ADVERTISEMENT_LENGTH,
        ad_type=AD_TYPE_MANUFACTURER,
        manufacturer_id=MANUFACTURER_ID,
        payload=encode_sample(sample),
        sample=sample,
    )
