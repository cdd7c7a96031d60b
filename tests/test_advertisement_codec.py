"""Tests del codec de anuncios BLE formato 5.

Cubre:
1. Vector de prueba del fabricante
2. Validación estructural campo a campo
3. Longitud exacta de la trama (31 bytes)
4. Codificación inversa

Ejecutar:
    pytest tests/test_advertisement_codec.py -v
"""

import pytest

from ruuvi_ingest.core.codec import (
    build_advertisement,
    decode,
    encode_advertisement,
    encode_sample,
    to_physical,
)
from ruuvi_ingest.core.domain import (
    ErrorKind,
    Format5Sample,
    PowerWord,
    StructuralMismatch,
    TruncatedInput,
    UnsupportedFormat,
)
from ruuvi_ingest.core.domain.advertisement import FRAME_SIZE, PAYLOAD_SIZE


HEADER_HEX = "0201061BFF9904"
VECTOR_PAYLOAD_HEX = "0512FC5394C37C0004FFFC040CAC364200CDCBB8334C884F"
VECTOR_HEX = HEADER_HEX + VECTOR_PAYLOAD_HEX


def _sample(**overrides) -> Format5Sample:
    fields = dict(
        temperature=0,
        humidity=0,
        pressure=0,
        accel_x=0,
        accel_y=0,
        accel_z=0,
        power=PowerWord.pack(voltage_bits=0, tx_power_bits=0),
        movement_counter=0,
        measurement_sequence=0,
        mac=bytes(6),
    )
    fields.update(overrides)
    return Format5Sample(**fields)


# Extremos de cada campo del formato 5
BOUNDARY_CASES = {
    "all_zero": _sample(),
    "int16_min": _sample(temperature=-32768, accel_x=-32768, accel_y=-32768, accel_z=-32768),
    "int16_max": _sample(temperature=32767, accel_x=32767, accel_y=32767, accel_z=32767),
    "uint16_max": _sample(humidity=0xFFFF, pressure=0xFFFF, measurement_sequence=0xFFFF),
    "power_max": _sample(power=PowerWord.pack(voltage_bits=2047, tx_power_bits=31)),
    "power_voltage_only": _sample(power=PowerWord.pack(voltage_bits=2047, tx_power_bits=0)),
    "power_tx_only": _sample(power=PowerWord.pack(voltage_bits=0, tx_power_bits=31)),
    "uint8_max": _sample(movement_counter=0xFF),
    "mac_all_ones": _sample(mac=b"\xff" * 6),
}
BOUNDARY_IDS = list(BOUNDARY_CASES)
BOUNDARY_SAMPLES = list(BOUNDARY_CASES.values())


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def vector_bytes() -> bytes:
    """Trama completa del vector oficial del fabricante."""
    return bytes.fromhex(VECTOR_HEX)


@pytest.fixture
def sample() -> Format5Sample:
    """Muestra cruda con valores arbitrarios dentro de rango."""
    return Format5Sample(
        temperature=-1234,
        humidity=40000,
        pressure=51000,
        accel_x=-1000,
        accel_y=0,
        accel_z=1000,
        power=PowerWord.pack(voltage_bits=1400, tx_power_bits=20),
        movement_counter=7,
        measurement_sequence=65000,
        mac=bytes.fromhex("AABBCCDDEEFF"),
    )


def _replace_byte(frame: bytes, index: int, value: int) -> bytes:
    data = bytearray(frame)
    data[index] = value
    return bytes(data)


# =============================================================================
# TEST 1: VECTOR DEL FABRICANTE
# =============================================================================

class TestVendorVector:
    """El vector publicado decodifica a los valores documentados."""

    def test_raw_fields(self):
        adv = decode(VECTOR_HEX)
        s = adv.sample

        assert adv.flags == bytes.fromhex("020106")
        assert adv.length == 27
        assert adv.ad_type == 0xFF
        assert adv.manufacturer_id == 0x0499
        assert adv.payload == bytes.fromhex(VECTOR_PAYLOAD_HEX)

        assert s.format_version == 5
        assert s.temperature == 4860
        assert s.humidity == 21396
        assert s.pressure == 50044
        assert (s.accel_x, s.accel_y, s.accel_z) == (4, -4, 1036)
        assert s.power.raw == 0xAC36
        assert s.movement_counter == 66
        assert s.measurement_sequence == 205
        assert s.mac_address == "CB:B8:33:4C:88:4F"

    def test_physical_values(self):
        phys = to_physical(decode(VECTOR_HEX).sample)

        assert phys.temperature_c == pytest.approx(24.3)
        assert phys.humidity_pct == pytest.approx(53.49)
        assert phys.pressure_pa == 100044
        assert phys.accel_x_g == pytest.approx(0.004)
        assert phys.accel_y_g == pytest.approx(-0.004)
        assert phys.accel_z_g == pytest.approx(1.036)
        assert phys.battery_voltage_v == pytest.approx(2.977)
        assert phys.tx_power_dbm == 4

    def test_accepts_bytes(self, vector_bytes):
        assert decode(vector_bytes) == decode(VECTOR_HEX)

    def test_accepts_lowercase_hex(self):
        assert decode(VECTOR_HEX.lower()).sample.mac_address == "CB:B8:33:4C:88:4F"

    def test_scenario_temperature_6_5(self, vector_bytes):
        """Temperatura cruda 0x0514 (1300) son 6.5 °C."""
        frame = bytearray(vector_bytes)
        frame[8:10] = bytes.fromhex("0514")

        phys = to_physical(decode(bytes(frame)).sample)

        assert phys.temperature_c == pytest.approx(6.5)


# =============================================================================
# TEST 2: VALIDACIÓN ESTRUCTURAL
# =============================================================================

class TestStructuralChecks:
    """Cada constante estructural se valida por separado."""

    def test_flags_are_not_validated(self, vector_bytes):
        frame = b"\x00\x00\x00" + vector_bytes[3:]
        assert decode(frame).flags == b"\x00\x00\x00"

    def test_wrong_length_byte(self, vector_bytes):
        with pytest.raises(StructuralMismatch) as exc:
            decode(_replace_byte(vector_bytes, 3, 0x1A))

        assert exc.value.field == "length"
        assert exc.value.offset == 3
        assert exc.value.expected == 27
        assert exc.value.got == 0x1A

    def test_wrong_ad_type(self, vector_bytes):
        with pytest.raises(StructuralMismatch) as exc:
            decode(_replace_byte(vector_bytes, 4, 0x16))

        assert exc.value.field == "ad_type"
        assert exc.value.offset == 4

    def test_manufacturer_id_is_little_endian(self, vector_bytes):
        frame = bytearray(vector_bytes)
        frame[5:7] = b"\x04\x99"  # 0x0499 big-endian: incorrecto

        with pytest.raises(StructuralMismatch) as exc:
            decode(bytes(frame))

        assert exc.value.field == "manufacturer_id"
        assert exc.value.got == 0x9904

    def test_wrong_manufacturer(self, vector_bytes):
        frame = bytearray(vector_bytes)
        frame[5:7] = b"\x4C\x00"

        with pytest.raises(StructuralMismatch) as exc:
            decode(bytes(frame))

        assert exc.value.kind is ErrorKind.STRUCTURAL_MISMATCH

    def test_unsupported_format_version(self, vector_bytes):
        with pytest.raises(UnsupportedFormat) as exc:
            decode(_replace_byte(vector_bytes, 7, 0x06))

        assert exc.value.kind is ErrorKind.UNSUPPORTED_FORMAT
        assert exc.value.field == "format_version"
        assert exc.value.got == 6
        assert exc.value.offset == 7

    def test_format_3_is_unsupported(self, vector_bytes):
        with pytest.raises(UnsupportedFormat):
            decode(_replace_byte(vector_bytes, 7, 0x03))

    def test_checks_run_in_layout_order(self, vector_bytes):
        """Con longitud y fabricante mal, el primer error es la longitud."""
        frame = _replace_byte(_replace_byte(vector_bytes, 3, 0x00), 5, 0x00)

        with pytest.raises(StructuralMismatch) as exc:
            decode(frame)

        assert exc.value.field == "length"

    def test_invalid_hex(self):
        with pytest.raises(StructuralMismatch) as exc:
            decode("0201061BFF99ZZ")

        assert exc.value.field == "hex"

    def test_non_string_input(self):
        with pytest.raises(StructuralMismatch):
            decode(12345)

    def test_error_message_names_field_and_offset(self, vector_bytes):
        with pytest.raises(StructuralMismatch) as exc:
            decode(_replace_byte(vector_bytes, 4, 0x16))

        message = str(exc.value)
        assert "field=ad_type" in message
        assert "offset=4" in message
        assert "expected=0xFF" in message
        assert "got=0x16" in message


# =============================================================================
# TEST 3: LONGITUD DE LA TRAMA
# =============================================================================

class TestFrameLength:
    """La trama válida mide exactamente 31 bytes."""

    def test_frame_size_constant(self, vector_bytes):
        assert FRAME_SIZE == 31
        assert PAYLOAD_SIZE == 24
        assert len(vector_bytes) == FRAME_SIZE

    def test_empty_input(self):
        with pytest.raises(TruncatedInput) as exc:
            decode("")

        assert exc.value.field == "flags"

    def test_truncated_header(self):
        with pytest.raises(TruncatedInput) as exc:
            decode("0201061BFF99")

        assert exc.value.field == "manufacturer_id"
        assert exc.value.offset == 5

    def test_truncated_payload(self, vector_bytes):
        with pytest.raises(TruncatedInput) as exc:
            decode(vector_bytes[:-1])

        assert exc.value.field == "payload"
        assert exc.value.expected == 24
        assert exc.value.got == 23

    def test_trailing_bytes_rejected(self, vector_bytes):
        with pytest.raises(StructuralMismatch) as exc:
            decode(vector_bytes + b"\x00")

        assert exc.value.field == "payload"
        assert exc.value.got == 25


# =============================================================================
# TEST 4: CODIFICACIÓN
# =============================================================================

class TestEncoding:
    """La codificación produce tramas que el decodificador acepta."""

    def test_vector_re_encodes_identically(self, vector_bytes):
        assert encode_advertisement(decode(vector_bytes)) == vector_bytes

    def test_built_advertisement_decodes_to_sample(self, sample):
        frame = encode_advertisement(build_advertisement(sample))

        assert len(frame) == FRAME_SIZE
        assert decode(frame).sample == sample

    @pytest.mark.parametrize("sample", BOUNDARY_SAMPLES, ids=BOUNDARY_IDS)
    def test_boundary_samples_survive_encoding(self, sample):
        frame = encode_advertisement(build_advertisement(sample))

        assert len(frame) == FRAME_SIZE
        assert decode(frame).sample == sample

    def test_encode_sample_size(self, sample):
        assert len(encode_sample(sample)) == PAYLOAD_SIZE

    def test_power_word_packing(self):
        power = PowerWord.pack(voltage_bits=1377, tx_power_bits=22)

        assert power.raw == 0xAC36
        assert power.voltage_bits == 1377
        assert power.tx_power_bits == 22

    def test_power_word_range(self):
        with pytest.raises(ValueError):
            PowerWord.pack(voltage_bits=2048, tx_power_bits=0)
        with pytest.raises(ValueError):
            PowerWord.pack(voltage_bits=0, tx_power_bits=32)
