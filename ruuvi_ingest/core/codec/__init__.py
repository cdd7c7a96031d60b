"""Codec BLE formato 5 y conversión a unidades físicas."""

from .advertisement_codec import (
    build_advertisement,
    decode,
    encode_advertisement,
    encode_sample,
)
from .units import PhysicalSample, to_physical

__all__ = [
    "build_advertisement",
    "decode",
    "encode_advertisement",
    "encode_sample",
    "PhysicalSample",
    "to_physical",
]
