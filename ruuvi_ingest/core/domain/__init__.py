"""Domain layer - Modelos y contratos."""

from .advertisement import BleAdvertisement, Format5Sample, PowerWord
from .errors import (
    DecodeError,
    Diagnostic,
    ErrorKind,
    StructuralMismatch,
    TruncatedInput,
    UnsupportedFormat,
)
from .outcome import IngestionOutcome, NormalizerResult
from .reading import CanonicalReading, ReadingSource

__all__ = [
    "BleAdvertisement",
    "Format5Sample",
    "PowerWord",
    "DecodeError",
    "Diagnostic",
    "ErrorKind",
    "StructuralMismatch",
    "TruncatedInput",
    "UnsupportedFormat",
    "IngestionOutcome",
    "NormalizerResult",
    "CanonicalReading",
    "ReadingSource",
]
