"""Núcleo de decodificación y normalización.

- domain/       → Modelos, errores y resultados
- codec/        → Anuncio BLE formato 5 + unidades físicas
- normalizers/  → Envelopes Station y Gateway
- dispatcher    → Payload opaco → IngestionOutcome
"""

from .dispatcher import IngestionDispatcher, ingest

__all__ = ["IngestionDispatcher", "ingest"]
