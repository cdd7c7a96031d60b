"""Servicio de ingesta de sensores ambientales BLE (Station + Gateway)."""

__version__ = "0.4.0"
