"""Configuración compartida del servicio."""
