"""Rollcall: QR and GPS geofenced classroom attendance."""

__version__ = "1.0.0"
