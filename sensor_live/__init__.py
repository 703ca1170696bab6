"""Servicio de ventana en vivo para un sensor de temperatura/humedad."""

__version__ = "0.1.0"
