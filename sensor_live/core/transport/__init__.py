"""Transport layer - Recepción de datos MQTT."""

from .message_handler import MessageHandler
from .mqtt_client import MQTTClient
from .payload import DecodeResult, SensorPayload, decode_payload

__all__ = ["DecodeResult", "MessageHandler", "MQTTClient", "SensorPayload", "decode_payload"]
