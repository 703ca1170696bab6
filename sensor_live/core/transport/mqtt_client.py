"""Cliente MQTT para recepción de lecturas."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import paho.mqtt.client as mqtt

logger = logging.getLogger(__name__)

MessageHandler = Callable[[str, bytes], None]


class MQTTClient:
    """Cliente MQTT ligero para recepción de lecturas.

    Responsabilidades:
    - Conexión/desconexión a broker MQTT (TCP o WebSocket, con o sin TLS)
    - Suscripción al topic (se repite en cada reconexión)
    - Delegación de mensajes a handler

    La reconexión es de paho (loop_start + connect_async): el motor solo
    observa que dejan de llegar mensajes.
    """

    def __init__(
        self,
        broker_host: str = "localhost",
        broker_port: int = 1883,
        topic: str = "jetson/box/sensor",
        username: Optional[str] = None,
        password: Optional[str] = None,
        client_id: str = "sensor-live",
        transport: str = "tcp",
        ws_path: str = "/mqtt",
        use_tls: bool = False,
        connect_timeout: float = 5.0,
    ):
        self.broker_host = broker_host
        self.broker_port = broker_port
        self.topic = topic
        self.username = username
        self.password = password
        self.client_id = f"{client_id}-{int(time.time())}"
        self.transport = transport
        self.ws_path = ws_path
        self.use_tls = use_tls
        self.connect_timeout = connect_timeout

        self._client: Optional[mqtt.Client] = None
        self._connected = False
        self._message_handler: Optional[MessageHandler] = None

    @classmethod
    def from_settings(cls, settings) -> "MQTTClient":
        return cls(
            broker_host=settings.mqtt_broker_host,
            broker_port=settings.mqtt_broker_port,
            topic=settings.mqtt_topic,
            username=settings.mqtt_username,
            password=settings.mqtt_password,
            client_id=settings.mqtt_client_id,
            transport=settings.mqtt_transport,
            ws_path=settings.mqtt_ws_path,
            use_tls=settings.mqtt_tls,
        )

    def set_message_handler(self, handler: MessageHandler):
        """Configura el handler de mensajes."""
        self._message_handler = handler

    def connect(self) -> bool:
        """Conecta al broker MQTT.

        Returns:
            True si la conexión quedó establecida dentro del timeout. Con
            False paho sigue reintentando en segundo plano.
        """
        try:
            self._client = mqtt.Client(
                callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
                client_id=self.client_id,
                protocol=mqtt.MQTTv311,
                transport=self.transport,
            )

            self._client.on_connect = self._on_connect
            self._client.on_disconnect = self._on_disconnect
            self._client.on_message = self._on_message

            if self.transport == "websockets":
                self._client.ws_set_options(path=self.ws_path)
            if self.use_tls:
                self._client.tls_set()
            if self.username and self.password:
                self._client.username_pw_set(self.username, self.password)
            self._client.reconnect_delay_set(min_delay=1, max_delay=30)

            logger.info(
                "[MQTT] Connecting to %s:%d (%s%s)",
                self.broker_host, self.broker_port, self.transport,
                "+tls" if self.use_tls else "",
            )
            self._client.connect_async(self.broker_host, self.broker_port, keepalive=60)
            self._client.loop_start()

            # Esperar conexión
            deadline = time.monotonic() + self.connect_timeout
            while time.monotonic() < deadline:
                if self._connected:
                    return True
                time.sleep(0.1)

            logger.warning("[MQTT] Connection timeout, paho keeps retrying in background")
            return False

        except Exception as e:
            logger.exception("[MQTT] Connection failed: %s", e)
            return False

    def disconnect(self):
        """Libera la suscripción y desconecta del broker."""
        if self._client:
            try:
                if self._connected:
                    self._client.unsubscribe(self.topic)
                self._client.disconnect()
                self._client.loop_stop()
            except Exception as e:
                logger.warning("[MQTT] Disconnect error: %s", e)
            self._client = None
        self._connected = False

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        """Callback de conexión."""
        if reason_code == 0:
            self._connected = True
            logger.info("[MQTT] Connected to broker")
            client.subscribe(self.topic, qos=0)
            logger.info("[MQTT] Subscribed to %s", self.topic)
        else:
            self._connected = False
            logger.error("[MQTT] Connection failed: rc=%s", reason_code)

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        """Callback de desconexión."""
        self._connected = False
        logger.warning("[MQTT] Disconnected (rc=%s)", reason_code)

    def _on_message(self, client, userdata, msg):
        """Callback de mensaje - delega al handler."""
        if self._message_handler:
            self._message_handler(msg.topic, msg.payload)

    @property
    def is_connected(self) -> bool:
        return self._connected
