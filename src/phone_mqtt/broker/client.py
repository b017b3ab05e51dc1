"""paho-mqtt binding: broker connection and control-topic subscription.

paho runs its own network thread.  Everything in ``_on_message`` executes on
that thread, so it only decodes and hands the command to a thread-safe sink.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import paho.mqtt.client as mqtt
from paho.mqtt.enums import CallbackAPIVersion

from phone_mqtt.broker.message import Command, decode_command
from phone_mqtt.config import Settings
from phone_mqtt.errors import DecodeError, UnknownCommandError

logger = logging.getLogger(__name__)

# QoS for the control-topic subscription
CONTROL_QOS = 0


def create_client(settings: Settings) -> mqtt.Client:
    """Create a clean-session client configured from ``settings``."""
    client = mqtt.Client(
        callback_api_version=CallbackAPIVersion.VERSION2,
        client_id=settings.client_id,
        clean_session=True,
        protocol=mqtt.MQTTv311,
    )
    if settings.username:
        client.username_pw_set(settings.username, settings.password)
    if settings.use_tls:
        client.tls_set()
    client.reconnect_delay_set(
        min_delay=settings.reconnect_min_delay,
        max_delay=settings.reconnect_max_delay,
    )
    return client


class MqttTransport:
    """Connects to the broker and feeds decoded commands to ``on_command``.

    ``on_command`` is invoked on paho's network thread and must be
    thread-safe (``CommandQueue.push``).
    """

    def __init__(
        self,
        client: mqtt.Client,
        settings: Settings,
        on_command: Callable[[Command], None],
    ) -> None:
        self._client = client
        self._settings = settings
        self._on_command = on_command
        client.on_connect = self._on_connect
        client.on_disconnect = self._on_disconnect
        client.on_message = self._on_message

    def start(self) -> None:
        s = self._settings
        logger.info("Connecting to MQTT broker %s:%d", s.mqtt_host, s.mqtt_port)
        self._client.connect_async(s.mqtt_host, s.mqtt_port, keepalive=s.keepalive)
        self._client.loop_start()

    def stop(self) -> None:
        self._client.disconnect()
        self._client.loop_stop()
        logger.info("MQTT transport stopped")

    def _on_connect(
        self,
        client: mqtt.Client,
        userdata: Any,
        flags: Any,
        reason_code: Any,
        properties: Any,
    ) -> None:
        if reason_code.is_failure:
            logger.error("Error while connecting to mqtt broker: %s", reason_code)
            return
        # Subscribing here renews the subscription after every reconnect
        client.subscribe(self._settings.control_topic, qos=CONTROL_QOS)
        logger.info("Connected, subscribed to %s", self._settings.control_topic)

    def _on_disconnect(
        self,
        client: mqtt.Client,
        userdata: Any,
        flags: Any,
        reason_code: Any,
        properties: Any,
    ) -> None:
        if reason_code.is_failure:
            logger.warning("Connection lost, cause: %s", reason_code)
        else:
            logger.info("Disconnected from broker")

    def _on_message(
        self, client: mqtt.Client, userdata: Any, message: mqtt.MQTTMessage
    ) -> None:
        if message.topic != self._settings.control_topic:
            return
        logger.debug("Raw data: %r", message.payload)
        try:
            command = decode_command(message.payload)
        except UnknownCommandError as exc:
            logger.warning("Message not recognized: %s", exc)
            return
        except DecodeError as exc:
            logger.warning("Invalid command: %s", exc)
            return
        logger.info("Current command is: %s", command.kind)
        self._on_command(command)
