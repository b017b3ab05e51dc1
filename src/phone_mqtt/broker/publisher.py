"""Reply-topic publisher."""

from __future__ import annotations

import logging

import paho.mqtt.client as mqtt

from phone_mqtt.broker.message import event_message, result_message, status_message

logger = logging.getLogger(__name__)


class StatusPublisher:
    """Publishes status and result messages if the broker link is up.

    There is no offline buffering: a message published while disconnected
    is logged and dropped.
    """

    def __init__(self, client: mqtt.Client, topic: str, *, qos: int = 1) -> None:
        self._client = client
        self._topic = topic
        self._qos = qos

    def publish(self, message: str) -> bool:
        if not self._client.is_connected():
            logger.warning("Not connected to broker, dropping %s", message)
            return False
        info = self._client.publish(self._topic, message, qos=self._qos, retain=False)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            logger.warning(
                "Publish of %s failed: %s", message, mqtt.error_string(info.rc)
            )
            return False
        logger.info("Published %s on %s", message, self._topic)
        return True

    def publish_status(self, status: str) -> bool:
        return self.publish(status_message(status))

    def publish_event(self, event: str) -> bool:
        return self.publish(event_message(event))

    def publish_result(self, event: str, success: bool) -> bool:
        return self.publish(result_message(event, success))
