"""Shared test fixtures."""

from __future__ import annotations

import types
from typing import Any

import paho.mqtt.client as mqtt
import pytest

from phone_mqtt.broker.publisher import StatusPublisher
from phone_mqtt.config import Settings
from phone_mqtt.control.alert import AlertSound
from phone_mqtt.control.context import ControlContext
from phone_mqtt.phone.simulated import LoggingPlayer, SimulatedPhone

REPLY_TOPIC = "baresip/write"
CONTROL_TOPIC = "baresip/read"


class FakeClient:
    """Stands in for ``paho.mqtt.client.Client``; captures publishes."""

    def __init__(self, *, connected: bool = True) -> None:
        self.connected = connected
        self.published: list[tuple[str, str, int, bool]] = []
        self.subscriptions: list[tuple[str, int]] = []
        self.connect_args: tuple[str, int, int] | None = None
        self.loop_running = False
        self.publish_rc = mqtt.MQTT_ERR_SUCCESS
        self.on_connect: Any = None
        self.on_disconnect: Any = None
        self.on_message: Any = None

    def is_connected(self) -> bool:
        return self.connected

    def publish(
        self, topic: str, payload: str, qos: int = 0, retain: bool = False
    ) -> Any:
        if self.publish_rc == mqtt.MQTT_ERR_SUCCESS:
            self.published.append((topic, payload, qos, retain))
        return types.SimpleNamespace(rc=self.publish_rc)

    def subscribe(self, topic: str, qos: int = 0) -> None:
        self.subscriptions.append((topic, qos))

    def connect_async(self, host: str, port: int, keepalive: int = 60) -> None:
        self.connect_args = (host, port, keepalive)

    def loop_start(self) -> None:
        self.loop_running = True

    def loop_stop(self) -> None:
        self.loop_running = False

    def disconnect(self) -> None:
        self.connected = False

    @property
    def payloads(self) -> list[str]:
        return [p for _t, p, _q, _r in self.published]


def make_message(payload: bytes | str, topic: str = CONTROL_TOPIC) -> Any:
    """Minimal stand-in for ``paho.mqtt.client.MQTTMessage``."""
    if isinstance(payload, str):
        payload = payload.encode()
    return types.SimpleNamespace(topic=topic, payload=payload)


def reason(failure: bool = False) -> Any:
    return types.SimpleNamespace(is_failure=failure)


@pytest.fixture
def settings() -> Settings:
    return Settings(control_topic=CONTROL_TOPIC, reply_topic=REPLY_TOPIC)


@pytest.fixture
def client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def player() -> LoggingPlayer:
    return LoggingPlayer()


@pytest.fixture
def phone() -> SimulatedPhone:
    return SimulatedPhone()


@pytest.fixture
def ctx(
    client: FakeClient,
    player: LoggingPlayer,
    phone: SimulatedPhone,
) -> ControlContext:
    return ControlContext(
        phone=phone,
        alert=AlertSound(player),
        publisher=StatusPublisher(client, REPLY_TOPIC),  # type: ignore[arg-type]
    )
