"""Tests for the paho-mqtt binding."""

import paho.mqtt.client as mqtt

from phone_mqtt.broker.client import CONTROL_QOS, MqttTransport, create_client
from phone_mqtt.broker.message import Command, CommandKind
from phone_mqtt.config import Settings

from conftest import CONTROL_TOPIC, FakeClient, make_message, reason


def _make_transport(
    settings: Settings | None = None,
) -> tuple[MqttTransport, FakeClient, list[Command]]:
    if settings is None:
        settings = Settings()
    client = FakeClient()
    received: list[Command] = []
    transport = MqttTransport(client, settings, received.append)  # type: ignore[arg-type]
    return transport, client, received


def test_callbacks_installed():
    transport, client, _ = _make_transport()
    assert client.on_connect == transport._on_connect
    assert client.on_disconnect == transport._on_disconnect
    assert client.on_message == transport._on_message


def test_start_connects_with_keepalive():
    transport, client, _ = _make_transport(
        Settings(mqtt_host="broker.local", mqtt_port=8883, keepalive=20)
    )
    transport.start()
    assert client.connect_args == ("broker.local", 8883, 20)
    assert client.loop_running


def test_stop_disconnects():
    transport, client, _ = _make_transport()
    transport.start()
    transport.stop()
    assert not client.connected
    assert not client.loop_running


def test_subscribes_on_connect():
    transport, client, _ = _make_transport()
    transport._on_connect(client, None, {}, reason(), None)
    assert client.subscriptions == [(CONTROL_TOPIC, CONTROL_QOS)]


def test_failed_connect_does_not_subscribe():
    transport, client, _ = _make_transport()
    transport._on_connect(client, None, {}, reason(failure=True), None)
    assert client.subscriptions == []


def test_disconnect_is_logged(caplog):
    transport, client, _ = _make_transport()
    with caplog.at_level("WARNING"):
        transport._on_disconnect(client, None, {}, reason(failure=True), None)
    assert "Connection lost" in caplog.text


def test_control_message_is_forwarded():
    transport, client, received = _make_transport()
    transport._on_message(client, None, make_message('{"command": 97}'))
    assert received == [Command(CommandKind.ANSWER)]


def test_connect_message_carries_account():
    transport, client, received = _make_transport()
    transport._on_message(
        client,
        None,
        make_message('{"command": 100, "account": "sip:bob@example.com"}'),
    )
    assert received == [Command(CommandKind.CONNECT, "sip:bob@example.com")]


def test_other_topics_are_ignored():
    transport, client, received = _make_transport()
    transport._on_message(
        client, None, make_message('{"command": 97}', topic="baresip/write")
    )
    transport._on_message(
        client, None, make_message('{"command": 97}', topic="baresip/read/extra")
    )
    assert received == []


def test_invalid_messages_enqueue_nothing(caplog):
    transport, client, received = _make_transport()
    with caplog.at_level("WARNING"):
        transport._on_message(client, None, make_message("{not json"))
        transport._on_message(client, None, make_message('{"command": 120}'))
        transport._on_message(client, None, make_message('{"command": 100}'))
        transport._on_message(
            client, None, make_message('{"command": 100, "account": ""}')
        )
        transport._on_message(
            client, None, make_message(b"[" * 200_000 + b"]" * 200_000)
        )
    assert received == []
    assert "Invalid command" in caplog.text
    assert "Message not recognized" in caplog.text


def test_custom_control_topic():
    transport, client, received = _make_transport(
        Settings(control_topic="phone/cmd")
    )
    transport._on_message(client, None, make_message('{"command": 98}'))
    transport._on_message(
        client, None, make_message('{"command": 98}', topic="phone/cmd")
    )
    assert received == [Command(CommandKind.HANGUP)]


def test_create_client():
    client = create_client(Settings(client_id="test-phone", username="u", password="p"))
    assert isinstance(client, mqtt.Client)
    assert client.is_connected() is False


def test_deeply_nested_payload_keeps_decoding_later_messages():
    transport, client, received = _make_transport()
    transport._on_message(
        client, None, make_message(b'{"a": ' * 100_000 + b"1" + b"}" * 100_000)
    )
    transport._on_message(client, None, make_message('{"command": 112}'))
    assert received == [Command(CommandKind.REGISTRATION_STATUS)]
