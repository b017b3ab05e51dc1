"""Environment-driven settings."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping

from phone_mqtt.errors import ConfigurationError

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _int(env: Mapping[str, str], name: str, default: int, *, minimum: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


def _bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


@dataclasses.dataclass(frozen=True)
class Settings:
    mqtt_host: str = "localhost"
    mqtt_port: int = 1883
    client_id: str = "baresip"
    username: str | None = None
    password: str | None = None
    use_tls: bool = False
    keepalive: int = 20
    control_topic: str = "baresip/read"
    reply_topic: str = "baresip/write"
    reconnect_min_delay: int = 1
    reconnect_max_delay: int = 120
    queue_size: int = 64
    accounts: tuple[str, ...] = ()

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``env`` (defaults to ``os.environ``).

        Raises ``ConfigurationError`` for malformed values.
        """
        if env is None:
            env = os.environ
        reconnect_min = _int(env, "MQTT_RECONNECT_MIN", 1, minimum=1)
        reconnect_max = _int(env, "MQTT_RECONNECT_MAX", 120, minimum=1)
        if reconnect_max < reconnect_min:
            raise ConfigurationError(
                "MQTT_RECONNECT_MAX must not be lower than MQTT_RECONNECT_MIN"
            )
        control_topic = env.get("MQTT_CONTROL_TOPIC", "baresip/read").strip()
        reply_topic = env.get("MQTT_REPLY_TOPIC", "baresip/write").strip()
        if not control_topic or not reply_topic:
            raise ConfigurationError("MQTT topics must not be empty")
        accounts = tuple(
            a.strip() for a in env.get("PHONE_ACCOUNTS", "").split(",") if a.strip()
        )
        return cls(
            mqtt_host=env.get("MQTT_HOST", "localhost"),
            mqtt_port=_int(env, "MQTT_PORT", 1883, minimum=1),
            client_id=env.get("MQTT_CLIENT_ID", "baresip"),
            username=env.get("MQTT_USERNAME") or None,
            password=env.get("MQTT_PASSWORD") or None,
            use_tls=_bool(env, "MQTT_TLS", False),
            keepalive=_int(env, "MQTT_KEEPALIVE", 20, minimum=1),
            control_topic=control_topic,
            reply_topic=reply_topic,
            reconnect_min_delay=reconnect_min,
            reconnect_max_delay=reconnect_max,
            queue_size=_int(env, "COMMAND_QUEUE_SIZE", 64, minimum=1),
            accounts=accounts,
        )
