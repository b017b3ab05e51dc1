"""Shared state handed to the dispatcher and the event translator."""

from __future__ import annotations

import dataclasses

from phone_mqtt.broker.publisher import StatusPublisher
from phone_mqtt.control.alert import AlertSound
from phone_mqtt.phone.engine import Phone


@dataclasses.dataclass
class ControlContext:
    phone: Phone
    alert: AlertSound
    publisher: StatusPublisher
