"""Bridge lifecycle: wires the transport, queue, dispatcher and translator."""

from __future__ import annotations

import asyncio
import logging

import paho.mqtt.client as mqtt

from phone_mqtt.broker.client import MqttTransport, create_client
from phone_mqtt.broker.publisher import StatusPublisher
from phone_mqtt.config import Settings
from phone_mqtt.control.alert import AlertSound
from phone_mqtt.control.context import ControlContext
from phone_mqtt.control.dispatcher import CommandDispatcher
from phone_mqtt.control.events import EventTranslator
from phone_mqtt.control.queue import CommandQueue
from phone_mqtt.phone.engine import AudioPlayer, Phone

logger = logging.getLogger(__name__)


class PhoneControl:
    """Owns every bridge component between ``start()`` and ``close()``."""

    def __init__(
        self,
        phone: Phone,
        player: AudioPlayer,
        settings: Settings,
        *,
        client: mqtt.Client | None = None,
    ) -> None:
        self._phone = phone
        self._player = player
        self._settings = settings
        self._client = client if client is not None else create_client(settings)
        self._ctx: ControlContext | None = None
        self._queue: CommandQueue | None = None
        self._translator: EventTranslator | None = None
        self._transport: MqttTransport | None = None

    @property
    def context(self) -> ControlContext | None:
        return self._ctx

    @property
    def queue(self) -> CommandQueue | None:
        return self._queue

    @property
    def transport(self) -> MqttTransport | None:
        return self._transport

    async def start(self) -> None:
        """Start the bridge.

        Raises ``ValueError`` when the command queue cannot be created; that
        is the only failure that aborts startup.  A broker that cannot be
        reached is logged and retried by the transport.
        """
        if self._ctx is not None:
            return
        loop = asyncio.get_running_loop()
        ctx = ControlContext(
            phone=self._phone,
            alert=AlertSound(self._player),
            publisher=StatusPublisher(self._client, self._settings.reply_topic),
        )
        dispatcher = CommandDispatcher(ctx)
        queue = CommandQueue(
            dispatcher.dispatch, loop=loop, maxsize=self._settings.queue_size
        )
        translator = EventTranslator(ctx)

        self._ctx = ctx
        self._queue = queue
        self._translator = translator

        self._phone.subscribe(translator.handle)
        queue.start()
        self._transport = MqttTransport(self._client, self._settings, queue.push)
        self._transport.start()
        logger.info("MQTT remote control started")

    async def close(self) -> None:
        if self._ctx is None:
            return
        self._ctx.alert.stop()
        if self._translator is not None:
            self._phone.unsubscribe(self._translator.handle)
        if self._transport is not None:
            self._transport.stop()
        if self._queue is not None:
            await self._queue.close()
        self._ctx = None
        self._queue = None
        self._translator = None
        self._transport = None
        logger.info("MQTT remote control closed")
