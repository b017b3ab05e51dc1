"""Executes queued commands against the telephony engine.

Runs only on the event loop.  Commands with a defined result shape publish
``"success": "false"`` when there is nothing to act on; CONNECT, MUTE and
UNMUTE are fire-and-forget and never report failure over MQTT.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from phone_mqtt.broker.message import Command, CommandKind
from phone_mqtt.control.context import ControlContext
from phone_mqtt.errors import DispatchError
from phone_mqtt.phone.engine import Call, PhoneError, UserAgent

logger = logging.getLogger(__name__)

# Lets a hangup racing a local hangup settle first
HANGUP_DEBOUNCE = 0.01

_HandlerType = Callable[[Command], Awaitable[None]]


class CommandDispatcher:
    def __init__(self, ctx: ControlContext) -> None:
        self._ctx = ctx
        self._handlers: dict[CommandKind, _HandlerType] = {
            CommandKind.CONNECT: self._connect,
            CommandKind.ANSWER: self._answer,
            CommandKind.HANGUP: self._hangup,
            CommandKind.MUTE: self._mute,
            CommandKind.UNMUTE: self._unmute,
            CommandKind.HOLD: self._hold,
            CommandKind.RESUME: self._resume,
            CommandKind.CALL_STATUS: self._call_status,
            CommandKind.REGISTRATION_STATUS: self._registration_status,
        }

    async def dispatch(self, command: Command) -> None:
        logger.debug("Dispatching %s", command.kind)
        await self._handlers[command.kind](command)

    def _agent(self) -> UserAgent:
        agent = self._ctx.phone.current
        if agent is None:
            raise DispatchError("no current user agent")
        return agent

    def _call(self) -> Call:
        call = self._agent().call
        if call is None:
            raise DispatchError("no active call")
        return call

    async def _connect(self, command: Command) -> None:
        self._ctx.alert.stop()
        uri = command.argument or ""
        try:
            self._agent().connect(uri, video=False)
        except (DispatchError, PhoneError) as exc:
            # fire-and-forget: the operator only sees later call events
            logger.warning("Connect to %s failed: %s", uri, exc)
            return
        logger.info("Connecting to %s", uri)

    async def _answer(self, command: Command) -> None:
        self._ctx.alert.stop()
        try:
            agent = self._agent()
            logger.info("Answering incoming call: %s", agent.aor)
            agent.answer()
        except (DispatchError, PhoneError) as exc:
            logger.warning("Answer failed: %s", exc)
            self._ctx.publisher.publish_result("answer", False)
            return
        self._ctx.publisher.publish_result("answer", True)

    async def _hangup(self, command: Command) -> None:
        await asyncio.sleep(HANGUP_DEBOUNCE)
        self._ctx.alert.stop()
        try:
            self._agent().hangup(None, 0, None)
        except (DispatchError, PhoneError) as exc:
            logger.warning("Hangup failed: %s", exc)

    def _set_muted(self, muted: bool) -> None:
        try:
            self._call().set_muted(muted)
        except (DispatchError, PhoneError) as exc:
            logger.debug("Mute=%s ignored: %s", muted, exc)

    async def _mute(self, command: Command) -> None:
        self._set_muted(True)
        self._ctx.publisher.publish_event("mute")

    async def _unmute(self, command: Command) -> None:
        self._set_muted(False)
        self._ctx.publisher.publish_event("unmute")

    def _set_hold(self, on: bool) -> bool:
        try:
            self._call().hold(on)
        except (DispatchError, PhoneError) as exc:
            logger.info("Hold=%s failed: %s", on, exc)
            return False
        return True

    async def _hold(self, command: Command) -> None:
        self._ctx.publisher.publish_result("hold", self._set_hold(True))

    async def _resume(self, command: Command) -> None:
        self._ctx.publisher.publish_result("resume", self._set_hold(False))

    async def _call_status(self, command: Command) -> None:
        agent = self._ctx.phone.current
        active = agent is not None and agent.call is not None
        self._ctx.publisher.publish_result("active_call", active)

    async def _registration_status(self, command: Command) -> None:
        registered = any(ua.is_registered for ua in self._ctx.phone.user_agents)
        self._ctx.publisher.publish_result("registered", registered)
