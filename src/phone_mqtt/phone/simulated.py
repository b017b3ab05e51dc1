"""In-process softphone for bench runs without a SIP stack.

Agents register immediately and calls change state only when told to; the
``receive_*`` and ``remote_*`` methods play the part of the network.
"""

from __future__ import annotations

import dataclasses
import logging

from phone_mqtt.phone.engine import (
    AnswerMode,
    EventHandler,
    EventKind,
    PhoneError,
    PhoneEvent,
)

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class SimulatedCall:
    peer_uri: str
    incoming: bool
    status_code: int = 0
    established: bool = False
    muted: bool = False
    on_hold: bool = False
    terminated: bool = False

    def set_muted(self, muted: bool) -> None:
        if self.terminated:
            raise PhoneError("call terminated")
        self.muted = muted

    def hold(self, on: bool) -> None:
        if not self.established or self.terminated:
            raise PhoneError("call not established")
        self.on_hold = on


class SimulatedAgent:
    def __init__(
        self,
        phone: SimulatedPhone,
        aor: str,
        answer_mode: AnswerMode = AnswerMode.MANUAL,
    ) -> None:
        self._phone = phone
        self._calls: list[SimulatedCall] = []
        self.aor = aor
        self.answer_mode = answer_mode
        self.is_registered = False

    @property
    def calls(self) -> tuple[SimulatedCall, ...]:
        return tuple(self._calls)

    @property
    def call(self) -> SimulatedCall | None:
        return self._calls[-1] if self._calls else None

    def connect(self, uri: str, *, video: bool = False) -> SimulatedCall:
        if not uri:
            raise PhoneError("empty destination")
        call = SimulatedCall(peer_uri=uri, incoming=False)
        self._calls.append(call)
        logger.info("%s: dialing %s (video=%s)", self.aor, uri, video)
        self._emit(EventKind.CALL_RINGING, call)
        return call

    def answer(self) -> None:
        for call in self._calls:
            if call.incoming and not call.established:
                call.established = True
                self._emit(EventKind.CALL_ESTABLISHED, call)
                return
        raise PhoneError("no incoming call to answer")

    def hangup(
        self,
        call: SimulatedCall | None = None,
        code: int = 0,
        reason: str | None = None,
    ) -> None:
        call = call or self.call
        if call is None:
            raise PhoneError("no call to hang up")
        logger.info("%s: hangup %s", self.aor, call.peer_uri)
        self._close(call, 0)

    def register(self) -> None:
        self.is_registered = True
        self._emit(EventKind.REGISTER_OK)

    def unregister(self) -> None:
        self._emit(EventKind.UNREGISTERING)
        self.is_registered = False

    def receive_call(self, peer_uri: str) -> SimulatedCall:
        call = SimulatedCall(peer_uri=peer_uri, incoming=True)
        self._calls.append(call)
        self._emit(EventKind.CALL_INCOMING, call, peer=peer_uri)
        return call

    def remote_answer(self, call: SimulatedCall) -> None:
        call.established = True
        self._emit(EventKind.CALL_ESTABLISHED, call)

    def remote_close(self, call: SimulatedCall, status_code: int = 0) -> None:
        self._close(call, status_code)

    def receive_message(self, peer: str, body: str) -> None:
        self._emit(EventKind.MESSAGE, param=body, peer=peer)

    def _close(self, call: SimulatedCall, status_code: int) -> None:
        if call.terminated:
            return
        call.terminated = True
        call.status_code = status_code
        self._calls.remove(call)
        self._emit(EventKind.CALL_CLOSED, call)

    def _emit(
        self,
        kind: EventKind,
        call: SimulatedCall | None = None,
        *,
        param: str = "",
        peer: str = "",
    ) -> None:
        self._phone.emit(
            PhoneEvent(kind=kind, agent=self, call=call, param=param, peer=peer)
        )


class SimulatedPhone:
    def __init__(self) -> None:
        self._agents: list[SimulatedAgent] = []
        self._current: SimulatedAgent | None = None
        self._handlers: list[EventHandler] = []

    @property
    def user_agents(self) -> tuple[SimulatedAgent, ...]:
        return tuple(self._agents)

    @property
    def current(self) -> SimulatedAgent | None:
        return self._current

    def add_agent(
        self, aor: str, answer_mode: AnswerMode = AnswerMode.MANUAL
    ) -> SimulatedAgent:
        agent = SimulatedAgent(self, aor, answer_mode)
        self._agents.append(agent)
        if self._current is None:
            self._current = agent
        return agent

    def select(self, agent: SimulatedAgent) -> None:
        self._current = agent

    def subscribe(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    def unsubscribe(self, handler: EventHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def emit(self, event: PhoneEvent) -> None:
        logger.debug("Event %s from %s", event.kind, event.agent.aor)
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception:
                logger.exception("Event handler failed on %s", event.kind)

    def register_all(self) -> None:
        for agent in self._agents:
            agent.register()

    def unregister_all(self) -> None:
        for agent in self._agents:
            if agent.is_registered:
                agent.unregister()


class LoggingPlayback:
    def __init__(self, name: str) -> None:
        self.name = name
        self.stopped = False

    def stop(self) -> None:
        if not self.stopped:
            self.stopped = True
            logger.info("Stopped %s", self.name)


class LoggingPlayer:
    """Logs cue playback and keeps a history of what was started."""

    def __init__(self) -> None:
        self.played: list[LoggingPlayback] = []
        self.repeats: list[int] = []

    def play(self, name: str, repeat: int) -> LoggingPlayback:
        logger.info("Playing %s (repeat=%d)", name, repeat)
        playback = LoggingPlayback(name)
        self.played.append(playback)
        self.repeats.append(repeat)
        return playback

    @property
    def names(self) -> list[str]:
        return [p.name for p in self.played]
