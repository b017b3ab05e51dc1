"""Interfaces of the host telephony engine.

The bridge never implements registration, signalling or audio itself; it
drives whatever engine satisfies these protocols.  Every method here is
called from the engine's own thread (the asyncio event loop), and every
event is delivered on that thread too.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Sequence
from enum import StrEnum
from typing import Protocol

# Repeat count for cues that play until stopped.
REPEAT_FOREVER = -1


class PhoneError(Exception):
    """Raised by the engine when a call-control operation fails."""


class AnswerMode(StrEnum):
    """Per-account policy for incoming calls."""

    MANUAL = "manual"
    EARLY = "early"
    AUTO = "auto"


class EventKind(StrEnum):
    CALL_INCOMING = "call_incoming"
    CALL_RINGING = "call_ringing"
    CALL_PROGRESS = "call_progress"
    CALL_ESTABLISHED = "call_established"
    CALL_CLOSED = "call_closed"
    REGISTER_OK = "register_ok"
    REGISTER_FAIL = "register_fail"
    UNREGISTERING = "unregistering"
    MESSAGE = "message"


class Call(Protocol):
    @property
    def peer_uri(self) -> str: ...

    @property
    def status_code(self) -> int:
        """Final SIP status of a closed call, 0 when there is none."""
        ...

    def set_muted(self, muted: bool) -> None: ...

    def hold(self, on: bool) -> None: ...


class UserAgent(Protocol):
    @property
    def aor(self) -> str: ...

    @property
    def is_registered(self) -> bool: ...

    @property
    def answer_mode(self) -> AnswerMode: ...

    @property
    def calls(self) -> Sequence[Call]: ...

    @property
    def call(self) -> Call | None:
        """The call this agent currently acts on, if any."""
        ...

    def connect(self, uri: str, *, video: bool = False) -> Call: ...

    def answer(self) -> None: ...

    def hangup(
        self, call: Call | None = None, code: int = 0, reason: str | None = None
    ) -> None: ...


@dataclasses.dataclass(frozen=True)
class PhoneEvent:
    kind: EventKind
    agent: UserAgent
    call: Call | None = None
    param: str = ""
    peer: str = ""

    @property
    def status_code(self) -> int:
        return self.call.status_code if self.call is not None else 0


EventHandler = Callable[[PhoneEvent], None]


class Phone(Protocol):
    @property
    def user_agents(self) -> Sequence[UserAgent]: ...

    @property
    def current(self) -> UserAgent | None:
        """User agent that call-control commands target."""
        ...

    def select(self, agent: UserAgent) -> None: ...

    def subscribe(self, handler: EventHandler) -> None: ...

    def unsubscribe(self, handler: EventHandler) -> None: ...


class Playback(Protocol):
    def stop(self) -> None: ...


class AudioPlayer(Protocol):
    def play(self, name: str, repeat: int) -> Playback:
        """Start cue ``name``; ``repeat`` is a count or ``REPEAT_FOREVER``."""
        ...
