"""Translates engine lifecycle events into reply-topic status messages.

Also drives local cue playback: ring and call-waiting tones for incoming
calls, ringback for outgoing ones, and a one-shot tone when a call fails.
"""

from __future__ import annotations

import logging
import time

from phone_mqtt.control.context import ControlContext
from phone_mqtt.phone.engine import REPEAT_FOREVER, AnswerMode, EventKind, PhoneEvent

logger = logging.getLogger(__name__)

RING_CUE = "ring.wav"
CALL_WAITING_CUE = "callwaiting.wav"
RINGBACK_CUE = "ringback.wav"
MESSAGE_CUE = "message.wav"

CALL_WAITING_REPEAT = 3

_ERROR_TONES: dict[int, str | None] = {
    404: "notfound.wav",
    486: "busy.wav",
    487: None,  # request terminated: caller cancelled, stay quiet
}
_DEFAULT_ERROR_TONE = "error.wav"


def error_tone(status_code: int) -> str | None:
    """Cue to play once for a call closed with ``status_code``."""
    return _ERROR_TONES.get(status_code, _DEFAULT_ERROR_TONE)


class EventTranslator:
    def __init__(self, ctx: ControlContext) -> None:
        self._ctx = ctx
        self._started = time.monotonic()
        self._all_registered = False

    def handle(self, event: PhoneEvent) -> None:
        kind = event.kind
        if kind == EventKind.CALL_INCOMING:
            self._on_incoming(event)
        elif kind == EventKind.CALL_RINGING:
            self._ctx.publisher.publish_status("ringing")
            self._ctx.alert.play(RINGBACK_CUE, REPEAT_FOREVER)
        elif kind == EventKind.CALL_ESTABLISHED:
            self._ctx.publisher.publish_status("connected")
            self._ctx.alert.stop()
        elif kind == EventKind.CALL_CLOSED:
            self._on_closed(event)
        elif kind == EventKind.REGISTER_OK:
            self._ctx.publisher.publish_status("registered")
            self._check_registrations()
        elif kind == EventKind.UNREGISTERING:
            self._ctx.publisher.publish_status("unregistered")
            return
        elif kind == EventKind.MESSAGE:
            self._on_message(event)

    def _on_incoming(self, event: PhoneEvent) -> None:
        agent = event.agent
        self._ctx.phone.select(agent)
        peer = event.call.peer_uri if event.call is not None else event.peer
        logger.info("%s: Incoming call from %s", agent.aor, peer)
        self._ctx.alert.stop()

        # Auto-answering accounts stay silent
        if agent.answer_mode != AnswerMode.MANUAL:
            return
        if len(agent.calls) > 1:
            self._ctx.alert.play(CALL_WAITING_CUE, CALL_WAITING_REPEAT)
        else:
            self._ctx.alert.play(RING_CUE, REPEAT_FOREVER)
            self._ctx.publisher.publish_status("calling")

    def _on_closed(self, event: PhoneEvent) -> None:
        self._ctx.publisher.publish_status("closed")
        self._ctx.alert.stop()
        code = event.status_code
        if not code:
            return
        tone = error_tone(code)
        logger.info("Call closed with %d (%s)", code, tone or "no tone")
        if tone is not None:
            self._ctx.alert.play(tone, 1)

    def _on_message(self, event: PhoneEvent) -> None:
        logger.info("%s: message from %s: %r", event.agent.aor, event.peer, event.param)
        self._ctx.alert.notify(MESSAGE_CUE)

    def _check_registrations(self) -> None:
        if self._all_registered:
            return
        agents = self._ctx.phone.user_agents
        if not all(ua.is_registered for ua in agents):
            return
        n = len(agents)
        logger.info(
            "All %d useragent%s registered successfully! (%d ms)",
            n,
            "" if n == 1 else "s",
            (time.monotonic() - self._started) * 1000,
        )
        self._all_registered = True
