"""Control-topic command decoder and reply-topic message builders.

Inbound payloads look like ``{"command": 100, "account": "sip:bob@example.com"}``
where ``command`` is the integer code of a single ASCII character.  Outbound
payloads carry one of three shapes::

    {"status": "ringing"}
    {"event": "mute"}
    {"event": "hold", "success": "true"}
"""

from __future__ import annotations

import dataclasses
import json
from enum import StrEnum

from phone_mqtt.errors import DecodeError, UnknownCommandError


class CommandKind(StrEnum):
    CONNECT = "connect"
    ANSWER = "answer"
    HANGUP = "hangup"
    MUTE = "mute"
    UNMUTE = "unmute"
    HOLD = "hold"
    RESUME = "resume"
    CALL_STATUS = "call_status"
    REGISTRATION_STATUS = "registration_status"


COMMAND_CODES: dict[int, CommandKind] = {
    ord("a"): CommandKind.ANSWER,
    ord("b"): CommandKind.HANGUP,
    ord("d"): CommandKind.CONNECT,
    ord("u"): CommandKind.UNMUTE,
    ord("m"): CommandKind.MUTE,
    ord("h"): CommandKind.HOLD,
    ord("r"): CommandKind.RESUME,
    ord("s"): CommandKind.CALL_STATUS,
    ord("p"): CommandKind.REGISTRATION_STATUS,
}


@dataclasses.dataclass(frozen=True)
class Command:
    """A decoded control request; ``argument`` is only set for CONNECT."""

    kind: CommandKind
    argument: str | None = None


def decode_command(payload: bytes) -> Command:
    """Decode one control-topic payload.

    Raises ``DecodeError`` for malformed JSON or a missing/invalid field and
    ``UnknownCommandError`` for a code outside ``COMMAND_CODES``.
    """
    try:
        data = json.loads(payload)
    except (ValueError, RecursionError) as exc:
        raise DecodeError(f"invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise DecodeError("payload is not a JSON object")

    code = data.get("command")
    # bool is an int subclass; true/false are not character codes
    if not isinstance(code, int) or isinstance(code, bool):
        raise DecodeError(f"missing or non-integer command: {code!r}")
    kind = COMMAND_CODES.get(code)
    if kind is None:
        raise UnknownCommandError(code)

    if kind is not CommandKind.CONNECT:
        return Command(kind)

    account = data.get("account")
    if not isinstance(account, str) or not account:
        raise DecodeError("no account is specified for the call")
    # json.loads already produced an owned str; nothing of the payload is kept
    return Command(kind, account)


def _dumps(obj: dict[str, str]) -> str:
    return json.dumps(obj, separators=(",", ":"))


def status_message(status: str) -> str:
    return _dumps({"status": status})


def event_message(event: str) -> str:
    return _dumps({"event": event})


def result_message(event: str, success: bool) -> str:
    return _dumps({"event": event, "success": "true" if success else "false"})
