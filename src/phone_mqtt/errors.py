"""Exceptions raised by the MQTT control bridge."""


class ControlError(Exception):
    """Base class for bridge errors."""


class ConfigurationError(ControlError):
    """Invalid or missing setting."""


class DecodeError(ControlError):
    """Inbound payload is not a usable command."""


class UnknownCommandError(DecodeError):
    """Inbound ``command`` code has no mapping."""

    def __init__(self, code: int) -> None:
        super().__init__(f"unknown command code {code!r}")
        self.code = code


class DispatchError(ControlError):
    """A call-control command has no user agent or call to act on."""
