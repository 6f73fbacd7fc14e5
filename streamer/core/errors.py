from __future__ import annotations


class ConfigError(Exception):
    """Startup configuration problem. Never retried."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class MissingFieldError(ConfigError):
    def __init__(self, field: str) -> None:
        super().__init__(field, f"missing required configuration field '{field}'")


class InvalidValueError(ConfigError):
    def __init__(self, field: str, reason: str) -> None:
        super().__init__(field, f"invalid value for '{field}': {reason}")
        self.reason = reason


class SinkError(Exception):
    pass


class TransientSinkError(SinkError):
    """The sample was not delivered, but the next one may be."""


class TerminalSinkError(SinkError):
    """The connection is gone; no further sample can be delivered."""


class TransportInvariantError(RuntimeError):
    pass
