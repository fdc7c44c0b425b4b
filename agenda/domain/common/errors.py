from __future__ import annotations


class DomainError(Exception):
    """Base for errors that are reported to the user and leave the flow retriable."""


class ValidationError(DomainError):
    """A required field is missing or a value is outside its allowed set."""


class PersistenceError(DomainError):
    """The gateway call failed. Message echoes the gateway text when there is one."""


class GatewayError(Exception):
    """Raised by TableGateway adapters on transport or constraint failures."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message
