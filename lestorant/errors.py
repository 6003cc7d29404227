"""Error kinds raised across the package.

Every error carries its human-readable message; ``str(exc)`` is the text
shown to users and written to logs.
"""

from __future__ import annotations

from typing import Optional


class LestorantError(Exception):
    """Base class for all errors raised by lestorant."""


class ConfigError(LestorantError):
    """Raised when the configuration file is invalid or missing required fields."""


class TransportError(LestorantError):
    """Connection, DNS, TLS or timeout failure while talking to a remote host."""


class FetchError(TransportError):
    """An HTTP fetch gave up after exhausting its attempts."""


class StatusError(LestorantError):
    """The RPC endpoint answered with a non-success HTTP status."""

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class ProtocolError(LestorantError):
    """The RPC endpoint answered with a body that is not valid JSON-RPC."""


class RemoteError(LestorantError):
    """aria2 returned a JSON-RPC error object."""

    def __init__(self, message: str, *, code: Optional[int] = None) -> None:
        super().__init__(message)
        self.code = code


class StructuralError(LestorantError):
    """A feed document lacks the structure a loader requires."""


class StorageError(LestorantError):
    """Reading or writing a local file failed."""
