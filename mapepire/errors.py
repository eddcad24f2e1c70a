"""Error hierarchy raised by the client, with SQLSTATE classification helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass, field


class MapepireError(Exception):
    """Base class of every error the client raises."""


class TransportError(MapepireError):
    """Network, TLS or WebSocket transport failure."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"transport: {detail}")
        self.detail = detail


class ConnectionClosedError(TransportError):
    """The peer closed the connection."""

    def __init__(self) -> None:
        super().__init__("connection closed by peer")


class AuthError(MapepireError):
    """The handshake's ``connect`` request was rejected."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"authentication failed: {reason}")
        self.reason = reason


class ProtocolError(MapepireError):
    """The wire JSON could not be parsed or did not match its request."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"protocol: {detail}")
        self.detail = detail


class MalformedJsonError(ProtocolError):
    """The bytes received were not valid JSON."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"malformed JSON: {reason}")
        self.reason = reason


class CorrelationMismatchError(ProtocolError):
    """A response arrived whose id does not match the awaited request."""

    def __init__(self, expected: str, got: str) -> None:
        super().__init__(
            f"response correlation mismatch: expected id {expected}, got {got}"
        )
        self.expected = expected
        self.got = got


class UnknownResponseTypeError(ProtocolError):
    """The response ``type`` field was not one of the known variants."""

    def __init__(self, response_type: str) -> None:
        super().__init__(f"unknown response type: {response_type}")
        self.response_type = response_type


class DecodeError(MapepireError):
    """A row could not be decoded into the requested type."""

    def __init__(self, reason: str, column: str | None = None) -> None:
        super().__init__(f"decode column {column!r}: {reason}")
        self.reason = reason
        self.column = column


class MissingColumnError(DecodeError):
    """The requested column did not exist in the row."""

    def __init__(self, column: str) -> None:
        super().__init__(f"column not found: {column}", column=column)


class PoolExhaustedError(MapepireError):
    """The pool ran out of capacity within the acquire timeout (seconds)."""

    def __init__(self, timeout: float) -> None:
        super().__init__(f"pool exhausted (timeout {timeout}s)")
        self.timeout = timeout


class CancelledError(MapepireError):
    """The operation was cancelled or timed out."""

    def __init__(self) -> None:
        super().__init__("operation cancelled")


class InternalError(MapepireError):
    """An internal invariant was violated."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"internal error: {detail}")
        self.detail = detail


@dataclass(frozen=True)
class DiagnosticItem:
    """One diagnostic entry attached to a server error."""

    text: str
    message_id: str | None = None


_TRANSIENT_STATES = frozenset({"40001", "57033"})
_OBJECT_NOT_FOUND_STATES = frozenset({"42704", "42S02"})


class ServerError(MapepireError):
    """A structured error response from the daemon."""

    def __init__(
        self,
        message: str,
        sqlstate: str | None = None,
        sqlcode: int | None = None,
        job_name: str | None = None,
        diagnostics: list[DiagnosticItem] | None = None,
    ) -> None:
        self.message = message
        self.sqlstate = sqlstate
        self.sqlcode = sqlcode
        self.job_name = job_name
        self.diagnostics = list(diagnostics or [])
        super().__init__(self._render())

    def _render(self) -> str:
        job = f" job={self.job_name}" if self.job_name is not None else ""
        return (
            f"server error [sqlstate={self.sqlstate!r} sqlcode={self.sqlcode!r}{job}]: "
            f"{self.message}"
        )

    def __str__(self) -> str:
        return self._render()

    def __repr__(self) -> str:
        return (
            f"ServerError(message={self.message!r}, sqlstate={self.sqlstate!r}, "
            f"sqlcode={self.sqlcode!r}, job_name={self.job_name!r}, "
            f"diagnostics={self.diagnostics!r})"
        )

    def is_transient(self) -> bool:
        """True for ``08xxx`` connection failures, ``40001`` deadlock and ``57033`` timeout."""
        state = self.sqlstate
        if state is None:
            return False
        # Only these two codes within classes 40/57 are transient.
        return state.startswith("08") or state in _TRANSIENT_STATES

    def is_constraint_violation(self) -> bool:
        """True for constraint violations (class ``23xxx``)."""
        return self.sqlstate is not None and self.sqlstate.startswith("23")

    def is_authorization(self) -> bool:
        """True for authorization failures (class ``28xxx`` and ``42501``)."""
        state = self.sqlstate
        return state is not None and (state.startswith("28") or state == "42501")

    def is_object_not_found(self) -> bool:
        """True for table-or-view-not-found (``42704`` and ``42S02``)."""
        return self.sqlstate in _OBJECT_NOT_FOUND_STATES

    def is_data_type_mismatch(self) -> bool:
        """True for data-type or conversion failures (class ``22xxx``)."""
        return self.sqlstate is not None and self.sqlstate.startswith("22")


def to_error(exc: BaseException) -> MapepireError:
    """Classify a low-level exception as a client error.

    OS-level failures become :class:`TransportError`, JSON parse failures
    become :class:`MalformedJsonError`, and client errors pass through.
    """
    if isinstance(exc, MapepireError):
        return exc
    if isinstance(exc, json.JSONDecodeError):
        err: MapepireError = MalformedJsonError(str(exc))
    elif isinstance(exc, OSError):
        err = TransportError(f"io: {exc}")
    else:
        raise TypeError(f"cannot classify {type(exc).__name__} as a client error")
    err.__cause__ = exc
    return err