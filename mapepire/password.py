"""A password holder that hides its value and can be wiped."""

from __future__ import annotations


def _refuse(self: Password, *_args: object) -> None:
    name = type(self).__name__
    raise TypeError(f"{name} cannot be copied or serialized")


class Password:
    """Secret held in a mutable buffer, wiped on :meth:`zeroize` and on deletion.

    It cannot be copied or pickled, and its repr never shows the value.
    """

    __slots__ = ("_buffer",)

    def __init__(self, value: str) -> None:
        self._buffer = bytearray(value.encode("utf-8"))

    def expose(self) -> str:
        """Return the plaintext, for wire serialization only."""
        return self._buffer.decode("utf-8")

    def zeroize(self) -> None:
        """Overwrite the buffer with zero bytes in place."""
        self._buffer[:] = bytes(len(self._buffer))

    def __repr__(self) -> str:
        return "Password([REDACTED])"

    __str__ = __repr__

    __copy__ = _refuse
    __deepcopy__ = _refuse
    __reduce__ = _refuse

    def __del__(self) -> None:
        buffer = getattr(self, "_buffer", None)
        if buffer is not None:
            buffer[:] = bytes(len(buffer))