"""Mapping of daemon responses into client errors, and background task spawning."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

from mapepire.errors import ServerError, UnknownResponseTypeError
from mapepire.response import ErrorResponse, Response

_BACKGROUND: set[asyncio.Task[Any]] = set()


def unexpected(response: Response) -> UnknownResponseTypeError:
    """Build the error for a response variant the caller did not expect."""
    return UnknownResponseTypeError(f"unexpected variant: {response!r}")


def server_error(response: ErrorResponse) -> ServerError:
    """Build a :class:`ServerError` from a daemon error response."""
    message = response.error
    if message is None:
        message = "daemon returned error response with no message"
    return ServerError(
        message=message,
        sqlstate=response.sqlstate,
        sqlcode=response.sqlcode,
        job_name=response.job,
    )


def server_failed(method: str) -> ServerError:
    """Build a :class:`ServerError` for a ``success: false`` reply to ``method``."""
    return ServerError(message=f"daemon returned success=false for {method}")


def _settle(task: asyncio.Task[Any]) -> None:
    _BACKGROUND.discard(task)
    if not task.cancelled():
        # Retrieve the exception so it is never reported as unhandled.
        task.exception()


def spawn_best_effort(coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any] | None:
    """Run ``coro`` in the background if an event loop is running.

    Without a running loop the coroutine is closed unrun and ``None`` is
    returned. Failures of the background task are swallowed.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        coro.close()
        return None
    task = loop.create_task(coro)
    _BACKGROUND.add(task)
    task.add_done_callback(_settle)
    return task