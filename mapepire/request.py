"""Outgoing wire requests, tagged on the wire by their ``type`` field."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar

from mapepire.errors import MalformedJsonError, to_error

_U32_MAX = 0xFFFFFFFF

_STR = "str"
_U32 = "u32"
_PARAMS = "params"
_BATCH = "batch"

_REGISTRY: dict[str, type[Request]] = {}


def _kind(kind: str, **kwargs: Any) -> Any:
    return field(metadata={"kind": kind}, **kwargs)


@dataclass(frozen=True)
class Request:
    """Base of every request the client can send."""

    TYPE: ClassVar[str] = ""

    def __init_subclass__(cls, tag: str = "", **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if tag:
            cls.TYPE = tag
            _REGISTRY[tag] = cls

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form, with the tag first and unset optionals left out."""
        wire: dict[str, Any] = {"type": self.TYPE}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            kind = f.metadata.get("kind")
            if kind == _PARAMS:
                value = list(value)
            elif kind == _BATCH:
                value = [list(row) for row in value]
            wire[f.name] = value
        return wire

    def to_json(self) -> str:
        """Serialize to compact JSON text."""
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class Connect(Request, tag="connect"):
    """Establish a daemon session and authenticate."""

    id: str = _kind(_STR)
    user: str = _kind(_STR)
    password: str = _kind(_STR, repr=False)


@dataclass(frozen=True)
class Sql(Request, tag="sql"):
    """Execute a SQL statement without preparing it."""

    id: str = _kind(_STR)
    sql: str = _kind(_STR)
    rows: int | None = _kind(_U32, default=None)
    parameters: list[Any] | None = _kind(_PARAMS, default=None)


@dataclass(frozen=True)
class PrepareSql(Request, tag="prepare_sql"):
    """Prepare a SQL statement without executing it."""

    id: str = _kind(_STR)
    sql: str = _kind(_STR)


@dataclass(frozen=True)
class PrepareSqlExecute(Request, tag="prepare_sql_execute"):
    """Prepare and execute in one round trip; each parameter set runs once."""

    id: str = _kind(_STR)
    sql: str = _kind(_STR)
    parameters: list[list[Any]] | None = _kind(_BATCH, default=None)
    rows: int | None = _kind(_U32, default=None)


@dataclass(frozen=True)
class Execute(Request, tag="execute"):
    """Execute a previously prepared statement."""

    id: str = _kind(_STR)
    cont_id: str = _kind(_STR)
    parameters: list[Any] | None = _kind(_PARAMS, default=None)


@dataclass(frozen=True)
class SqlMore(Request, tag="sqlmore"):
    """Fetch the next page of rows from an open cursor."""

    id: str = _kind(_STR)
    cont_id: str = _kind(_STR)
    rows: int = _kind(_U32)


@dataclass(frozen=True)
class SqlClose(Request, tag="sqlclose"):
    """Close a server-side cursor."""

    id: str = _kind(_STR)
    cont_id: str = _kind(_STR)


@dataclass(frozen=True)
class Cl(Request, tag="cl"):
    """Run a CL command."""

    id: str = _kind(_STR)
    cmd: str = _kind(_STR)


@dataclass(frozen=True)
class GetVersion(Request, tag="getversion"):
    """Retrieve the daemon version."""

    id: str = _kind(_STR)


@dataclass(frozen=True)
class GetDbJob(Request, tag="getdbjob"):
    """Retrieve the current Db2 job name."""

    id: str = _kind(_STR)


@dataclass(frozen=True)
class SetConfig(Request, tag="setconfig"):
    """Configure server-side tracing."""

    id: str = _kind(_STR)
    tracelevel: str = _kind(_STR)
    tracedest: str = _kind(_STR)


@dataclass(frozen=True)
class GetTraceData(Request, tag="gettracedata"):
    """Retrieve accumulated trace data."""

    id: str = _kind(_STR)


@dataclass(frozen=True)
class Dove(Request, tag="dove"):
    """Request a Visual Explain plan tree for a statement."""

    id: str = _kind(_STR)
    sql: str = _kind(_STR)


@dataclass(frozen=True)
class Ping(Request, tag="ping"):
    """Health check."""

    id: str = _kind(_STR)


@dataclass(frozen=True)
class Exit(Request, tag="exit"):
    """Terminate the session and close the connection."""

    id: str = _kind(_STR)


def _decode_value(tag: str, name: str, kind: str, value: Any) -> Any:
    if kind == _STR:
        if not isinstance(value, str):
            raise MalformedJsonError(f"{tag}.{name}: expected a string")
        return value
    if kind == _U32:
        if (
            isinstance(value, bool)
            or not isinstance(value, int)
            or not 0 <= value <= _U32_MAX
        ):
            raise MalformedJsonError(f"{tag}.{name}: expected an unsigned 32-bit integer")
        return value
    if kind == _PARAMS:
        if not isinstance(value, list):
            raise MalformedJsonError(f"{tag}.{name}: expected an array")
        return list(value)
    if kind == _BATCH:
        if not isinstance(value, list) or not all(isinstance(row, list) for row in value):
            raise MalformedJsonError(f"{tag}.{name}: expected an array of arrays")
        return [list(row) for row in value]
    raise MalformedJsonError(f"{tag}.{name}: unsupported field kind {kind}")


def request_from_dict(data: Any) -> Request:
    """Build a request from its decoded wire form; unknown fields are ignored."""
    if not isinstance(data, dict):
        raise MalformedJsonError("expected a JSON object")
    tag = data.get("type")
    if tag is None:
        raise MalformedJsonError("missing field `type`")
    if not isinstance(tag, str) or tag not in _REGISTRY:
        raise MalformedJsonError(f"unknown variant `{tag}`")
    cls = _REGISTRY[tag]
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        kind = f.metadata["kind"]
        value = data.get(f.name)
        optional = f.default is None
        if value is None:
            if optional:
                kwargs[f.name] = None
                continue
            raise MalformedJsonError(f"missing field `{f.name}` in {tag}")
        kwargs[f.name] = _decode_value(tag, f.name, kind, value)
    return cls(**kwargs)


def parse_request(text: str | bytes) -> Request:
    """Parse JSON text into a request."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise to_error(exc) from exc
    return request_from_dict(data)