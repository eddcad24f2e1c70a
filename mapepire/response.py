"""Incoming wire responses, tagged on the wire by their ``type`` field."""

from __future__ import annotations

import json
from dataclasses import MISSING, dataclass, field, fields
from typing import Any, ClassVar

from mapepire.errors import MalformedJsonError, to_error

_U32 = (0, 0xFFFFFFFF)
_I32 = (-(1 << 31), (1 << 31) - 1)
_I64 = (-(1 << 63), (1 << 63) - 1)

_REGISTRY: dict[str, type[Response]] = {}


def _spec(kind: str, *, wire: str | None = None, optional: bool = False, **kwargs: Any) -> Any:
    metadata: dict[str, Any] = {"kind": kind, "optional": optional}
    if wire is not None:
        metadata["wire"] = wire
    return field(metadata=metadata, **kwargs)


def _is_int_in(value: Any, bounds: tuple[int, int]) -> bool:
    low, high = bounds
    return isinstance(value, int) and not isinstance(value, bool) and low <= value <= high


def _decode_value(where: str, kind: str, value: Any) -> Any:
    if kind == "str":
        if isinstance(value, str):
            return value
        raise MalformedJsonError(f"{where}: expected a string")
    if kind == "bool":
        if isinstance(value, bool):
            return value
        raise MalformedJsonError(f"{where}: expected a boolean")
    if kind == "f64":
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        raise MalformedJsonError(f"{where}: expected a number")
    if kind in ("i64", "i32", "u32"):
        bounds = {"i64": _I64, "i32": _I32, "u32": _U32}[kind]
        if _is_int_in(value, bounds):
            return value
        raise MalformedJsonError(f"{where}: expected an integer fitting {kind}")
    if kind == "json":
        return value
    if kind == "data":
        if isinstance(value, list) and all(isinstance(row, dict) for row in value):
            return [dict(row) for row in value]
        raise MalformedJsonError(f"{where}: expected an array of objects")
    if kind == "metadata":
        return _decode(QueryMetaData, value, where)
    if kind in ("columns", "messages"):
        if not isinstance(value, list):
            raise MalformedJsonError(f"{where}: expected an array")
        item_cls = Column if kind == "columns" else ClMessage
        return [_decode(item_cls, item, f"{where}[{n}]") for n, item in enumerate(value)]
    raise MalformedJsonError(f"{where}: unsupported field kind {kind}")


def _decode(cls: type, data: Any, where: str) -> Any:
    if not isinstance(data, dict):
        raise MalformedJsonError(f"{where}: expected a JSON object")
    kwargs: dict[str, Any] = {}
    for f in fields(cls):
        wire = f.metadata.get("wire", f.name)
        optional = f.metadata["optional"]
        if wire not in data:
            if f.default is not MISSING or f.default_factory is not MISSING:
                continue
            if optional:
                kwargs[f.name] = None
                continue
            raise MalformedJsonError(f"missing field `{wire}` in {where}")
        value = data[wire]
        if value is None and optional:
            kwargs[f.name] = None
            continue
        kwargs[f.name] = _decode_value(f"{where}.{wire}", f.metadata["kind"], value)
    return cls(**kwargs)


def _encode_value(kind: str, value: Any) -> Any:
    if value is None:
        return None
    if kind == "f64":
        return float(value)
    if kind == "metadata":
        return value.to_dict()
    if kind in ("columns", "messages"):
        return [item.to_dict() for item in value]
    if kind == "data":
        return [dict(row) for row in value]
    return value


def _encode(obj: Any, wire: dict[str, Any]) -> dict[str, Any]:
    for f in fields(obj):
        name = f.metadata.get("wire", f.name)
        wire[name] = _encode_value(f.metadata["kind"], getattr(obj, f.name))
    return wire


@dataclass(frozen=True)
class Column:
    """Metadata for one result-set column."""

    name: str = _spec("str")
    label: str | None = _spec("str", optional=True, default=None)
    type_name: str | None = _spec("str", wire="type", optional=True, default=None)
    display_size: int | None = _spec("u32", optional=True, default=None)
    precision: int | None = _spec("u32", optional=True, default=None)
    scale: int | None = _spec("u32", optional=True, default=None)

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form."""
        return _encode(self, {})

    @classmethod
    def from_dict(cls, data: Any) -> Column:
        """Build from the wire form."""
        return _decode(cls, data, "column")


@dataclass(frozen=True)
class QueryMetaData:
    """Result-set column metadata."""

    column_count: int = _spec("u32", default=0)
    columns: list[Column] = _spec("columns", default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form."""
        return _encode(self, {})

    @classmethod
    def from_dict(cls, data: Any) -> QueryMetaData:
        """Build from the wire form."""
        return _decode(cls, data, "metadata")


@dataclass(frozen=True)
class ClMessage:
    """One message returned by a ``cl`` request."""

    id: str | None = _spec("str", optional=True, default=None)
    kind: str | None = _spec("str", wire="type", optional=True, default=None)
    text: str | None = _spec("str", optional=True, default=None)

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form."""
        return _encode(self, {})

    @classmethod
    def from_dict(cls, data: Any) -> ClMessage:
        """Build from the wire form."""
        return _decode(cls, data, "message")


@dataclass(frozen=True)
class Response:
    """Base of every response the server may send."""

    TYPE: ClassVar[str] = ""

    def __init_subclass__(cls, tag: str = "", **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if tag:
            cls.TYPE = tag
            _REGISTRY[tag] = cls

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form, with the tag first."""
        return _encode(self, {"type": self.TYPE})

    def to_json(self) -> str:
        """Serialize to compact JSON text."""
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class Connected(Response, tag="connected"):
    """Successful authentication."""

    id: str = _spec("str")
    version: str = _spec("str")
    job: str = _spec("str")


@dataclass(frozen=True)
class Pong(Response, tag="pong"):
    """Health-check echo."""

    id: str = _spec("str")


@dataclass(frozen=True)
class Exited(Response, tag="exited"):
    """Acknowledges ``exit``; the socket closes right after."""

    id: str = _spec("str")


@dataclass(frozen=True)
class QueryResult(Response, tag="query_result"):
    """Result of ``sql``, ``execute``, ``prepare_sql_execute`` or ``sqlmore``."""

    id: str = _spec("str")
    success: bool = _spec("bool")
    has_results: bool = _spec("bool")
    update_count: int = _spec("i64", default=0)
    cont_id: str | None = _spec("str", optional=True, default=None)
    is_done: bool = _spec("bool", default=True)
    metadata: QueryMetaData = _spec("metadata", default_factory=QueryMetaData)
    data: list[dict[str, Any]] = _spec("data", default_factory=list)
    execution_time: float = _spec("f64", default=0.0)


@dataclass(frozen=True)
class PreparedStatement(Response, tag="prepared_statement"):
    """Acknowledges ``prepare_sql`` with the statement handle."""

    id: str = _spec("str")
    success: bool = _spec("bool")
    cont_id: str = _spec("str")
    execution_time: float = _spec("f64")


@dataclass(frozen=True)
class SqlClosed(Response, tag="sql_closed"):
    """Acknowledges ``sqlclose``."""

    id: str = _spec("str")
    success: bool = _spec("bool")


@dataclass(frozen=True)
class ClResult(Response, tag="cl_result"):
    """Result of ``cl``."""

    id: str = _spec("str")
    success: bool = _spec("bool")
    messages: list[ClMessage] = _spec("messages")


@dataclass(frozen=True)
class Version(Response, tag="version"):
    """Result of ``getversion``."""

    id: str = _spec("str")
    success: bool = _spec("bool")
    version: str = _spec("str")


@dataclass(frozen=True)
class DbJob(Response, tag="db_job"):
    """Result of ``getdbjob``."""

    id: str = _spec("str")
    success: bool = _spec("bool")
    job: str = _spec("str")


@dataclass(frozen=True)
class ConfigSet(Response, tag="config_set"):
    """Result of ``setconfig``."""

    id: str = _spec("str")
    success: bool = _spec("bool")


@dataclass(frozen=True)
class TraceData(Response, tag="trace_data"):
    """Result of ``gettracedata``."""

    id: str = _spec("str")
    success: bool = _spec("bool")
    tracedata: str = _spec("str")


@dataclass(frozen=True)
class DoveResult(Response, tag="dove_result"):
    """Result of ``dove``; the plan tree is server-defined JSON."""

    id: str = _spec("str")
    success: bool = _spec("bool")
    result: Any = _spec("json")


@dataclass(frozen=True)
class ErrorResponse(Response, tag="error"):
    """Server-side error response."""

    id: str = _spec("str")
    success: bool = _spec("bool")
    sqlstate: str | None = _spec("str", optional=True, default=None)
    sqlcode: int | None = _spec("i32", optional=True, default=None)
    error: str | None = _spec("str", optional=True, default=None)
    job: str | None = _spec("str", optional=True, default=None)


def response_from_dict(data: Any) -> Response:
    """Build a response from its decoded wire form; unknown fields are ignored."""
    if not isinstance(data, dict):
        raise MalformedJsonError("expected a JSON object")
    tag = data.get("type")
    if tag is None:
        raise MalformedJsonError("missing field `type`")
    if not isinstance(tag, str) or tag not in _REGISTRY:
        raise MalformedJsonError(f"unknown variant `{tag}`")
    return _decode(_REGISTRY[tag], data, tag)


def parse_response(text: str | bytes) -> Response:
    """Parse JSON text into a response."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise to_error(exc) from exc
    return response_from_dict(data)