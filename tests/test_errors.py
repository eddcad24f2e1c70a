import json

import pytest

from mapepire.errors import (
    AuthError,
    CorrelationMismatchError,
    DecodeError,
    DiagnosticItem,
    InternalError,
    MalformedJsonError,
    MapepireError,
    MissingColumnError,
    ProtocolError,
    ServerError,
    TransportError,
    ConnectionClosedError,
    to_error,
)


def srv(sqlstate):
    return ServerError(message="x", sqlstate=sqlstate)


def test_is_transient_classifies():
    assert srv("08001").is_transient()
    assert srv("08S01").is_transient()
    assert srv("40001").is_transient()
    assert srv("57033").is_transient()
    assert not srv("23000").is_transient()
    assert not srv(None).is_transient()


def test_is_transient_does_not_widen_classes():
    assert not srv("40002").is_transient()
    assert not srv("57014").is_transient()


def test_is_constraint_violation_classifies():
    assert srv("23000").is_constraint_violation()
    assert srv("23505").is_constraint_violation()
    assert not srv("22000").is_constraint_violation()
    assert not srv(None).is_constraint_violation()


def test_is_authorization_classifies():
    assert srv("28000").is_authorization()
    assert srv("42501").is_authorization()
    assert not srv("23000").is_authorization()


def test_is_object_not_found_classifies():
    assert srv("42704").is_object_not_found()
    assert srv("42S02").is_object_not_found()
    assert not srv("42501").is_object_not_found()
    assert not srv("42703").is_object_not_found()


def test_is_data_type_mismatch_classifies():
    assert srv("22001").is_data_type_mismatch()
    assert srv("22018").is_data_type_mismatch()
    assert not srv("23000").is_data_type_mismatch()


def test_server_error_display():
    s = str(srv("23505"))
    assert "23505" in s
    assert "x" in s
    assert "job=" not in s


def test_server_error_display_includes_job_name_when_present():
    e = ServerError(message="x", sqlstate="23505", job_name="QZDASOINIT/QUSER/123456")
    s = str(e)
    assert "QZDASOINIT/QUSER/123456" in s
    assert "23505" in s


def test_server_error_is_client_error_with_sqlstate_in_text():
    err = to_error(srv("23505"))
    assert isinstance(err, MapepireError)
    assert "23505" in str(err)


def test_server_error_keeps_diagnostics():
    item = DiagnosticItem(text="bad thing", message_id="CPF1234")
    e = ServerError(message="m", diagnostics=[item])
    assert e.diagnostics == [item]
    assert "bad thing" not in str(e)


def test_from_io_error_classifies_as_transport():
    io = ConnectionResetError("bye")
    err = to_error(io)
    assert isinstance(err, TransportError)
    assert err.__cause__ is io
    assert str(err).startswith("transport: io:")


def test_from_json_error_classifies_as_protocol():
    with pytest.raises(json.JSONDecodeError) as info:
        json.loads("not json")
    err = to_error(info.value)
    assert isinstance(err, MalformedJsonError)
    assert isinstance(err, ProtocolError)
    assert str(err).startswith("protocol: malformed JSON:")


def test_to_error_rejects_unrelated_exceptions():
    with pytest.raises(TypeError):
        to_error(KeyError("k"))


def test_messages():
    assert str(ConnectionClosedError()) == "transport: connection closed by peer"
    assert str(AuthError("nope")) == "authentication failed: nope"
    assert str(InternalError("bug")) == "internal error: bug"
    mismatch = CorrelationMismatchError("a-1", "a-2")
    assert str(mismatch) == "protocol: response correlation mismatch: expected id a-1, got a-2"
    assert mismatch.expected == "a-1" and mismatch.got == "a-2"


def test_missing_column_is_decode_error():
    err = MissingColumnError("NAME")
    assert isinstance(err, DecodeError)
    assert err.column == "NAME"
    assert "column not found: NAME" in str(err)