import copy
import pickle

import pytest

from mapepire.password import Password


def test_debug_does_not_leak():
    p = Password("secret")
    s = repr(p)
    assert s == "Password([REDACTED])"
    assert "secret" not in s
    assert str(p) == "Password([REDACTED])"
    assert "secret" not in f"{p}"


def test_expose_returns_inner():
    p = Password("password")
    assert p.expose() == "password"


def test_zeroize_clears_buffer():
    p = Password("password")
    assert p.expose() == "password"
    p.zeroize()
    assert p.expose() == "\x00" * len("password")


def test_cannot_copy():
    p = Password("secret")
    with pytest.raises(TypeError):
        copy.copy(p)
    with pytest.raises(TypeError):
        copy.deepcopy(p)


def test_cannot_pickle():
    with pytest.raises(TypeError):
        pickle.dumps(Password("secret"))