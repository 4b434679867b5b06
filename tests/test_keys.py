"""Unit tests for registry key composition and priority clamping."""

from __future__ import annotations

import pytest

from autoreg_core import (
    KEY_SEPARATOR,
    MAX_PRIORITY,
    MIN_PRIORITY,
    InvalidKeyError,
    clamp_priority,
    make_key,
    type_identity,
)


class Conn:
    pass


def _local_class():
    class Local:
        pass

    return Local


def test_unnamed_key_is_module_qualified_name() -> None:
    assert make_key(Conn) == f"{__name__}.Conn"
    assert make_key(Conn) == type_identity(Conn)


def test_named_key_uses_separator() -> None:
    assert make_key(Conn, "primary") == f"{__name__}.Conn{KEY_SEPARATOR}primary"
    assert make_key(Conn, "primary") != make_key(Conn)


def test_local_classes_get_distinct_identities() -> None:
    first = _local_class()
    second = _local_class()
    assert first.__qualname__ == second.__qualname__
    assert type_identity(first) != type_identity(second)
    assert type_identity(first) == type_identity(first)


@pytest.mark.parametrize("name", ["", "a#b", "#"])
def test_invalid_instance_names_are_rejected(name: str) -> None:
    with pytest.raises(InvalidKeyError):
        make_key(Conn, name)


def test_invalid_key_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        make_key(Conn, "x#y")


def test_non_class_type_is_rejected() -> None:
    with pytest.raises(TypeError):
        type_identity("Conn")  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("given", "expected"),
    [(-5, MIN_PRIORITY), (0, 0), (3, 3), (10, 10), (99, MAX_PRIORITY)],
)
def test_clamp_priority(given: int, expected: int) -> None:
    assert clamp_priority(given) == expected
