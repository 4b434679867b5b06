"""Key composition helpers shared by the registry and its entries."""

from __future__ import annotations

from typing import Any

from .errors import InvalidKeyError

KEY_SEPARATOR = "#"
MIN_PRIORITY = 0
MAX_PRIORITY = 10
DEFAULT_PRIORITY = 5


def type_identity(type_: type[Any]) -> str:
    """Return the process-stable identity used as the unnamed key of ``type_``.

    Classes defined inside a function share a qualname with every other class
    created by the same function, so their identity also carries the object id.
    """

    if not isinstance(type_, type):
        raise TypeError(f"expected a class, got {type_!r}")
    identity = f"{type_.__module__}.{type_.__qualname__}"
    if "<locals>" in type_.__qualname__:
        identity = f"{identity}@{id(type_):x}"
    return identity


def validate_instance_name(name: str) -> str:
    if not isinstance(name, str):
        raise InvalidKeyError(f"instance name must be a string, got {type(name).__name__}")
    if not name:
        raise InvalidKeyError("instance name cannot be empty.")
    if KEY_SEPARATOR in name:
        raise InvalidKeyError(f"instance name may not contain {KEY_SEPARATOR!r}: {name!r}")
    return name


def make_key(type_: type[Any], name: str | None = None) -> str:
    """Compose ``<type-identity>`` or ``<type-identity>#<name>``."""

    identity = type_identity(type_)
    if name is None:
        return identity
    return f"{identity}{KEY_SEPARATOR}{validate_instance_name(name)}"


def clamp_priority(priority: int) -> int:
    return max(MIN_PRIORITY, min(MAX_PRIORITY, int(priority)))
