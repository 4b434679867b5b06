"""Decorators that register classes and factories when their module is imported."""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from .registry import InitSpec, Registry, default_registry

__all__ = ["autoregister", "provides"]

_C = TypeVar("_C", bound=type)
_F = TypeVar("_F", bound=Callable[[], Any])


def _target_registry(registry: Registry | None) -> Registry:
    return registry if registry is not None else default_registry()


def autoregister(
    cls: _C | None = None,
    *,
    name: str | None = None,
    priority: int | None = None,
    init: InitSpec | None = None,
    registry: Registry | None = None,
) -> Callable[[_C], _C] | _C:
    """Register a class for default construction.

    Usable bare (``@autoregister``) or with options
    (``@autoregister(name="primary", priority=1, init="start")``). The class
    is returned unchanged and the key is stored on ``__autoreg_key__``.
    """

    def wrap(target: _C) -> _C:
        if not isinstance(target, type):
            raise TypeError("Decorated object must be a class.")
        key = _target_registry(registry).register(
            target,
            target,
            name=name,
            initializer=init,
            priority=priority,
        )
        setattr(target, "__autoreg_key__", key)
        return target

    if cls is None:
        return wrap
    return wrap(cls)


def provides(
    type_: type[Any],
    *,
    name: str | None = None,
    priority: int | None = None,
    init: InitSpec | None = None,
    registry: Registry | None = None,
) -> Callable[[_F], _F]:
    """Register a zero-argument function as the creator for ``type_``."""

    def wrap(factory: _F) -> _F:
        if not callable(factory):
            raise TypeError(f"{factory!r} is not callable.")
        _target_registry(registry).register(
            type_,
            factory,
            name=name,
            initializer=init,
            priority=priority,
        )
        return factory

    return wrap
