"""Process-wide type-keyed registry with lazy creation and priority-ordered init."""

from __future__ import annotations

import logging
import operator
import sys
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, TextIO, TypeVar

from .config import RegistrySettings, load_settings
from .entry import Creator, EntryState, RegistrationEntry
from .errors import ConfigError, InstanceUnavailableError, MissingRegistrationError
from .keys import MAX_PRIORITY, clamp_priority, make_key

__all__ = ["Registry", "EntryInfo", "BatchReport", "default_registry"]

T = TypeVar("T")

InitSpec = Callable[[Any], None] | str

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryInfo:
    """Point-in-time description of a registration."""

    key: str
    priority: int
    state: EntryState
    instance_type: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "priority": self.priority,
            "state": self.state.value,
            "instance_type": self.instance_type,
        }


@dataclass(frozen=True)
class BatchReport:
    """Outcome of a batch initialization pass, keys listed in execution order.

    ``priority`` is the upper bound of the pass, or the only level run when
    ``exact`` is set.
    """

    priority: int
    exact: bool = False
    created: tuple[str, ...] = field(default_factory=tuple)
    initialized: tuple[str, ...] = field(default_factory=tuple)
    failed: tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict[str, Any]:
        return {
            "priority": self.priority,
            "exact": self.exact,
            "created": list(self.created),
            "initialized": list(self.initialized),
            "failed": list(self.failed),
        }


def _as_initializer(init: InitSpec | None) -> Callable[[Any], None] | None:
    if init is None:
        return None
    if isinstance(init, str):
        return operator.methodcaller(init)
    if not callable(init):
        raise TypeError(f"initializer must be callable or a method name, got {init!r}")
    return init


class Registry:
    """Directory of keyed creators that builds singletons on demand.

    The registry lock only guards the ``key -> entry`` mapping; creators and
    initializers always run with it released, so they may call back into the
    registry (``get`` for a peer, for example).
    """

    def __init__(self, settings: RegistrySettings | None = None) -> None:
        self.settings = settings or RegistrySettings()
        self._entries: dict[str, RegistrationEntry] = {}
        self._lock = threading.Lock()

    # ---------- registration ----------

    def register(
        self,
        type_: type[T],
        creator: Callable[[], T],
        *,
        name: str | None = None,
        initializer: InitSpec | None = None,
        priority: int | None = None,
    ) -> str:
        """Install ``creator`` for ``type_`` (and ``name``), replacing any prior entry.

        ``initializer`` is either a callable receiving the built instance or the
        name of a method to call on it. Returns the composed key.
        """

        key = make_key(type_, name)
        if priority is None:
            priority = self.settings.default_priority
        entry = RegistrationEntry(
            key,
            creator,
            _as_initializer(initializer),
            clamp_priority(priority),
        )
        with self._lock:
            replaced = key in self._entries
            self._entries[key] = entry
        if replaced:
            logger.warning("overwriting registration for %r", key)
        logger.info("registered %r with priority %d", key, entry.priority)
        return key

    def register_default(
        self,
        type_: type[T],
        *,
        name: str | None = None,
        priority: int | None = None,
    ) -> str:
        return self.register(type_, type_, name=name, priority=priority)

    def register_with_init(
        self,
        type_: type[T],
        init: InitSpec,
        *,
        name: str | None = None,
        priority: int | None = None,
    ) -> str:
        return self.register(type_, type_, name=name, initializer=init, priority=priority)

    def register_factory(
        self,
        type_: type[T],
        factory: Callable[[], T],
        *,
        name: str | None = None,
        priority: int | None = None,
    ) -> str:
        return self.register(type_, factory, name=name, priority=priority)

    def register_factory_with_init(
        self,
        type_: type[T],
        factory: Callable[[], T],
        init: InitSpec,
        *,
        name: str | None = None,
        priority: int | None = None,
    ) -> str:
        return self.register(type_, factory, name=name, initializer=init, priority=priority)

    # ---------- lookups ----------

    def _lookup(self, key: str) -> RegistrationEntry | None:
        with self._lock:
            return self._entries.get(key)

    def get(self, type_: type[T], name: str | None = None) -> T | None:
        """Return the built and initialized instance, or ``None`` on any failure."""

        key = make_key(type_, name)
        entry = self._lookup(key)
        if entry is None:
            logger.warning("no registration for %r", key)
            return None
        return self._materialize(type_, entry)

    def _materialize(self, type_: type[Any], entry: RegistrationEntry) -> Any | None:
        entry.create()
        entry.init()
        instance = entry.observe()
        if instance is None:
            return None
        if self.settings.strict_types and not isinstance(instance, type_):
            logger.error(
                "%r holds %s, not %s",
                entry.key,
                type(instance).__qualname__,
                type_.__qualname__,
            )
            return None
        return instance

    def require(self, type_: type[T], name: str | None = None) -> T:
        """Like :meth:`get` but raise instead of returning ``None``."""

        key = make_key(type_, name)
        entry = self._lookup(key)
        if entry is None:
            raise MissingRegistrationError(key)
        instance = self._materialize(type_, entry)
        if instance is None:
            if entry.instance is None:
                reason = "creation failed"
            elif not entry.initialized:
                reason = "initialization failed"
            else:
                reason = f"instance is not a {type_.__qualname__}"
            raise InstanceUnavailableError(key, reason)
        return instance

    def has(self, type_: type[Any], name: str | None = None) -> bool:
        key = make_key(type_, name)
        with self._lock:
            return key in self._entries

    def has_instance(self, type_: type[Any], name: str | None = None) -> bool:
        entry = self._lookup(make_key(type_, name))
        return entry is not None and entry.instance is not None

    def create_temp(self, type_: type[T], name: str | None = None) -> T | None:
        """Build a fresh, uncached instance with the registered creator.

        Falls back to the default constructor when nothing is registered.
        """

        entry = self._lookup(make_key(type_, name))
        creator: Creator = entry.creator if entry is not None else type_
        try:
            return creator()
        except Exception:
            logger.warning("temporary create failed for %s", type_.__qualname__, exc_info=True)
            return None

    # ---------- batch initialization ----------

    def execute_prior_inits(self, max_priority: int = MAX_PRIORITY) -> BatchReport:
        """Create, then initialize, every entry whose priority is <= ``max_priority``."""

        max_priority = clamp_priority(max_priority)
        with self._lock:
            selected = [e for e in self._entries.values() if e.priority <= max_priority]
        logger.info(
            "running initializers with priority 0-%d (%d entries)", max_priority, len(selected)
        )
        report = self._run_batch(selected, max_priority)
        logger.info(
            "priority 0-%d initializers executed, total instances: %d",
            max_priority,
            self.size_instances(),
        )
        return report

    def execute_all_inits(self) -> BatchReport:
        return self.execute_prior_inits(MAX_PRIORITY)

    def execute_inits(self, max_priority: int = MAX_PRIORITY) -> BatchReport:
        return self.execute_prior_inits(max_priority)

    def execute_inits_at_priority(self, priority: int) -> BatchReport:
        """Run the batch over exactly one priority level."""

        priority = clamp_priority(priority)
        with self._lock:
            selected = [e for e in self._entries.values() if e.priority == priority]
        logger.info("running priority %d initializers (%d entries)", priority, len(selected))
        return self._run_batch(selected, priority, exact=True)

    def _run_batch(
        self,
        entries: Iterable[RegistrationEntry],
        priority: int,
        *,
        exact: bool = False,
    ) -> BatchReport:
        ordered = sorted(entries, key=operator.attrgetter("priority"))
        created: list[str] = []
        initialized: list[str] = []
        failed: list[str] = []
        for entry in ordered:
            if entry.create() is None:
                failed.append(entry.key)
            else:
                created.append(entry.key)
        for entry in ordered:
            if entry.instance is None:
                continue
            entry.init()
            if entry.initialized:
                initialized.append(entry.key)
            else:
                failed.append(entry.key)
        return BatchReport(
            priority=priority,
            exact=exact,
            created=tuple(created),
            initialized=tuple(initialized),
            failed=tuple(failed),
        )

    # ---------- diagnostics ----------

    def entries(self) -> tuple[EntryInfo, ...]:
        """Return a snapshot of every entry ordered by priority then key."""

        with self._lock:
            snapshot = list(self._entries.values())
        infos = [
            EntryInfo(
                key=entry.key,
                priority=entry.priority,
                state=entry.state,
                instance_type=(
                    type(entry.instance).__qualname__ if entry.instance is not None else None
                ),
            )
            for entry in snapshot
        ]
        return tuple(sorted(infos, key=lambda info: (info.priority, info.key)))

    def size_entries(self) -> int:
        with self._lock:
            return len(self._entries)

    def size_instances(self) -> int:
        with self._lock:
            return sum(1 for entry in self._entries.values() if entry.instance is not None)

    def __len__(self) -> int:
        return self.size_entries()

    def dump_entries(self, stream: TextIO | None = None) -> None:
        out = stream or sys.stdout
        infos = self.entries()
        out.write(f"Registry entries ({len(infos)}):\n")
        for info in infos:
            out.write(f"  - {info.key} (priority={info.priority}, state={info.state.value})\n")

    def dump_instances(self, stream: TextIO | None = None) -> None:
        out = stream or sys.stdout
        with self._lock:
            built = [(e.key, e.instance) for e in self._entries.values() if e.instance is not None]
        out.write(f"Registry instances ({len(built)}):\n")
        if not built:
            out.write("  no instances built.\n")
            return
        for key, instance in sorted(built, key=lambda item: item[0]):
            out.write(f"  - {key}: {type(instance).__qualname__} at {id(instance):#x}\n")

    def clear(self) -> None:
        """Drop every entry and cached instance.

        A creator running on another thread finishes on its detached entry; its
        caller still receives the result but the registry no longer holds it.
        """

        with self._lock:
            count = len(self._entries)
            self._entries = {}
        logger.info("cleared %d entries", count)


_default: Registry | None = None
_default_lock = threading.Lock()


def default_registry(settings: RegistrySettings | None = None) -> Registry:
    """Return the lazily constructed process-wide registry.

    ``settings`` only applies to the call that constructs it; otherwise the
    layered configuration from :func:`load_settings` is used. Malformed
    settings are logged and replaced by the defaults, since decorators build
    this registry while their module is being imported.
    """

    global _default
    with _default_lock:
        if _default is None:
            if settings is None:
                try:
                    settings = load_settings()
                except ConfigError as exc:
                    logger.warning("ignoring invalid settings, using defaults: %s", exc)
                    settings = RegistrySettings()
            _default = Registry(settings)
        return _default
