"""Registration entry that builds and initializes a single keyed instance."""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any, Callable

from .keys import DEFAULT_PRIORITY, clamp_priority

__all__ = ["Creator", "Initializer", "EntryState", "RegistrationEntry"]

Creator = Callable[[], Any]
Initializer = Callable[[Any], None]

logger = logging.getLogger(__name__)


class EntryState(Enum):
    """Lifecycle states for registration entries."""

    EMPTY = "empty"
    BUILT = "built"
    INITIALIZED = "initialized"


class RegistrationEntry:
    """One registration: creator, optional initializer, priority and cached instance.

    ``create`` and ``init`` are serialized by a per-entry re-entrant lock, so
    concurrent callers for the same key wait for the first one and then see
    its result. Neither method raises on client failures; they log and leave
    the entry in its previous state so a later call can retry.
    """

    def __init__(
        self,
        key: str,
        creator: Creator,
        initializer: Initializer | None = None,
        priority: int = DEFAULT_PRIORITY,
    ) -> None:
        if not callable(creator):
            raise TypeError(f"creator for {key!r} must be callable")
        if initializer is not None and not callable(initializer):
            raise TypeError(f"initializer for {key!r} must be callable")
        self.key = key
        self.creator = creator
        self.initializer = initializer
        self._priority = clamp_priority(priority)
        self._instance: Any | None = None
        self._initialized = False
        self._init_owner: int | None = None
        self._lock = threading.RLock()

    @property
    def priority(self) -> int:
        return self._priority

    @property
    def instance(self) -> Any | None:
        return self._instance

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def initializing(self) -> bool:
        """True while the current thread is running this entry's initializer."""

        return self._init_owner == threading.get_ident()

    @property
    def state(self) -> EntryState:
        if self._initialized:
            return EntryState.INITIALIZED
        if self._instance is not None:
            return EntryState.BUILT
        return EntryState.EMPTY

    def create(self) -> Any | None:
        """Build the instance on first call and return the cached one afterwards."""

        with self._lock:
            if self._instance is not None:
                return self._instance
            try:
                instance = self.creator()
            except Exception:
                logger.warning("create failed for %r", self.key, exc_info=True)
                return None
            if instance is None:
                logger.warning("creator for %r returned no instance", self.key)
                return None
            self._instance = instance
            logger.debug("created %r", self.key)
            return instance

    def init(self) -> None:
        """Run the initializer once on the built instance."""

        with self._lock:
            # a cycle re-entering through get() lands here on the same thread
            if self._initialized or self._init_owner is not None:
                return
            instance = self.create()
            if instance is None:
                return
            if self.initializer is not None:
                self._init_owner = threading.get_ident()
                try:
                    self.initializer(instance)
                except Exception:
                    logger.warning("init failed for %r", self.key, exc_info=True)
                    return
                finally:
                    self._init_owner = None
            self._initialized = True
            logger.debug("initialized %r", self.key)

    def observe(self) -> Any | None:
        """Return the instance if a lookup may see it, else ``None``.

        Visible once initialized, or to the thread currently running the
        initializer (an initializer cycle). Waits for any other thread that is
        still creating or initializing this entry.
        """

        with self._lock:
            if self._initialized or self.initializing:
                return self._instance
            return None

    def info(self) -> str:
        return f"{self.key} (priority={self._priority}, state={self.state.value})"

    def __lt__(self, other: RegistrationEntry) -> bool:
        if not isinstance(other, RegistrationEntry):
            return NotImplemented
        return self._priority < other._priority

    def __repr__(self) -> str:
        return f"RegistrationEntry({self.info()})"
