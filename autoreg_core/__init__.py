"""Type-keyed registry with lazy instantiation and priority-ordered initialization."""

from .config import RegistrySettings, default_config_path, load_settings
from .decorators import autoregister, provides
from .entry import EntryState, RegistrationEntry
from .errors import (
    AutoRegisterError,
    ConfigError,
    InstanceUnavailableError,
    InvalidKeyError,
    MissingRegistrationError,
)
from .keys import (
    DEFAULT_PRIORITY,
    KEY_SEPARATOR,
    MAX_PRIORITY,
    MIN_PRIORITY,
    clamp_priority,
    make_key,
    type_identity,
)
from .logs import configure_logging
from .registry import BatchReport, EntryInfo, Registry, default_registry

__version__ = "0.1.0"

__all__ = [
    "Registry",
    "RegistrationEntry",
    "EntryState",
    "EntryInfo",
    "BatchReport",
    "default_registry",
    "autoregister",
    "provides",
    "make_key",
    "type_identity",
    "clamp_priority",
    "KEY_SEPARATOR",
    "MIN_PRIORITY",
    "MAX_PRIORITY",
    "DEFAULT_PRIORITY",
    "AutoRegisterError",
    "InvalidKeyError",
    "MissingRegistrationError",
    "InstanceUnavailableError",
    "ConfigError",
    "RegistrySettings",
    "load_settings",
    "default_config_path",
    "configure_logging",
]
