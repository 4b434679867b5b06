"""Custom errors raised by the AutoRegister registry."""

from __future__ import annotations


class AutoRegisterError(Exception):
    """Base class for registry errors."""


class InvalidKeyError(AutoRegisterError, ValueError):
    """Raised when an instance name cannot be turned into a registry key."""


class MissingRegistrationError(AutoRegisterError, LookupError):
    """Raised by strict lookups when no entry exists for a key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"no registration for {key!r}")
        self.key = key


class InstanceUnavailableError(AutoRegisterError):
    """Raised by strict lookups when an entry exists but could not be built."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"{key!r} is unavailable: {reason}")
        self.key = key
        self.reason = reason


class ConfigError(AutoRegisterError):
    """Raised when registry settings cannot be loaded or validated."""
