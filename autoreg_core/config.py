"""Layered settings for the registry: defaults, TOML file, environment, overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import tomllib
from platformdirs import user_config_dir

from .errors import ConfigError
from .keys import DEFAULT_PRIORITY, MAX_PRIORITY, clamp_priority

DEFAULT_APP_NAME = "autoreg"
CONFIG_FILE_NAME = "config.toml"
CONFIG_TABLE = "autoreg"
CONFIG_ENV_VAR = "AUTOREG_CONFIG"

_ENV_KEY_MAP: dict[str, str] = {
    "default_priority": "AUTOREG_DEFAULT_PRIORITY",
    "strict_types": "AUTOREG_STRICT_TYPES",
    "log_level": "AUTOREG_LOG_LEVEL",
    "modules": "AUTOREG_MODULES",
    "max_priority": "AUTOREG_MAX_PRIORITY",
}
_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


def default_config_path() -> Path:
    """Return the platform-specific default settings file."""

    return Path(user_config_dir(DEFAULT_APP_NAME, appauthor=False)) / CONFIG_FILE_NAME


@dataclass(frozen=True)
class RegistrySettings:
    default_priority: int = DEFAULT_PRIORITY
    strict_types: bool = False
    log_level: str = "WARNING"
    modules: tuple[str, ...] = ()
    max_priority: int = MAX_PRIORITY

    def __post_init__(self) -> None:
        object.__setattr__(self, "default_priority", clamp_priority(self.default_priority))
        object.__setattr__(self, "max_priority", clamp_priority(self.max_priority))
        object.__setattr__(self, "log_level", str(self.log_level).upper())
        object.__setattr__(self, "modules", tuple(self.modules))


def _load_config_from_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("rb") as handle:
            data = tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"cannot read settings from {path}: {exc}") from exc
    table = data.get(CONFIG_TABLE, data)
    if not isinstance(table, dict):
        raise ConfigError(f"[{CONFIG_TABLE}] in {path} must be a table")
    return table


def _load_config_from_env(env: Mapping[str, str]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for key, env_key in _ENV_KEY_MAP.items():
        if env_key in env:
            values[key] = env[env_key]
    return values


def _coerce_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ConfigError(f"{key} must be a boolean, got {value!r}")


def _coerce_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from exc


def _coerce_modules(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(item) for item in value]
    else:
        raise ConfigError(f"modules must be a list or comma separated string, got {value!r}")
    return tuple(item.strip() for item in items if item.strip())


def _coerce(values: Mapping[str, Any]) -> dict[str, Any]:
    known = {f.name for f in fields(RegistrySettings)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigError(f"unknown settings: {', '.join(unknown)}")
    out: dict[str, Any] = {}
    for key, value in values.items():
        if key in ("default_priority", "max_priority"):
            out[key] = _coerce_int(key, value)
        elif key == "strict_types":
            out[key] = _coerce_bool(key, value)
        elif key == "modules":
            out[key] = _coerce_modules(value)
        else:
            out[key] = str(value)
    return out


def load_settings(
    path: Path | str | None = None,
    *,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> RegistrySettings:
    """Resolve settings, later layers winning: defaults, file, environment, overrides.

    The file is ``path`` if given, else ``$AUTOREG_CONFIG``, else the platform
    config directory. A missing file is ignored; a malformed one raises
    :class:`ConfigError`.
    """

    env = os.environ if env is None else env
    if path is None:
        path = env.get(CONFIG_ENV_VAR) or default_config_path()
    settings = RegistrySettings()
    for layer in (
        _load_config_from_file(Path(path).expanduser()),
        _load_config_from_env(env),
        {k: v for k, v in (overrides or {}).items() if v is not None},
    ):
        if layer:
            settings = replace(settings, **_coerce(layer))
    return settings
