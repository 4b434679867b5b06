"""Tests for layered registry settings."""

from __future__ import annotations

from pathlib import Path

import pytest

from autoreg_core import ConfigError, RegistrySettings, load_settings


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_when_file_is_missing(tmp_path: Path) -> None:
    settings = load_settings(tmp_path / "absent.toml", env={})
    assert settings == RegistrySettings()
    assert settings.default_priority == 5
    assert settings.max_priority == 10
    assert settings.log_level == "WARNING"


def test_file_table_is_loaded(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "config.toml",
        '[autoreg]\ndefault_priority = 3\nstrict_types = true\nmodules = ["app.services"]\n',
    )
    settings = load_settings(path, env={})
    assert settings.default_priority == 3
    assert settings.strict_types is True
    assert settings.modules == ("app.services",)


def test_top_level_keys_are_accepted(tmp_path: Path) -> None:
    path = _write(tmp_path / "flat.toml", 'log_level = "info"\n')
    assert load_settings(path, env={}).log_level == "INFO"


def test_env_overrides_file_and_overrides_win(tmp_path: Path) -> None:
    path = _write(tmp_path / "config.toml", "[autoreg]\nmax_priority = 4\n")
    env = {"AUTOREG_MAX_PRIORITY": "6", "AUTOREG_MODULES": "a.b, c.d", "AUTOREG_STRICT_TYPES": "yes"}

    settings = load_settings(path, env=env)
    assert settings.max_priority == 6
    assert settings.modules == ("a.b", "c.d")
    assert settings.strict_types is True

    settings = load_settings(path, env=env, overrides={"max_priority": 2, "modules": None})
    assert settings.max_priority == 2
    assert settings.modules == ("a.b", "c.d")


def test_config_path_from_environment(tmp_path: Path) -> None:
    path = _write(tmp_path / "env.toml", "[autoreg]\ndefault_priority = 1\n")
    settings = load_settings(env={"AUTOREG_CONFIG": str(path)})
    assert settings.default_priority == 1


def test_priorities_are_clamped(tmp_path: Path) -> None:
    settings = load_settings(
        tmp_path / "absent.toml", env={}, overrides={"default_priority": 50, "max_priority": -1}
    )
    assert settings.default_priority == 10
    assert settings.max_priority == 0


@pytest.mark.parametrize(
    "text",
    [
        "[autoreg\n",
        "[autoreg]\nunknown = 1\n",
        '[autoreg]\ndefault_priority = "high"\n',
        '[autoreg]\nstrict_types = "maybe"\n',
        "autoreg = 3\n",
    ],
)
def test_invalid_files_raise_config_error(tmp_path: Path, text: str) -> None:
    path = _write(tmp_path / "bad.toml", text)
    with pytest.raises(ConfigError):
        load_settings(path, env={})
