"""Tests for config.py - TOML configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
import tomlkit

from crossbuild.config import CrossBuildConfig, load_config, parse_config
from crossbuild.errors import ConfigError


@pytest.fixture(autouse=True)
def _clear_token_env(monkeypatch) -> None:
    monkeypatch.delenv("CROSSBUILD_DISCORD_TOKEN", raising=False)
    monkeypatch.delenv("DISCORD_TOKEN", raising=False)


def _write(path: Path, table: dict) -> Path:
    document = tomlkit.document()
    document["crossbuild"] = table
    path.write_text(tomlkit.dumps(document))
    return path


def test_load_config_reads_table(tmp_path: Path) -> None:
    path = _write(
        tmp_path / "crossbuild.toml",
        {
            "component_modules": ["bot.commands", "bot.buttons"],
            "prefix": "!",
            "support_server": "https://support.example",
            "discord_application_id": 1234,
            "discord_token": "cfg-token",
            "log_level": "debug",
        },
    )

    config = load_config(path)

    assert config == CrossBuildConfig(
        component_modules=("bot.commands", "bot.buttons"),
        prefix="!",
        support_server="https://support.example",
        discord_application_id="1234",
        discord_token="cfg-token",
        log_level="debug",
    )


def test_missing_table_gives_defaults() -> None:
    assert parse_config({}) == CrossBuildConfig()


def test_empty_prefix_is_disabled() -> None:
    assert parse_config({"crossbuild": {"prefix": ""}}).prefix is None


def test_env_token_overrides_config(monkeypatch) -> None:
    monkeypatch.setenv("DISCORD_TOKEN", "env-token")
    config = parse_config({"crossbuild": {"discord_token": "cfg-token"}})
    assert config.discord_token == "env-token"


@pytest.mark.parametrize(
    "table",
    [
        {"component_modules": "bot.commands"},
        {"component_modules": [1, 2]},
        {"prefix": 5},
        {"support_server": ["x"]},
        {"reserved_prefix": False},
    ],
)
def test_invalid_values_raise(table: dict) -> None:
    with pytest.raises(ConfigError):
        parse_config({"crossbuild": table})


def test_non_table_raises() -> None:
    with pytest.raises(ConfigError):
        parse_config({"crossbuild": "nope"})


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.toml")


def test_invalid_toml_raises(tmp_path: Path) -> None:
    path = tmp_path / "bad.toml"
    path.write_text("[crossbuild\nprefix = '!'")
    with pytest.raises(ConfigError):
        load_config(path)
