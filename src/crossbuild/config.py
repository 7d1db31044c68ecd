"""Configuration loading."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import ConfigError

CONFIG_TABLE = "crossbuild"
TOKEN_ENV_VARS = ("CROSSBUILD_DISCORD_TOKEN", "DISCORD_TOKEN")


@dataclass(frozen=True, slots=True)
class CrossBuildConfig:
    component_modules: tuple[str, ...] = ()
    prefix: str | None = None
    support_server: str | None = None
    discord_application_id: str | None = None
    discord_token: str | None = None
    log_level: str = "info"
    reserved_prefix: str = "x-"


def _env(name: str) -> str:
    return (os.environ.get(name) or "").strip()


def _optional_str(table: dict[str, Any], key: str) -> str | None:
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, (str, int)) or isinstance(value, bool):
        raise ConfigError(f"{CONFIG_TABLE}.{key} must be a string")
    value = str(value).strip()
    return value or None


def parse_config(data: dict[str, Any]) -> CrossBuildConfig:
    table = data.get(CONFIG_TABLE, {})
    if not isinstance(table, dict):
        raise ConfigError(f"{CONFIG_TABLE} must be a table")

    modules = table.get("component_modules", [])
    if not isinstance(modules, list) or not all(isinstance(m, str) for m in modules):
        raise ConfigError(f"{CONFIG_TABLE}.component_modules must be a list of strings")

    prefix = table.get("prefix")
    if prefix is not None and not isinstance(prefix, str):
        raise ConfigError(f"{CONFIG_TABLE}.prefix must be a string")

    reserved_prefix = table.get("reserved_prefix", "x-")
    if not isinstance(reserved_prefix, str):
        raise ConfigError(f"{CONFIG_TABLE}.reserved_prefix must be a string")

    token = next((_env(name) for name in TOKEN_ENV_VARS if _env(name)), None)
    return CrossBuildConfig(
        component_modules=tuple(m.strip() for m in modules if m.strip()),
        # Prefixes are matched verbatim, so only an empty one is dropped.
        prefix=prefix or None,
        support_server=_optional_str(table, "support_server"),
        discord_application_id=_optional_str(table, "discord_application_id"),
        discord_token=token or _optional_str(table, "discord_token"),
        log_level=_optional_str(table, "log_level") or "info",
        reserved_prefix=reserved_prefix,
    )


def load_config(path: Path) -> CrossBuildConfig:
    """Read a TOML config file with a ``[crossbuild]`` table."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read config at {path}: {exc}") from exc
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML in {path}: {exc}") from exc
    return parse_config(data)
