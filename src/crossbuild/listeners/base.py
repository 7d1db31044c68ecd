"""Shared helpers for platform listener adapters."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol


class EventSource(Protocol):
    """A platform client that can register event callbacks by name."""

    def add_listener(self, func: Callable[..., Any], name: str) -> None: ...

    def remove_listener(self, func: Callable[..., Any], name: str) -> None: ...


def optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def asset_url(asset: Any) -> str | None:
    """URL of an avatar/icon that may be an asset object, a string or missing."""
    if asset is None:
        return None
    if isinstance(asset, str):
        return asset or None
    url = getattr(asset, "url", None)
    return str(url) if url else None
