"""Push registered commands to a platform's remote command catalog."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol

import anyio
import httpx

from .components import Component
from .errors import SyncError
from .logging import get_logger
from .options import OptionSpec
from .registry import ComponentRegistry

logger = get_logger("crossbuild.sync")

DISCORD_API_BASE = "https://discord.com/api/v10"
DEFAULT_DESCRIPTION = "No description provided"

# Discord application command option types.
DISCORD_OPTION_TYPES: dict[str, int] = {
    "string": 3,
    "integer": 4,
    "boolean": 5,
    "user": 6,
    "channel": 7,
    "role": 8,
    "mentionable": 9,
    "number": 10,
    "attachment": 11,
}
_CHAT_INPUT = 1

CommandMapper = Callable[[Component], dict[str, Any]]


class RemoteCatalog(Protocol):
    name: str

    def is_ready(self) -> bool: ...

    async def wait_ready(self) -> None: ...

    async def bulk_replace(self, commands: list[dict[str, Any]]) -> None: ...


def _discord_option(spec: OptionSpec) -> dict[str, Any]:
    data: dict[str, Any] = {
        "type": DISCORD_OPTION_TYPES.get(spec.type, DISCORD_OPTION_TYPES["string"]),
        "name": spec.name,
        "description": spec.description or DEFAULT_DESCRIPTION,
        "required": bool(spec.required),
    }
    if spec.choices is not None:
        data["choices"] = [
            dict(choice)
            if isinstance(choice, Mapping)
            else {"name": str(choice), "value": choice}
            for choice in spec.choices
        ]
    bounds = {
        "min_value": spec.min_value,
        "max_value": spec.max_value,
        "min_length": spec.min_length,
        "max_length": spec.max_length,
    }
    data.update({name: value for name, value in bounds.items() if value is not None})
    return data


def to_discord_command(component: Component) -> dict[str, Any]:
    """Map a command component to a Discord application command payload."""
    return {
        "type": _CHAT_INPUT,
        "name": component.key,
        "description": component.description or DEFAULT_DESCRIPTION,
        "options": [_discord_option(spec) for spec in component.options],
    }


class DiscordCommandCatalog:
    """Global application commands for one Discord application.

    Ready once the application id is known, either up front or when the
    gateway reports ready.
    """

    name = "discord"

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        token: str,
        application_id: str | None = None,
        base_url: str = DISCORD_API_BASE,
    ) -> None:
        self._http = http
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._ready = anyio.Event()
        self.application_id: str | None = None
        if application_id:
            self.mark_ready(application_id)

    def mark_ready(self, application_id: str) -> None:
        self.application_id = str(application_id)
        self._ready.set()

    def is_ready(self) -> bool:
        return self._ready.is_set()

    async def wait_ready(self) -> None:
        await self._ready.wait()

    async def bulk_replace(self, commands: list[dict[str, Any]]) -> None:
        if self.application_id is None:
            raise SyncError("application id is not known yet")
        response = await self._http.put(
            f"{self._base_url}/applications/{self.application_id}/commands",
            json=commands,
            headers={"Authorization": f"Bot {self._token}"},
            timeout=20.0,
        )
        if response.is_error:
            raise SyncError(
                f"bulk overwrite rejected ({response.status_code}): {response.text}"
            )


class CommandSynchronizer:
    """Reconciles the registry's commands with one remote catalog.

    Every sync is a full replace of the remote catalog.
    """

    def __init__(
        self,
        registry: ComponentRegistry,
        catalog: RemoteCatalog,
        *,
        mapper: CommandMapper = to_discord_command,
    ) -> None:
        self.registry = registry
        self.catalog = catalog
        self.mapper = mapper
        self._deferred = False
        self._lock = anyio.Lock()

    def declarations(self) -> list[dict[str, Any]]:
        return [self.mapper(c) for c in self.registry.of_type("command")]

    async def sync(self) -> bool:
        # Serialized so an older command set never lands after a newer one.
        async with self._lock:
            return await self._sync_locked()

    async def _sync_locked(self) -> bool:
        commands = self.declarations()
        try:
            await self.catalog.bulk_replace(commands)
        except Exception as exc:
            logger.warning(
                "crossbuild.sync.failed",
                catalog=self.catalog.name,
                commands=len(commands),
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            return False
        logger.info(
            "crossbuild.sync.replaced", catalog=self.catalog.name, commands=len(commands)
        )
        return True

    async def sync_when_ready(self) -> bool:
        """Sync now, or once the catalog signals ready.

        Only one deferred sync waits at a time; it reads the registry when
        the signal fires, so loads made while waiting are included.
        """
        if self.catalog.is_ready():
            return await self.sync()
        if self._deferred:
            return False
        self._deferred = True
        logger.debug("crossbuild.sync.deferred", catalog=self.catalog.name)
        try:
            await self.catalog.wait_ready()
        finally:
            self._deferred = False
        return await self.sync()
