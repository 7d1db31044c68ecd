"""Application object wiring the dispatch core to platform clients."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from types import TracebackType
from typing import Any

import anyio
import httpx
from anyio.abc import TaskGroup

from .config import CrossBuildConfig, load_config
from .dispatch import Dispatcher, PreconditionCheck, no_preconditions
from .listeners.discord import DiscordListener
from .listeners.guilded import GuildedListener
from .logging import get_logger, setup_logging
from .messages import Renderer, render_plain
from .registry import ComponentRegistry, DefinitionSource, ModuleSource
from .sync import CommandSynchronizer, DiscordCommandCatalog
from .usage import UsageTracker

logger = get_logger("crossbuild.app")


class CrossBuild:
    """One bot application spanning any number of chat platforms.

    Use as an async context manager: entering attaches the listeners and
    loads components, exiting detaches them and cancels pending syncs.
    The platform clients themselves are run by the caller.
    """

    def __init__(
        self,
        config: CrossBuildConfig,
        *,
        sources: Sequence[DefinitionSource] | None = None,
        discord_client: Any = None,
        guilded_client: Any = None,
        http: httpx.AsyncClient | None = None,
        checks: PreconditionCheck = no_preconditions,
        gate_preconditions: bool = False,
        render: Renderer = render_plain,
    ) -> None:
        self.config = config
        self.registry = ComponentRegistry()
        self.usage = UsageTracker()
        self.dispatcher = Dispatcher(
            self.registry,
            usage=self.usage,
            support_server=config.support_server,
            checks=checks,
            gate_preconditions=gate_preconditions,
            reserved_prefix=config.reserved_prefix,
        )
        self.sources: list[DefinitionSource] = (
            list(sources)
            if sources is not None
            else [ModuleSource(module) for module in config.component_modules]
        )
        self.synchronizers: list[CommandSynchronizer] = []
        self.discord: DiscordListener | None = None
        self.guilded: GuildedListener | None = None
        self._task_group: TaskGroup | None = None

        if discord_client is not None:
            catalog = None
            if http is not None and config.discord_token:
                catalog = DiscordCommandCatalog(
                    http,
                    token=config.discord_token,
                    application_id=config.discord_application_id,
                )
                self.synchronizers.append(CommandSynchronizer(self.registry, catalog))
            self.discord = DiscordListener(
                self.dispatcher, discord_client, catalog=catalog, render=render
            )
        if guilded_client is not None:
            self.guilded = GuildedListener(
                self.dispatcher, guilded_client, prefix=config.prefix, render=render
            )

    @classmethod
    def from_config_file(cls, path: Path, **kwargs: Any) -> CrossBuild:
        config = load_config(path)
        setup_logging(config.log_level)
        return cls(config, **kwargs)

    async def __aenter__(self) -> CrossBuild:
        task_group = anyio.create_task_group()
        await task_group.__aenter__()
        self._task_group = task_group
        self.start_listening()
        try:
            await self.load_components()
        except BaseException as exc:
            await self.__aexit__(type(exc), exc, exc.__traceback__)
            raise
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool | None:
        self.stop_listening()
        task_group, self._task_group = self._task_group, None
        if task_group is None:
            return None
        task_group.cancel_scope.cancel()
        return await task_group.__aexit__(exc_type, exc, tb)

    def start_listening(self) -> None:
        for listener in (self.discord, self.guilded):
            if listener is not None:
                listener.start_listening()

    def stop_listening(self) -> None:
        for listener in (self.discord, self.guilded):
            if listener is not None:
                listener.stop_listening()

    async def load_components(self) -> int:
        inserted = await self.registry.load(self.sources)
        await self._after_load()
        return inserted

    async def reload_components(self) -> int:
        inserted = await self.registry.reload()
        await self._after_load()
        return inserted

    async def _after_load(self) -> None:
        for synchronizer in self.synchronizers:
            if self._task_group is not None:
                self._task_group.start_soon(synchronizer.sync_when_ready)
            elif synchronizer.catalog.is_ready():
                await synchronizer.sync()
            else:
                logger.debug(
                    "crossbuild.app.sync_skipped",
                    catalog=synchronizer.catalog.name,
                    reason="catalog not ready and no running task group",
                )
