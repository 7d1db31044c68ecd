"""Component registry keyed by ``(type, key)``."""

from __future__ import annotations

import importlib
import inspect
from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence
from types import MappingProxyType
from typing import Protocol

import anyio

from .components import Component
from .errors import ComponentLoadError
from .logging import get_logger
from .types import ComponentType

logger = get_logger("crossbuild.registry")

RegistryKey = tuple[ComponentType, str]


class DefinitionSource(Protocol):
    """A group of component definitions that loads or fails as a unit."""

    name: str

    async def load(self) -> Iterable[Component]: ...


class StaticSource:
    """Explicit registration table of component factories."""

    def __init__(
        self, name: str, factories: Sequence[Callable[[], Component]]
    ) -> None:
        self.name = name
        self._factories = tuple(factories)

    async def load(self) -> list[Component]:
        return [factory() for factory in self._factories]


class ModuleSource:
    """Components declared by an importable module.

    The module either lists instances in ``COMPONENTS`` or defines
    :class:`Component` subclasses with a non-empty ``key``.
    """

    def __init__(self, module: str) -> None:
        self.name = module

    async def load(self) -> list[Component]:
        try:
            module = importlib.import_module(self.name)
        except ImportError as exc:
            raise ComponentLoadError(f"cannot import {self.name!r}: {exc}") from exc
        declared = getattr(module, "COMPONENTS", None)
        if declared is not None:
            components = list(declared)
            for item in components:
                if not isinstance(item, Component):
                    raise ComponentLoadError(
                        f"{self.name}.COMPONENTS contains {item!r}, not a Component"
                    )
            return components
        return [
            member()
            for _, member in inspect.getmembers(module, inspect.isclass)
            if issubclass(member, Component)
            and member is not Component
            and member.__module__ == module.__name__
            and member.key
        ]


class ComponentRegistry:
    """In-memory store of loaded components.

    The mapping is swapped wholesale on every mutation, so readers see the
    registry either before or after a load, never halfway through one.
    Loaded definitions are merged onto the mapping current at swap time, so
    an ``add()`` or ``clear()`` made while sources load is not undone.
    """

    def __init__(self) -> None:
        self._components: Mapping[RegistryKey, Component] = MappingProxyType({})
        self._sources: tuple[DefinitionSource, ...] = ()
        self._lock = anyio.Lock()

    def __len__(self) -> int:
        return len(self._components)

    def __iter__(self) -> Iterator[Component]:
        return iter(self._components.values())

    def __contains__(self, key: object) -> bool:
        return key in self._components

    @property
    def sources(self) -> tuple[DefinitionSource, ...]:
        return self._sources

    def snapshot(self) -> Mapping[RegistryKey, Component]:
        return self._components

    def get(self, type: ComponentType, key: str) -> Component | None:
        return self._components.get((type, key))

    def of_type(self, type: ComponentType) -> list[Component]:
        return [c for c in self._components.values() if c.type == type]

    def add(self, component: Component) -> None:
        updated = dict(self._components)
        updated[(component.type, component.key)] = component
        self._components = MappingProxyType(updated)

    def clear(self) -> None:
        self._components = MappingProxyType({})

    async def load(self, sources: Sequence[DefinitionSource] | None = None) -> int:
        """Load every source on top of the current entries.

        Later definitions overwrite earlier ones with the same key. A source
        that fails is logged and skipped. Returns the number of components
        inserted.
        """
        async with self._lock:
            if sources is not None:
                self._sources = tuple(sources)
            return await self._load_locked(replace=False)

    async def reload(self) -> int:
        """Equivalent to ``clear()`` then ``load()`` with the last sources."""
        async with self._lock:
            return await self._load_locked(replace=True)

    async def _load_locked(self, *, replace: bool) -> int:
        results: list[list[Component] | None] = [None] * len(self._sources)

        async def _load_one(index: int, source: DefinitionSource) -> None:
            try:
                results[index] = list(await source.load())
            except Exception as exc:
                logger.warning(
                    "crossbuild.registry.source_failed",
                    source=source.name,
                    error=str(exc),
                    error_type=exc.__class__.__name__,
                )

        async with anyio.create_task_group() as tg:
            for index, source in enumerate(self._sources):
                tg.start_soon(_load_one, index, source)

        loaded_delta: dict[RegistryKey, Component] = {}
        inserted = 0
        for loaded in results:
            if loaded is None:
                continue
            for component in loaded:
                loaded_delta[(component.type, component.key)] = component
                inserted += 1
        # No await between reading the current mapping and swapping it in.
        base = {} if replace else dict(self._components)
        base.update(loaded_delta)
        self._components = MappingProxyType(base)
        logger.info(
            "crossbuild.registry.loaded",
            inserted=inserted,
            total=len(base),
            sources=len(self._sources),
        )
        return inserted
