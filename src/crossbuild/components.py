"""Base class for registered handlers."""

from __future__ import annotations

from typing import ClassVar

from .messages import MessagePayload
from .options import OptionSpec, OptionsHandler
from .types import ComponentType, ReceivedInteraction


class Component:
    """A handler for one ``(type, key)`` pair.

    Subclasses set ``type``, ``key`` and optionally ``description`` and
    ``options``, and implement :meth:`run`. :meth:`validate` returns a
    payload to reject the interaction, or ``None`` to let it run.

    The dispatcher provides no deduplication, so ``run`` may see the same
    event more than once if a platform redelivers it.
    """

    type: ClassVar[ComponentType] = "command"
    key: ClassVar[str] = ""
    description: ClassVar[str | None] = None
    options: ClassVar[tuple[OptionSpec, ...]] = ()

    async def validate(
        self, interaction: ReceivedInteraction, options: OptionsHandler
    ) -> MessagePayload | None:
        problems = options.problems()
        if not problems:
            return None
        return MessagePayload(
            title="Invalid Options",
            description="\n".join(problems),
            kind="error",
            ephemeral=True,
        )

    async def run(
        self, interaction: ReceivedInteraction, options: OptionsHandler
    ) -> None:
        raise NotImplementedError

    @property
    def registry_key(self) -> tuple[ComponentType, str]:
        return (self.type, self.key)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.type}:{self.key}>"
