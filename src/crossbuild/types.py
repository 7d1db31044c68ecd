"""Canonical interaction model shared by every platform."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar, Literal

from .messages import MessagePayload

Source = Literal["discord", "guilded"]
ComponentType = Literal["command", "button", "selectMenu", "modal"]

SendFunc = Callable[[MessagePayload], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class ServerInfo:
    id: str
    owner_id: str | None = None
    name: str | None = None
    icon_url: str | None = None
    description: str | None = None


@dataclass(frozen=True, slots=True)
class ChannelInfo:
    id: str
    send: SendFunc = field(repr=False, compare=False)
    name: str | None = None
    parent_id: str | None = None


@dataclass(frozen=True, slots=True)
class UserInfo:
    id: str
    display_name: str | None = None
    username: str | None = None
    avatar_url: str | None = None
    permissions: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ReceivedInteraction:
    """One inbound user action, normalized from a platform event.

    Concrete platforms subclass this with their own ``source`` tag and any
    extra fields; the shared fields below are always present.
    """

    source: ClassVar[Source]
    structured: ClassVar[bool] = False

    type: ComponentType
    key: str
    user: UserInfo
    responder: SendFunc = field(repr=False, compare=False)
    raw_options: Mapping[str, Any] = field(default_factory=dict)
    server: ServerInfo | None = None
    channel: ChannelInfo | None = None
    original: Any = field(default=None, repr=False, compare=False)

    async def reply(self, message: MessagePayload) -> None:
        await self.responder(message)

    def is_platform_component(self) -> bool:
        """True for parsed platform buttons, menus and modals."""
        return self.structured and self.type != "command"


@dataclass(frozen=True, slots=True)
class DiscordInteraction(ReceivedInteraction):
    source: ClassVar[Source] = "discord"
    structured: ClassVar[bool] = True

    interaction_id: str | None = None


@dataclass(frozen=True, slots=True)
class GuildedInteraction(ReceivedInteraction):
    source: ClassVar[Source] = "guilded"

    message_id: str | None = None
    content: str = ""
