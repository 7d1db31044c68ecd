"""Discord interaction listener."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..dispatch import DispatchOutcome, Dispatcher
from ..logging import get_logger
from ..messages import MessagePayload, Renderer, render_plain
from ..sync import DiscordCommandCatalog
from ..types import (
    ChannelInfo,
    ComponentType,
    DiscordInteraction,
    ServerInfo,
    UserInfo,
)
from .base import EventSource, asset_url, optional_str

logger = get_logger("crossbuild.listeners.discord")

INTERACTION_EVENT = "on_interaction"
READY_EVENT = "on_ready"

# Discord interaction and component type codes.
_APPLICATION_COMMAND = 2
_MESSAGE_COMPONENT = 3
_MODAL_SUBMIT = 5
_BUTTON = 2


def _type_code(value: Any) -> int | None:
    code = getattr(value, "value", value)
    return code if isinstance(code, int) else None


def _command_options(options: list[Mapping[str, Any]] | None) -> dict[str, Any]:
    raw: dict[str, Any] = {}
    for option in options or ():
        if "value" in option:
            raw[option["name"]] = option["value"]
        elif option.get("options") is not None or option.get("type") in (1, 2):
            raw["subcommand"] = option["name"]
            raw.update(_command_options(option.get("options")))
    return raw


def _modal_values(rows: list[Mapping[str, Any]] | None) -> dict[str, Any]:
    raw: dict[str, Any] = {}
    for row in rows or ():
        for item in row.get("components", ()):
            if "custom_id" in item:
                raw[item["custom_id"]] = item.get("value")
    return raw


def _permission_names(permissions: Any) -> tuple[str, ...]:
    if permissions is None:
        return ()
    try:
        return tuple(name for name, enabled in permissions if enabled)
    except TypeError:
        return ()


class DiscordListener:
    """Turns Discord gateway interactions into component interactions."""

    def __init__(
        self,
        dispatcher: Dispatcher,
        client: Any,
        *,
        catalog: DiscordCommandCatalog | None = None,
        render: Renderer = render_plain,
    ) -> None:
        self.dispatcher = dispatcher
        self.client = client
        self.catalog = catalog
        self.render = render

    def start_listening(self, source: EventSource | None = None) -> None:
        source = source or self.client
        source.add_listener(self.on_interaction, INTERACTION_EVENT)
        source.add_listener(self.on_ready, READY_EVENT)

    def stop_listening(self, source: EventSource | None = None) -> None:
        source = source or self.client
        source.remove_listener(self.on_interaction, INTERACTION_EVENT)
        source.remove_listener(self.on_ready, READY_EVENT)

    async def on_ready(self) -> None:
        application_id = getattr(self.client, "application_id", None)
        if self.catalog is None or application_id is None:
            return
        logger.info("crossbuild.discord.ready", application_id=str(application_id))
        self.catalog.mark_ready(str(application_id))

    async def on_interaction(self, event: Any) -> DispatchOutcome | None:
        try:
            interaction = self.normalize(event)
            if interaction is None:
                return None
            return await self.dispatcher.dispatch(interaction)
        except Exception:
            logger.exception(
                "crossbuild.discord.interaction_failed",
                interaction_id=optional_str(getattr(event, "id", None)),
            )
            return None

    def normalize(self, event: Any) -> DiscordInteraction | None:
        resolved = self._resolve_target(event)
        if resolved is None:
            return None
        component_type, key, raw_options = resolved

        async def _reply(payload: MessagePayload) -> None:
            kwargs = self.render(payload)
            kwargs.setdefault("ephemeral", payload.ephemeral)
            if event.response.is_done():
                await event.followup.send(**kwargs)
            else:
                await event.response.send_message(**kwargs)

        return DiscordInteraction(
            type=component_type,
            key=key,
            user=self._user(event),
            responder=_reply,
            raw_options=raw_options,
            server=self._server(event),
            channel=self._channel(event),
            original=event,
            interaction_id=optional_str(getattr(event, "id", None)),
        )

    def _resolve_target(
        self, event: Any
    ) -> tuple[ComponentType, str, dict[str, Any]] | None:
        data: Mapping[str, Any] = getattr(event, "data", None) or {}
        code = _type_code(getattr(event, "type", None))
        if code == _APPLICATION_COMMAND:
            name = data.get("name")
            if not name:
                return None
            return "command", str(name), _command_options(data.get("options"))
        if code == _MESSAGE_COMPONENT:
            custom_id = data.get("custom_id")
            if not custom_id:
                return None
            if data.get("component_type") == _BUTTON:
                return "button", str(custom_id), {}
            return "selectMenu", str(custom_id), {"values": list(data.get("values", ()))}
        if code == _MODAL_SUBMIT:
            custom_id = data.get("custom_id")
            if not custom_id:
                return None
            return "modal", str(custom_id), _modal_values(data.get("components"))
        return None

    def _server(self, event: Any) -> ServerInfo | None:
        guild = getattr(event, "guild", None)
        if guild is not None:
            return ServerInfo(
                id=str(guild.id),
                owner_id=optional_str(getattr(guild, "owner_id", None)),
                name=getattr(guild, "name", None),
                icon_url=asset_url(getattr(guild, "icon", None)),
                description=getattr(guild, "description", None) or None,
            )
        guild_id = getattr(event, "guild_id", None)
        if guild_id:
            return ServerInfo(id=str(guild_id))
        return None

    def _channel(self, event: Any) -> ChannelInfo | None:
        channel = getattr(event, "channel", None)
        if channel is not None and hasattr(channel, "send"):

            async def _send(payload: MessagePayload) -> None:
                await channel.send(**self.render(payload))

            parent_id = getattr(channel, "parent_id", None)
            if parent_id is None:
                parent_id = getattr(channel, "category_id", None)
            return ChannelInfo(
                id=str(channel.id),
                send=_send,
                name=getattr(channel, "name", None),
                parent_id=optional_str(parent_id),
            )
        channel_id = getattr(event, "channel_id", None)
        if channel_id:
            return ChannelInfo(id=str(channel_id), send=self._fetching_send(channel_id))
        return None

    def _fetching_send(self, channel_id: Any):
        async def _send(payload: MessagePayload) -> None:
            channel = await self.client.fetch_channel(channel_id)
            if channel is None:
                logger.warning("crossbuild.discord.channel_missing", channel_id=channel_id)
                return
            await channel.send(**self.render(payload))

        return _send

    def _user(self, event: Any) -> UserInfo:
        user = event.user
        avatar = getattr(user, "display_avatar", None) or getattr(user, "avatar", None)
        return UserInfo(
            id=str(user.id),
            display_name=getattr(user, "display_name", None),
            username=getattr(user, "name", None),
            avatar_url=asset_url(avatar),
            permissions=_permission_names(getattr(event, "permissions", None)),
        )
