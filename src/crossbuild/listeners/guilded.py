"""Guilded prefix-command listener."""

from __future__ import annotations

from typing import Any

from ..dispatch import DispatchOutcome, Dispatcher
from ..logging import get_logger
from ..messages import MessagePayload, Renderer, render_plain
from ..types import ChannelInfo, GuildedInteraction, ServerInfo, UserInfo
from .base import EventSource, asset_url, optional_str
from .parse import extract_flags, parse_prefix_command

logger = get_logger("crossbuild.listeners.guilded")

MESSAGE_EVENT = "on_message"


class GuildedListener:
    """Turns Guilded chat messages into command interactions.

    Only messages starting with the configured prefix are dispatched.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        client: Any,
        *,
        prefix: str | None,
        render: Renderer = render_plain,
    ) -> None:
        self.dispatcher = dispatcher
        self.client = client
        self.prefix = prefix
        self.render = render

    def start_listening(self, source: EventSource | None = None) -> None:
        (source or self.client).add_listener(self.on_message, MESSAGE_EVENT)

    def stop_listening(self, source: EventSource | None = None) -> None:
        (source or self.client).remove_listener(self.on_message, MESSAGE_EVENT)

    async def on_message(self, message: Any) -> DispatchOutcome | None:
        try:
            interaction = self.normalize(message)
            if interaction is None:
                return None
            return await self.dispatcher.dispatch(interaction)
        except Exception:
            logger.exception(
                "crossbuild.guilded.message_failed",
                message_id=optional_str(getattr(message, "id", None)),
            )
            return None

    def normalize(self, message: Any) -> GuildedInteraction | None:
        if not self.prefix:
            logger.debug("crossbuild.guilded.no_prefix")
            return None
        content = getattr(message, "content", None) or ""
        command, _ = parse_prefix_command(content, self.prefix)
        if command is None:
            return None

        async def _reply(payload: MessagePayload) -> None:
            await message.reply(**self.render(payload))

        return GuildedInteraction(
            type="command",
            key=command,
            user=self._user(message),
            responder=_reply,
            raw_options=extract_flags(content),
            server=self._server(message),
            channel=self._channel(message),
            original=message,
            message_id=optional_str(getattr(message, "id", None)),
            content=content,
        )

    def _server(self, message: Any) -> ServerInfo | None:
        server = getattr(message, "server", None)
        if server is not None:
            return ServerInfo(
                id=str(server.id),
                owner_id=optional_str(getattr(server, "owner_id", None)),
                name=getattr(server, "name", None),
                icon_url=asset_url(getattr(server, "icon", None)),
                description=getattr(server, "about", None) or None,
            )
        server_id = getattr(message, "server_id", None)
        if server_id:
            return ServerInfo(id=str(server_id))
        return None

    def _channel(self, message: Any) -> ChannelInfo | None:
        channel = getattr(message, "channel", None)
        if channel is not None:

            async def _send(payload: MessagePayload) -> None:
                await channel.send(**self.render(payload))

            return ChannelInfo(
                id=str(channel.id),
                send=_send,
                name=getattr(channel, "name", None),
                parent_id=optional_str(getattr(channel, "parent_id", None)),
            )
        channel_id = getattr(message, "channel_id", None)
        if channel_id:
            return ChannelInfo(id=str(channel_id), send=self._fetching_send(channel_id))
        return None

    def _fetching_send(self, channel_id: Any):
        async def _send(payload: MessagePayload) -> None:
            channel = await self.client.fetch_channel(channel_id)
            if channel is None:
                logger.warning("crossbuild.guilded.channel_missing", channel_id=channel_id)
                return
            await channel.send(**self.render(payload))

        return _send

    def _user(self, message: Any) -> UserInfo:
        author = getattr(message, "author", None)
        if author is not None:
            name = getattr(author, "name", None)
            return UserInfo(
                id=str(author.id),
                display_name=getattr(author, "display_name", None) or name,
                username=name,
                avatar_url=asset_url(getattr(author, "avatar", None)),
            )
        return UserInfo(id=str(message.author_id))
