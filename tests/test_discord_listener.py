"""Tests for listeners/discord.py - Discord interaction normalization."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from crossbuild.dispatch import Dispatcher
from crossbuild.listeners.discord import (
    INTERACTION_EVENT,
    READY_EVENT,
    DiscordListener,
)
from crossbuild.messages import MessagePayload
from crossbuild.registry import ComponentRegistry

from crossbuild_fixtures import RecordingComponent, make_discord_event


def _listener(client=None, catalog=None) -> DiscordListener:
    registry = ComponentRegistry()
    registry.add(RecordingComponent("ping"))
    registry.add(RecordingComponent("x-confirm", type="button"))
    registry.add(RecordingComponent("confirm", type="button"))
    return DiscordListener(
        Dispatcher(registry), client or SimpleNamespace(), catalog=catalog
    )


# --- normalize tests ---


@pytest.mark.anyio
async def test_normalize_slash_command_options() -> None:
    listener = _listener()
    event = make_discord_event(
        data={
            "name": "ping",
            "options": [
                {"name": "count", "type": 4, "value": 3},
                {"name": "loud", "type": 5, "value": True},
            ],
        }
    )

    interaction = listener.normalize(event)

    assert interaction is not None
    assert interaction.source == "discord"
    assert interaction.type == "command"
    assert interaction.key == "ping"
    assert dict(interaction.raw_options) == {"count": 3, "loud": True}
    assert interaction.interaction_id == "999"
    assert interaction.is_platform_component() is False


@pytest.mark.anyio
async def test_normalize_subcommand_flattens_options() -> None:
    listener = _listener()
    event = make_discord_event(
        data={
            "name": "config",
            "options": [
                {
                    "name": "set",
                    "type": 1,
                    "options": [{"name": "value", "type": 3, "value": "on"}],
                }
            ],
        }
    )

    interaction = listener.normalize(event)

    assert interaction is not None
    assert dict(interaction.raw_options) == {"subcommand": "set", "value": "on"}


@pytest.mark.anyio
async def test_normalize_button() -> None:
    listener = _listener()
    event = make_discord_event(
        type=3, data={"custom_id": "confirm", "component_type": 2}
    )

    interaction = listener.normalize(event)

    assert interaction is not None
    assert interaction.type == "button"
    assert interaction.key == "confirm"
    assert interaction.is_platform_component() is True


@pytest.mark.anyio
async def test_normalize_select_menu_values() -> None:
    listener = _listener()
    event = make_discord_event(
        type=3,
        data={"custom_id": "pick", "component_type": 3, "values": ["a", "b"]},
    )

    interaction = listener.normalize(event)

    assert interaction is not None
    assert interaction.type == "selectMenu"
    assert dict(interaction.raw_options) == {"values": ["a", "b"]}


@pytest.mark.anyio
async def test_normalize_modal_submit() -> None:
    listener = _listener()
    event = make_discord_event(
        type=5,
        data={
            "custom_id": "feedback",
            "components": [
                {"type": 1, "components": [{"custom_id": "text", "value": "great"}]}
            ],
        },
    )

    interaction = listener.normalize(event)

    assert interaction is not None
    assert interaction.type == "modal"
    assert interaction.key == "feedback"
    assert dict(interaction.raw_options) == {"text": "great"}


@pytest.mark.anyio
async def test_normalize_enum_like_type() -> None:
    """Interaction types given as enum members are read through ``value``."""
    listener = _listener()
    event = make_discord_event()
    event.type = SimpleNamespace(value=2)

    interaction = listener.normalize(event)

    assert interaction is not None
    assert interaction.key == "ping"


@pytest.mark.anyio
async def test_normalize_ping_returns_none() -> None:
    listener = _listener()
    assert listener.normalize(make_discord_event(type=1, data={})) is None


@pytest.mark.anyio
async def test_normalize_context_fields() -> None:
    listener = _listener()
    interaction = listener.normalize(make_discord_event())

    assert interaction is not None
    assert interaction.server is not None
    assert interaction.server.id == "111"
    assert interaction.server.owner_id == "222"
    assert interaction.server.icon_url is None
    assert interaction.channel is not None
    assert interaction.channel.id == "333"
    assert interaction.channel.parent_id == "444"
    assert interaction.user.id == "555"
    assert interaction.user.display_name == "Bob"
    assert interaction.user.username == "bob"
    assert interaction.user.avatar_url == "https://cdn.example/bob.png"
    assert interaction.user.permissions == ("manage_guild",)


@pytest.mark.anyio
async def test_normalize_id_only_and_missing_context() -> None:
    listener = _listener()
    id_only = listener.normalize(
        make_discord_event(with_guild=False, with_channel=False)
    )
    direct = listener.normalize(
        make_discord_event(
            with_guild=False, with_channel=False, guild_id=None, channel_id=None
        )
    )

    assert id_only is not None and direct is not None
    assert id_only.server is not None and id_only.server.id == "guild-1"
    assert id_only.channel is not None and id_only.channel.id == "chan-1"
    assert direct.server is None
    assert direct.channel is None


# --- reply / send tests ---


@pytest.mark.anyio
async def test_reply_uses_initial_response() -> None:
    listener = _listener()
    event = make_discord_event()
    interaction = listener.normalize(event)
    assert interaction is not None

    await interaction.reply(MessagePayload(description="pong", ephemeral=True))

    event.response.send_message.assert_awaited_once_with(
        content="pong", ephemeral=True
    )
    event.followup.send.assert_not_awaited()


@pytest.mark.anyio
async def test_reply_uses_followup_when_responded() -> None:
    listener = _listener()
    event = make_discord_event(response_done=True)
    interaction = listener.normalize(event)
    assert interaction is not None

    await interaction.reply(MessagePayload(description="again"))

    event.followup.send.assert_awaited_once_with(content="again", ephemeral=False)
    event.response.send_message.assert_not_awaited()


@pytest.mark.anyio
async def test_id_only_channel_fetches_before_sending() -> None:
    fetched = SimpleNamespace(send=AsyncMock())
    client = SimpleNamespace(fetch_channel=AsyncMock(return_value=fetched))
    listener = _listener(client=client)
    interaction = listener.normalize(make_discord_event(with_channel=False))
    assert interaction is not None and interaction.channel is not None

    await interaction.channel.send(MessagePayload(description="hi"))

    client.fetch_channel.assert_awaited_once_with("chan-1")
    fetched.send.assert_awaited_once_with(content="hi")


# --- on_interaction tests ---


@pytest.mark.anyio
async def test_on_interaction_dispatches_command() -> None:
    listener = _listener()
    outcome = await listener.on_interaction(make_discord_event())
    assert outcome == "succeeded"


@pytest.mark.anyio
async def test_reserved_prefix_button_is_ignored() -> None:
    listener = _listener()
    component = listener.dispatcher.registry.get("button", "x-confirm")
    event = make_discord_event(
        type=3, data={"custom_id": "x-confirm", "component_type": 2}
    )

    outcome = await listener.on_interaction(event)

    assert outcome == "ignored"
    assert component.runs == []  # type: ignore[union-attr]
    event.response.send_message.assert_not_awaited()


@pytest.mark.anyio
async def test_on_interaction_contains_errors() -> None:
    listener = _listener()
    event = make_discord_event()
    event.user = None

    assert await listener.on_interaction(event) is None


# --- readiness tests ---


@pytest.mark.anyio
async def test_on_ready_marks_catalog() -> None:
    catalog = MagicMock()
    client = SimpleNamespace(application_id=1234)
    listener = _listener(client=client, catalog=catalog)

    await listener.on_ready()

    catalog.mark_ready.assert_called_once_with("1234")


@pytest.mark.anyio
async def test_start_listening_registers_both_events() -> None:
    client = MagicMock()
    listener = _listener(client=client)

    listener.start_listening()
    listener.stop_listening()

    client.add_listener.assert_any_call(listener.on_interaction, INTERACTION_EVENT)
    client.add_listener.assert_any_call(listener.on_ready, READY_EVENT)
    client.remove_listener.assert_any_call(listener.on_interaction, INTERACTION_EVENT)
    client.remove_listener.assert_any_call(listener.on_ready, READY_EVENT)
