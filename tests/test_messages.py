"""Tests for messages.py - reply payloads and the plain renderer."""

from __future__ import annotations

from crossbuild.messages import ERROR_TITLE, MessagePayload, error_message, render_plain


def test_error_message_is_generic() -> None:
    message = error_message(component_type="button", support_server=None)
    assert message.title == ERROR_TITLE
    assert "this button" in (message.description or "")
    assert message.url is None
    assert message.ephemeral is True


def test_render_plain_joins_parts() -> None:
    message = MessagePayload(
        title="Stats",
        description="All good",
        fields=(("users", "3"),),
        url="https://example.org",
    )
    assert render_plain(message) == {
        "content": "**Stats**\nAll good\nusers: 3\nhttps://example.org"
    }


def test_render_plain_empty() -> None:
    assert render_plain(MessagePayload()) == {"content": ""}
