"""Platform-neutral reply payloads."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

MessageKind = Literal["info", "success", "warning", "error"]

ERROR_TITLE = "An Error Has Occurred"


@dataclass(frozen=True, slots=True)
class MessagePayload:
    """A message to deliver back to the user who triggered an interaction."""

    title: str | None = None
    description: str | None = None
    kind: MessageKind = "info"
    url: str | None = None
    ephemeral: bool = False
    fields: tuple[tuple[str, str], ...] = field(default_factory=tuple)


Renderer = Callable[[MessagePayload], dict[str, Any]]


def error_message(
    *,
    component_type: str,
    support_server: str | None = None,
) -> MessagePayload:
    """Generic failure notice; never carries the underlying error."""
    return MessagePayload(
        title=ERROR_TITLE,
        description=(
            f"An unexpected error was encountered while running this {component_type}, "
            "my developers have already been notified! "
            "Feel free to join my support server in the mean time!"
        ),
        kind="error",
        url=support_server,
        ephemeral=True,
    )


def render_plain(message: MessagePayload) -> dict[str, Any]:
    """Default renderer: flatten a payload into a ``content`` string."""
    lines: list[str] = []
    if message.title:
        lines.append(f"**{message.title}**")
    if message.description:
        lines.append(message.description)
    for name, value in message.fields:
        lines.append(f"{name}: {value}")
    if message.url:
        lines.append(message.url)
    return {"content": "\n".join(lines)}
