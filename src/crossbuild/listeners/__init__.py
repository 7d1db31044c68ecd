"""Platform listener adapters.

Each adapter normalizes native events into a ``ReceivedInteraction`` and
hands it to the dispatcher.
"""

from __future__ import annotations

from .discord import DiscordListener
from .guilded import GuildedListener
from .parse import extract_flags, parse_prefix_command

__all__ = [
    "DiscordListener",
    "GuildedListener",
    "extract_flags",
    "parse_prefix_command",
]
