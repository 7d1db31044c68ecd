"""Prefix command parsing utilities."""

from __future__ import annotations

import re

FLAG_RE = re.compile(r"--(\S+) (\S+)")


def parse_prefix_command(text: str, prefix: str) -> tuple[str | None, tuple[str, ...]]:
    """Parse a prefixed text command, returning (command_id, args).

    Args:
        text: The message content.
        prefix: The configured command prefix.

    Returns:
        A tuple of (command_id, args) where command_id is None if the text
        does not start with the prefix or has no command after it.
    """
    if not prefix or not text.startswith(prefix):
        return None, ()
    tokens = text[len(prefix) :].split()
    if not tokens:
        return None, ()
    return tokens[0].lower(), tuple(tokens[1:])


def extract_flags(text: str) -> dict[str, str]:
    """Collect every ``--name value`` pair in the text.

    Matches are scanned left to right without overlap; a repeated flag
    keeps its last value.
    """
    return {match.group(1): match.group(2) for match in FLAG_RE.finditer(text)}
