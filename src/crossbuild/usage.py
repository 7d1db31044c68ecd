"""Tracks which users have invoked the bot."""

from __future__ import annotations


class UsageTracker:
    """Set of user ids that have run a component.

    Owned by one event loop; marks happen between suspension points, so no
    locking is needed.
    """

    def __init__(self) -> None:
        self._users: set[str] = set()

    def mark(self, user_id: str) -> None:
        self._users.add(user_id)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._users

    def __len__(self) -> int:
        return len(self._users)

    def users(self) -> frozenset[str]:
        return frozenset(self._users)
