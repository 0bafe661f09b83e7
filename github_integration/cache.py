"""In-memory store for merged GitHub user info."""

from __future__ import annotations

from typing import Dict, Optional

from .models import GitHubUserInfo


class UserInfoCache:
    """Maps usernames to merged user info for the lifetime of the process.

    Keys are matched exactly; no case folding or trimming is applied. Every
    method performs a single dictionary operation, so concurrent readers and
    writers never observe a partially stored entry.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, GitHubUserInfo] = {}

    def get(self, username: str) -> Optional[GitHubUserInfo]:
        return self._entries.get(username)

    def put(self, username: str, info: GitHubUserInfo) -> None:
        self._entries[username] = info

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, username: object) -> bool:
        return username in self._entries

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["UserInfoCache"]
