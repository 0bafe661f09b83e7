"""Domain models for GitHub users, repositories, and merged user info."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple


def _optional_str(value: object) -> Optional[str]:
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class GitHubUser:
    """Represents a user profile returned by ``GET /users/{username}``."""

    login: str
    name: Optional[str]
    avatar_url: Optional[str]
    location: Optional[str]
    email: Optional[str]
    html_url: Optional[str]
    created_at: Optional[str]

    @staticmethod
    def from_payload(data: Mapping[str, object]) -> "GitHubUser":
        """Build a user from decoded JSON, ignoring unrecognised fields."""

        login = data.get("login")
        if not isinstance(login, str) or not login:
            raise ValueError("User payload is missing the 'login' field")
        return GitHubUser(
            login=login,
            name=_optional_str(data.get("name")),
            avatar_url=_optional_str(data.get("avatar_url")),
            location=_optional_str(data.get("location")),
            email=_optional_str(data.get("email")),
            html_url=_optional_str(data.get("html_url")),
            created_at=_optional_str(data.get("created_at")),
        )


@dataclass(frozen=True)
class GitHubRepository:
    """A repository entry from a page of ``GET /users/{username}/repos``."""

    name: Optional[str]
    url: Optional[str]

    @staticmethod
    def from_payload(data: Mapping[str, object]) -> "GitHubRepository":
        return GitHubRepository(
            name=_optional_str(data.get("name")),
            url=_optional_str(data.get("url")),
        )


@dataclass(frozen=True)
class GitHubUserInfo:
    """A user profile merged with the user's repositories."""

    user_name: str
    display_name: Optional[str]
    avatar: Optional[str]
    geo_location: Optional[str]
    email: Optional[str]
    url: Optional[str]
    created_at: str
    repos: Tuple[GitHubRepository, ...]


__all__ = ["GitHubRepository", "GitHubUser", "GitHubUserInfo"]
