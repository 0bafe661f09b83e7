"""Read-through aggregation of GitHub profiles and repositories."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Protocol, Sequence

from .cache import UserInfoCache
from .models import GitHubRepository, GitHubUser, GitHubUserInfo

logger = logging.getLogger("github_integration.userinfo")

GITHUB_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S%z"
OUTPUT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class TimestampFormatError(ValueError):
    """Raised when an upstream timestamp does not match the GitHub format."""


class UserSource(Protocol):
    def fetch_user(self, username: str) -> GitHubUser:
        ...

    def fetch_repositories(self, username: str) -> Sequence[GitHubRepository]:
        ...


def convert_timestamp(value: str | None) -> str:
    """Reformat ``2011-01-25T18:44:36Z`` style timestamps as ``2011-01-25 18:44:36``.

    The wall-clock time is kept as written; the offset is not applied.
    """

    if value is None:
        raise TimestampFormatError("Timestamp is missing")
    try:
        parsed = datetime.strptime(value, GITHUB_TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise TimestampFormatError(f"Timestamp {value!r} does not match the GitHub format") from exc
    return parsed.strftime(OUTPUT_TIMESTAMP_FORMAT)


def merge_user_info(user: GitHubUser, repositories: Sequence[GitHubRepository]) -> GitHubUserInfo:
    """Combine a user profile and its repositories into one record."""

    return GitHubUserInfo(
        user_name=user.login,
        display_name=user.name,
        avatar=user.avatar_url,
        geo_location=user.location,
        email=user.email,
        url=user.html_url,
        created_at=convert_timestamp(user.created_at),
        repos=tuple(repositories),
    )


class UserInfoService:
    """Serve merged user info, computing and caching it on first request."""

    def __init__(self, source: UserSource, *, cache: UserInfoCache | None = None) -> None:
        self._source = source
        self._cache = cache if cache is not None else UserInfoCache()

    @property
    def cache(self) -> UserInfoCache:
        return self._cache

    def get_user_info(self, username: str) -> GitHubUserInfo:
        """Return the merged info for ``username``.

        Errors raised by the source propagate unchanged and nothing is cached.
        Concurrent first lookups for the same username may each query the
        source; the last one to finish is the value kept.
        """

        cached = self._cache.get(username)
        if cached is not None:
            logger.debug("Cache hit for %s", username)
            return cached

        logger.debug("Cache miss for %s; querying GitHub", username)
        user = self._source.fetch_user(username)
        repositories = self._source.fetch_repositories(username)
        info = merge_user_info(user, repositories)
        self._cache.put(username, info)
        logger.info("Cached user info for %s (%d repositories)", username, len(info.repos))
        return info


__all__ = [
    "TimestampFormatError",
    "UserInfoService",
    "UserSource",
    "convert_timestamp",
    "merge_user_info",
]
