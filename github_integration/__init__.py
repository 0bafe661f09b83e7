"""Aggregation of GitHub user profiles and repositories."""

from __future__ import annotations

from typing import Any

from .cache import UserInfoCache
from .config import ClientSettings, load_settings
from .github import GitHubClient, InvalidArgument, ResponseParseError, UpstreamCallError
from .userinfo import UserInfoService


def create_app(*args: Any, **kwargs: Any):
    """Factory function that returns the FastAPI application."""

    from .api import create_app as _create_app

    return _create_app(*args, **kwargs)


__all__ = [
    "ClientSettings",
    "GitHubClient",
    "InvalidArgument",
    "ResponseParseError",
    "UpstreamCallError",
    "UserInfoCache",
    "UserInfoService",
    "create_app",
    "load_settings",
]
