"""Client for the GitHub REST API user and repository endpoints."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Protocol
from urllib.parse import quote

import httpx

from .config import ClientSettings
from .models import GitHubRepository, GitHubUser

logger = logging.getLogger("github_integration.github")

_DEFAULT_ERROR_STATUS = 500


class InvalidArgument(ValueError):
    """Raised when a client operation is called with an unusable argument."""


class UpstreamCallError(RuntimeError):
    """Raised when a call to the GitHub API does not succeed."""

    def __init__(self, status_code: int, body: str, *, message: str | None = None) -> None:
        base = message or "GitHub API request failed"
        super().__init__(f"{base}\nResponse Code: {status_code}\nError: {body}")
        self.status_code = status_code
        self.body = body


class ResponseParseError(UpstreamCallError):
    """Raised when a successful response body cannot be decoded."""

    def __init__(self, message: str) -> None:
        super().__init__(_DEFAULT_ERROR_STATUS, message, message="Failed to parse GitHub API response")
        self.message = message


@dataclass(frozen=True)
class UpstreamResponse:
    """Status, body and headers of a single upstream response."""

    status_code: int
    text: str
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def header(self, name: str) -> Optional[str]:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    def json(self) -> object:
        return json.loads(self.text)


class GitHubService(Protocol):
    """The two upstream calls the client is built on."""

    def fetch_user(self, username: str) -> UpstreamResponse:
        ...

    def fetch_repository_page(self, username: str, page: int, per_page: int) -> UpstreamResponse:
        ...


class HTTPGitHubService:
    """:class:`GitHubService` backed by a pooled :class:`httpx.Client`."""

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings = settings or ClientSettings()
        self._client = httpx.Client(
            base_url=self._settings.base_url,
            headers={
                "User-Agent": self._settings.user_agent,
                "Accept": "application/vnd.github+json",
            },
            timeout=httpx.Timeout(
                self._settings.read_timeout,
                connect=self._settings.connect_timeout,
                pool=self._settings.pool_timeout,
            ),
            limits=httpx.Limits(max_connections=None, max_keepalive_connections=None),
            follow_redirects=True,
            transport=transport,
        )

    @property
    def settings(self) -> ClientSettings:
        return self._settings

    def fetch_user(self, username: str) -> UpstreamResponse:
        return self._get(f"/users/{quote(username, safe='')}")

    def fetch_repository_page(self, username: str, page: int, per_page: int) -> UpstreamResponse:
        return self._get(
            f"/users/{quote(username, safe='')}/repos",
            params={"page": page, "per_page": per_page},
        )

    def close(self) -> None:
        self._client.close()

    def _get(self, path: str, *, params: Dict[str, int] | None = None) -> UpstreamResponse:
        try:
            response = self._client.get(path, params=params)
        except httpx.RequestError as exc:
            logger.warning("Request to %s%s failed: %s", self._settings.base_url, path, exc)
            raise UpstreamCallError(
                _DEFAULT_ERROR_STATUS,
                f"Failed to contact GitHub API: {exc.__class__.__name__}",
            ) from exc

        return UpstreamResponse(
            status_code=response.status_code,
            text=response.text,
            headers={key.lower(): value for key, value in response.headers.items()},
        )


def _require_username(username: object) -> str:
    if not isinstance(username, str) or not username:
        raise InvalidArgument("username must not be empty")
    return username


def _raise_for_failure(response: UpstreamResponse, what: str) -> None:
    if response.is_success:
        return
    logger.warning("GitHub API returned %s while fetching %s", response.status_code, what)
    raise UpstreamCallError(response.status_code, response.text)


class GitHubClient:
    """Fetch GitHub users and their repositories through a :class:`GitHubService`."""

    def __init__(self, service: GitHubService, *, per_page: int = 100) -> None:
        self._service = service
        self._per_page = per_page

    @classmethod
    def from_settings(cls, settings: ClientSettings | None = None) -> "GitHubClient":
        resolved = settings or ClientSettings()
        return cls(HTTPGitHubService(resolved), per_page=resolved.per_page)

    def fetch_user(self, username: str) -> GitHubUser:
        """Fetch the profile of ``username``.

        Raises :class:`InvalidArgument` for an empty username and
        :class:`UpstreamCallError` if the request fails or the user does not exist.
        """

        name = _require_username(username)
        response = self._service.fetch_user(name)
        _raise_for_failure(response, f"user {name}")

        try:
            payload = response.json()
        except (ValueError, RecursionError) as exc:
            raise ResponseParseError(f"Failed to parse user response: {exc}") from exc
        if not isinstance(payload, dict):
            raise ResponseParseError("Failed to parse user response: expected a JSON object")

        try:
            return GitHubUser.from_payload(payload)
        except ValueError as exc:
            raise ResponseParseError(f"Failed to parse user response: {exc}") from exc

    def fetch_repositories(self, username: str) -> List[GitHubRepository]:
        """Fetch every repository of ``username``, following pagination.

        Pages are requested in order until a response arrives without a
        ``link`` header. The result preserves page order. Any failed page
        aborts the whole fetch. The presence of the header is the only signal
        checked, so an upstream that keeps sending ``link`` (for example with
        only ``rel="prev"``) on its last page is paged indefinitely.
        """

        name = _require_username(username)
        repositories: List[GitHubRepository] = []
        page = 1
        while True:
            response = self._service.fetch_repository_page(name, page, self._per_page)
            _raise_for_failure(response, f"repositories page {page} of {name}")
            repositories.extend(self._parse_repository_page(response))

            if not response.header("link"):
                break
            page += 1

        logger.debug("Fetched %d repositories for %s across %d page(s)", len(repositories), name, page)
        return repositories

    @staticmethod
    def _parse_repository_page(response: UpstreamResponse) -> List[GitHubRepository]:
        try:
            payload = response.json()
        except (ValueError, RecursionError) as exc:
            raise ResponseParseError(f"Failed to parse repository response: {exc}") from exc
        if not isinstance(payload, list):
            raise ResponseParseError("Failed to parse repository response: expected a JSON array")

        entries: List[GitHubRepository] = []
        for item in payload:
            if not isinstance(item, dict):
                raise ResponseParseError("Failed to parse repository response: expected JSON objects")
            entries.append(GitHubRepository.from_payload(item))
        return entries

    def close(self) -> None:
        close = getattr(self._service, "close", None)
        if callable(close):
            close()


__all__ = [
    "GitHubClient",
    "GitHubService",
    "HTTPGitHubService",
    "InvalidArgument",
    "ResponseParseError",
    "UpstreamCallError",
    "UpstreamResponse",
]
