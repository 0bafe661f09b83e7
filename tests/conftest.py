import json
import sys
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from github_integration.github import GitHubClient, UpstreamResponse


OCTOCAT = {
    "login": "octocat",
    "id": 583231,
    "name": "The Octocat",
    "avatar_url": "https://avatars.githubusercontent.com/u/583231?v=4",
    "location": "San Francisco",
    "email": "octocat@gh.com",
    "html_url": "https://github.com/octocat",
    "created_at": "2011-01-25T18:44:36Z",
    "public_repos": 3,
}

NOT_FOUND = UpstreamResponse(404, '{"message": "Not Found"}')


class InMemoryGitHubService:
    """GitHubService double that serves canned responses and records calls."""

    def __init__(self) -> None:
        self.users: Dict[str, UpstreamResponse] = {}
        self.pages: Dict[Tuple[str, int], UpstreamResponse] = {}
        self.user_calls: List[str] = []
        self.page_calls: List[Tuple[str, int, int]] = []

    def add_user(self, payload: dict) -> None:
        self.users[payload["login"]] = UpstreamResponse(200, json.dumps(payload))

    def add_repository_pages(self, username: str, *pages: Sequence[dict]) -> None:
        for index, entries in enumerate(pages, start=1):
            headers = {}
            if index < len(pages):
                headers["link"] = f'<https://api.github.com/user/1/repos?page={index + 1}>; rel="next"'
            self.pages[(username, index)] = UpstreamResponse(200, json.dumps(list(entries)), headers)

    def fetch_user(self, username: str) -> UpstreamResponse:
        self.user_calls.append(username)
        return self.users.get(username, NOT_FOUND)

    def fetch_repository_page(self, username: str, page: int, per_page: int) -> UpstreamResponse:
        self.page_calls.append((username, page, per_page))
        return self.pages.get((username, page), NOT_FOUND)


def repository(name: str) -> dict:
    return {
        "name": name,
        "url": f"https://github.com/octocat/{name}",
        "full_name": f"octocat/{name}",
        "private": False,
    }


@pytest.fixture
def github_service() -> InMemoryGitHubService:
    return InMemoryGitHubService()


@pytest.fixture
def github_client(github_service: InMemoryGitHubService) -> GitHubClient:
    return GitHubClient(github_service)


@pytest.fixture
def octocat_service(github_service: InMemoryGitHubService) -> InMemoryGitHubService:
    github_service.add_user(OCTOCAT)
    github_service.add_repository_pages(
        "octocat",
        [repository("boysenberry-repo-1"), repository("git-consortium")],
        [repository("hello-worId")],
    )
    return github_service
