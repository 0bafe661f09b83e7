"""Tests for the read-through user info aggregation."""

from __future__ import annotations

import threading

import pytest

from conftest import OCTOCAT, repository
from github_integration.cache import UserInfoCache
from github_integration.github import GitHubClient, UpstreamCallError, UpstreamResponse
from github_integration.models import GitHubRepository, GitHubUserInfo
from github_integration.userinfo import (
    TimestampFormatError,
    UserInfoService,
    convert_timestamp,
    merge_user_info,
)


EXPECTED_OCTOCAT = GitHubUserInfo(
    user_name="octocat",
    display_name="The Octocat",
    avatar="https://avatars.githubusercontent.com/u/583231?v=4",
    geo_location="San Francisco",
    email="octocat@gh.com",
    url="https://github.com/octocat",
    created_at="2011-01-25 18:44:36",
    repos=(
        GitHubRepository("boysenberry-repo-1", "https://github.com/octocat/boysenberry-repo-1"),
        GitHubRepository("git-consortium", "https://github.com/octocat/git-consortium"),
        GitHubRepository("hello-worId", "https://github.com/octocat/hello-worId"),
    ),
)


def test_first_lookup_merges_profile_and_all_pages(octocat_service):
    service = UserInfoService(GitHubClient(octocat_service))

    info = service.get_user_info("octocat")

    assert info == EXPECTED_OCTOCAT
    assert octocat_service.user_calls == ["octocat"]
    assert [call[1] for call in octocat_service.page_calls] == [1, 2]
    assert service.cache.get("octocat") == info


def test_repeated_lookup_is_served_from_cache(octocat_service):
    service = UserInfoService(GitHubClient(octocat_service))

    first = service.get_user_info("octocat")
    second = service.get_user_info("octocat")

    assert first is second
    assert len(octocat_service.user_calls) == 1
    assert len(octocat_service.page_calls) == 2


def test_prepopulated_cache_skips_upstream(github_service):
    cache = UserInfoCache()
    cache.put("octocat", EXPECTED_OCTOCAT)
    service = UserInfoService(GitHubClient(github_service), cache=cache)

    assert service.get_user_info("octocat") is EXPECTED_OCTOCAT
    assert github_service.user_calls == []
    assert github_service.page_calls == []


def test_cache_keys_are_case_sensitive(octocat_service):
    service = UserInfoService(GitHubClient(octocat_service))
    service.get_user_info("octocat")

    with pytest.raises(UpstreamCallError) as excinfo:
        service.get_user_info("OctoCat")

    assert excinfo.value.status_code == 404
    assert "OctoCat" not in service.cache


def test_user_failure_skips_repositories_and_is_not_cached(github_service):
    github_service.users["octocat"] = UpstreamResponse(500, "Request failed")
    service = UserInfoService(GitHubClient(github_service))

    with pytest.raises(UpstreamCallError) as excinfo:
        service.get_user_info("octocat")

    assert excinfo.value.status_code == 500
    assert excinfo.value.body == "Request failed"
    assert github_service.page_calls == []
    assert len(service.cache) == 0


def test_failed_lookup_is_retried_from_scratch(github_service):
    github_service.users["octocat"] = UpstreamResponse(503, "try later")
    service = UserInfoService(GitHubClient(github_service))

    with pytest.raises(UpstreamCallError):
        service.get_user_info("octocat")

    github_service.add_user(OCTOCAT)
    github_service.add_repository_pages("octocat", [repository("boysenberry-repo-1")])

    info = service.get_user_info("octocat")

    assert len(info.repos) == 1
    assert github_service.user_calls == ["octocat", "octocat"]


def test_repository_failure_is_not_cached(github_service):
    github_service.add_user(OCTOCAT)
    github_service.pages[("octocat", 1)] = UpstreamResponse(403, "rate limited")
    service = UserInfoService(GitHubClient(github_service))

    with pytest.raises(UpstreamCallError) as excinfo:
        service.get_user_info("octocat")

    assert excinfo.value.status_code == 403
    assert "octocat" not in service.cache


def test_unparseable_timestamp_fails_loudly(github_service):
    github_service.add_user({**OCTOCAT, "created_at": "25/01/2011"})
    github_service.add_repository_pages("octocat", [])
    service = UserInfoService(GitHubClient(github_service))

    with pytest.raises(TimestampFormatError):
        service.get_user_info("octocat")

    assert "octocat" not in service.cache


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2011-01-25T18:44:36Z", "2011-01-25 18:44:36"),
        ("2011-01-25T18:44:36+02:00", "2011-01-25 18:44:36"),
        ("1999-12-31T23:59:59-0500", "1999-12-31 23:59:59"),
    ],
)
def test_convert_timestamp_keeps_wall_clock(value, expected):
    assert convert_timestamp(value) == expected


@pytest.mark.parametrize("value", [None, "", "2011-01-25 18:44:36", "2011-01-25T18:44:36"])
def test_convert_timestamp_rejects_other_formats(value):
    with pytest.raises(TimestampFormatError):
        convert_timestamp(value)


def test_merge_preserves_repository_order_and_duplicates(github_client, octocat_service):
    user = github_client.fetch_user("octocat")
    repos = [GitHubRepository("b", "u"), GitHubRepository("a", "u"), GitHubRepository("b", "u")]

    merged = merge_user_info(user, repos)

    assert [repo.name for repo in merged.repos] == ["b", "a", "b"]


def test_concurrent_first_lookups_all_receive_complete_info(octocat_service):
    service = UserInfoService(GitHubClient(octocat_service))
    barrier = threading.Barrier(4)
    results = []
    errors = []

    def worker():
        barrier.wait()
        try:
            results.append(service.get_user_info("octocat"))
        except Exception as exc:  # pragma: no cover - surfaced by the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(results) == 4
    assert all(result == EXPECTED_OCTOCAT for result in results)
    assert service.cache.get("octocat") == EXPECTED_OCTOCAT
