"""FastAPI application exposing merged GitHub user info."""
from __future__ import annotations

import contextlib
import logging
from typing import AsyncIterator, Dict, List, Optional

from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel, Field

from .config import ClientSettings, load_settings
from .github import GitHubClient, UpstreamCallError
from .models import GitHubUserInfo
from .userinfo import UserInfoService

logger = logging.getLogger("github_integration.api")

UNEXPECTED_ERROR_DETAIL = "An unexpected error occurred"


class RepositoryResponse(BaseModel):
    name: Optional[str]
    url: Optional[str]


class UserInfoResponse(BaseModel):
    user_name: str
    display_name: Optional[str]
    avatar: Optional[str]
    geo_location: Optional[str]
    email: Optional[str]
    url: Optional[str]
    created_at: str = Field(..., description="Account creation time as yyyy-MM-dd HH:mm:ss")
    repos: List[RepositoryResponse]


def _info_to_response(info: GitHubUserInfo) -> UserInfoResponse:
    return UserInfoResponse(
        user_name=info.user_name,
        display_name=info.display_name,
        avatar=info.avatar,
        geo_location=info.geo_location,
        email=info.email,
        url=info.url,
        created_at=info.created_at,
        repos=[RepositoryResponse(name=repo.name, url=repo.url) for repo in info.repos],
    )


def register_api_routes(app: FastAPI, service: UserInfoService) -> None:
    """Expose the JSON API endpoints on the provided FastAPI application."""

    @app.get("/healthz")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/userInfo/{username}", response_model=UserInfoResponse)
    @app.get("/gitHubUserInfo/{username}", response_model=UserInfoResponse, include_in_schema=False)
    def get_user_info(username: str) -> UserInfoResponse:
        try:
            info = service.get_user_info(username)
        except UpstreamCallError as exc:
            logger.info("Lookup for %s failed upstream with status %s", username, exc.status_code)
            raise HTTPException(status_code=exc.status_code, detail=exc.body) from exc
        except Exception as exc:
            logger.exception("Unexpected error while fetching user info for %s", username)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=UNEXPECTED_ERROR_DETAIL,
            ) from exc

        return _info_to_response(info)


def create_app(
    *,
    service: UserInfoService | None = None,
    settings: ClientSettings | None = None,
) -> FastAPI:
    """Instantiate the FastAPI application.

    When no ``service`` is supplied, one is built around an HTTP GitHub client
    configured from ``settings`` (or :func:`load_settings`), and the client is
    closed on shutdown.
    """

    owned_client: GitHubClient | None = None
    if service is None:
        owned_client = GitHubClient.from_settings(settings or load_settings())
        service = UserInfoService(owned_client)

    @contextlib.asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        if owned_client is not None:
            owned_client.close()

    app = FastAPI(
        title="GitHub Data Integration",
        version="0.1.0",
        description="Merged GitHub user profiles and repositories.",
        lifespan=lifespan,
    )
    app.state.user_info_service = service

    register_api_routes(app, service)
    return app


__all__ = ["UserInfoResponse", "RepositoryResponse", "create_app", "register_api_routes"]
