"""Configuration management for the GitHub data integration service."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

DEFAULT_BASE_URL = "https://api.github.com"
DEFAULT_USER_AGENT = "GitHubDataIntegration"
DEFAULT_CONNECT_TIMEOUT = 15.0
DEFAULT_POOL_TIMEOUT = 15.0
DEFAULT_READ_TIMEOUT = 120.0
DEFAULT_PER_PAGE = 100


@dataclass(frozen=True)
class ClientSettings:
    """Settings shared by every call made against the upstream API."""

    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    pool_timeout: float = DEFAULT_POOL_TIMEOUT
    read_timeout: float = DEFAULT_READ_TIMEOUT
    per_page: int = DEFAULT_PER_PAGE

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "ClientSettings":
        """Create :class:`ClientSettings` from raw dictionary data."""

        base_url = str(data.get("base_url", DEFAULT_BASE_URL)).strip().rstrip("/")
        if not base_url:
            raise ValueError("GitHub API base URL must not be empty")

        user_agent = str(data.get("user_agent", DEFAULT_USER_AGENT)).strip()
        if not user_agent:
            raise ValueError("User agent must not be empty")

        per_page = int(data.get("per_page", DEFAULT_PER_PAGE))
        if not 1 <= per_page <= 100:
            raise ValueError("per_page must be between 1 and 100")

        timeouts: Dict[str, float] = {}
        for key, default in (
            ("connect_timeout", DEFAULT_CONNECT_TIMEOUT),
            ("pool_timeout", DEFAULT_POOL_TIMEOUT),
            ("read_timeout", DEFAULT_READ_TIMEOUT),
        ):
            value = float(data.get(key, default))
            if value <= 0:
                raise ValueError(f"{key} must be a positive number of seconds")
            timeouts[key] = value

        return ClientSettings(
            base_url=base_url,
            user_agent=user_agent,
            per_page=per_page,
            **timeouts,
        )


def resolve_config_path(env_value: Optional[str]) -> Optional[Path]:
    """Resolve the path to the optional YAML configuration file."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    candidate = (Path(__file__).resolve().parent.parent / "config" / "github.yaml").resolve(strict=False)
    return candidate if candidate.exists() else None


def load_settings(config_path: Path | None = None, *, environ: Mapping[str, str] | None = None) -> ClientSettings:
    """Load client settings from YAML, then apply environment overrides."""

    env = os.environ if environ is None else environ

    path = config_path if config_path is not None else resolve_config_path(env.get("GITHUB_INTEGRATION_CONFIG"))
    raw: Dict[str, object] = {}
    if path is not None:
        with path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Configuration file {path} must contain a mapping")
        section = loaded.get("github", loaded)
        if not isinstance(section, dict):
            raise ValueError("The 'github' configuration section must be a mapping")
        raw.update(section)

    settings = ClientSettings.from_dict(raw)

    base_url = (env.get("GITHUB_API_BASE_URL") or "").strip()
    if base_url:
        settings = replace(settings, base_url=base_url.rstrip("/"))
    user_agent = (env.get("GITHUB_USER_AGENT") or "").strip()
    if user_agent:
        settings = replace(settings, user_agent=user_agent)

    return settings


__all__ = ["ClientSettings", "load_settings", "resolve_config_path"]
