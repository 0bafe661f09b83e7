"""Command-line interface for the GitHub data integration service."""

from __future__ import annotations
import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Sequence


def _running_in_virtualenv() -> bool:
    """Return ``True`` when the current interpreter is executing inside a venv."""

    base_prefix = getattr(sys, "base_prefix", sys.prefix)
    return sys.prefix != base_prefix


def _bootstrap_virtualenv() -> None:
    """Re-exec the script using the bundled virtualenv interpreter when available."""

    if _running_in_virtualenv():
        return

    root = Path(__file__).resolve().parent
    venv_dir = root / ".venv"
    if not venv_dir.is_dir():
        return

    candidates = (
        venv_dir / "bin" / "python",
        venv_dir / "bin" / "python3",
        venv_dir / "Scripts" / "python.exe",
        venv_dir / "Scripts" / "python",
    )

    script = str(Path(__file__).resolve())
    for candidate in candidates:
        if candidate.exists():
            os.execv(str(candidate), [str(candidate), script, *sys.argv[1:]])


if __name__ == "__main__":
    _bootstrap_virtualenv()

try:
    import httpx  # noqa: F401
except ImportError as exc:  # pragma: no cover - exercised in environments missing deps
    raise SystemExit(
        "The 'httpx' package is required. Run `pip install -e .` to install dependencies."
    ) from exc

from github_integration.config import load_settings
from github_integration.github import GitHubClient, InvalidArgument, UpstreamCallError
from github_integration.userinfo import TimestampFormatError, UserInfoService

logger = logging.getLogger("github_integration.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="GitHub data integration service")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP API")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Bind address for the API")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8080,
        help="Port for the HTTP API (default: 8080)",
    )
    serve_parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML configuration file (default: $GITHUB_INTEGRATION_CONFIG)",
    )

    fetch_parser = subparsers.add_parser(
        "fetch", help="Fetch and print the merged info for a single GitHub user"
    )
    fetch_parser.add_argument("username", help="GitHub username to look up")
    fetch_parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML configuration file (default: $GITHUB_INTEGRATION_CONFIG)",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "fetch"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _config_path(value: str | None) -> Path | None:
    if not value:
        return None
    return Path(value).expanduser().resolve(strict=False)


def _serve(*, host: str, port: int, config: str | None) -> None:
    from github_integration.api import create_app
    import uvicorn

    settings = load_settings(_config_path(config))
    logger.info("Starting GitHub data integration API on http://%s:%s (upstream %s)", host, port, settings.base_url)

    app = create_app(settings=settings)
    uvicorn.run(app, host=host, port=port, log_level="info")


def _fetch(username: str, *, config: str | None) -> int:
    settings = load_settings(_config_path(config))
    client = GitHubClient.from_settings(settings)
    try:
        info = UserInfoService(client).get_user_info(username)
    except InvalidArgument as exc:
        print(f"Invalid username: {exc}", file=sys.stderr)
        return 2
    except UpstreamCallError as exc:
        print(f"GitHub responded with {exc.status_code}: {exc.body.strip()}", file=sys.stderr)
        return 1
    except TimestampFormatError as exc:
        print(f"GitHub returned an unexpected profile: {exc}", file=sys.stderr)
        return 1
    finally:
        client.close()

    print(json.dumps(asdict(info), indent=2))
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)

    if args.command == "serve":
        _serve(host=args.host, port=args.port, config=args.config)
    elif args.command == "fetch":
        status = _fetch(args.username, config=args.config)
        if status:
            raise SystemExit(status)


if __name__ == "__main__":
    main()
