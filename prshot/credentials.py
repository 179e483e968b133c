"""GitHub CLI credential probe.

A missing or unauthenticated ``gh`` is not fatal: the browser session can
still be established through the interactive login fallback.
"""
from __future__ import annotations

import subprocess
from typing import Optional

import requests

from . import config
from .utils import log_line


def build_http_session(token: str) -> requests.Session:
    """Return a requests session authorised with ``token`` for the GitHub API."""

    session = requests.Session()
    session.headers.update(config.COMMON_HEADERS)
    session.headers["Authorization"] = f"Bearer {token}"
    return session


def get_github_token() -> Optional[str]:
    """Return the bearer token reported by ``gh auth token`` or ``None``."""

    try:
        completed = subprocess.run(
            list(config.CREDENTIAL_COMMAND),
            capture_output=True,
            text=True,
            timeout=config.CREDENTIAL_COMMAND_TIMEOUT_SECONDS,
            check=False,
        )
    except FileNotFoundError:
        log_line("[AUTH][WARN] GitHub CLI (gh) is not installed.")
        return None
    except subprocess.TimeoutExpired:
        log_line("[AUTH][WARN] 'gh auth token' timed out.")
        return None

    token = (completed.stdout or "").strip()
    if completed.returncode != 0 or not token:
        log_line("[AUTH][WARN] GitHub CLI is not authenticated; run 'gh auth login'.")
        return None
    return token


def describe_token_owner(token: str, *, session: requests.Session | None = None) -> Optional[str]:
    """Return the login name owning ``token``, or ``None`` when it cannot be resolved."""

    http = session or build_http_session(token)
    try:
        response = http.get(config.GITHUB_API_USER_URL, timeout=config.API_TIMEOUT_SECONDS)
    except requests.RequestException as exc:
        log_line(f"[AUTH][WARN] Unable to reach the GitHub API: {exc}")
        return None

    if response.status_code != 200:
        log_line(f"[AUTH][WARN] GitHub API rejected the CLI token (HTTP {response.status_code}).")
        return None
    try:
        return str(response.json().get("login") or "") or None
    except ValueError:
        log_line("[AUTH][WARN] GitHub API returned a non-JSON user payload.")
        return None


def check_cli_credentials() -> bool:
    """Log whether the GitHub CLI holds a usable token; never raises."""

    log_line("Checking GitHub CLI authentication...")
    token = get_github_token()
    if token is None:
        log_line("GitHub CLI is not authenticated; you can still log in through the browser.")
        return False

    login = describe_token_owner(token)
    if login:
        log_line(f"GitHub CLI is authenticated as {login}.")
    else:
        log_line("GitHub CLI returned a token.")
    return True


__all__ = [
    "build_http_session",
    "check_cli_credentials",
    "describe_token_owner",
    "get_github_token",
]
