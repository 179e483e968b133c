"""Configuration constants for the pull-request screenshot tool."""
from __future__ import annotations

import os
from pathlib import Path

DATA_DIR: Path = Path(os.getenv("PRSHOT_DATA_DIR", str(Path.cwd())))
SCREENSHOTS_DIR: Path = DATA_DIR / "screenshots"
PDFS_DIR: Path = DATA_DIR / "pdfs"
LOG_DIR: Path = DATA_DIR / "logs"
LOG_FILE: Path = LOG_DIR / "latest.log"
# Chromium profile; cookies written here keep the GitHub login across runs.
BROWSER_PROFILE_DIR: Path = DATA_DIR / ".browser-data"
DEFAULT_WORKLIST_FILE: Path = DATA_DIR / "pr_list.csv"

REPO: str = os.getenv("PRSHOT_REPO", "basicinc/formrun").strip()
LOGIN_URL: str = "https://github.com/login"
LOGIN_PATH_MARKER: str = "/login"
PR_URL_TEMPLATE: str = "https://github.com/{repo}/pull/{identifier}"
GITHUB_API_USER_URL: str = "https://api.github.com/user"

HEADLESS: bool = os.getenv("PRSHOT_HEADLESS", "0").strip().lower() not in {
    "0",
    "false",
    "",
}


def _parse_timeout_seconds(env_var: str, default: int, *, minimum: int = 1) -> int:
    """Parse a timeout value in seconds from the environment with bounds."""

    try:
        value = int(os.getenv(env_var, str(default)))
    except ValueError:
        return default
    return max(minimum, value)


def _parse_int(env_var: str, default: int) -> int:
    """Parse an integer from the environment, falling back to ``default``."""

    try:
        return int(os.getenv(env_var, str(default)))
    except ValueError:
        return default


def _parse_float(env_var: str, default: float) -> float:
    """Parse a float from the environment, falling back to ``default``."""

    try:
        return float(os.getenv(env_var, str(default)))
    except ValueError:
        return default


# Playwright timeouts (seconds)
# Navigation to a pull request; only DOMContentLoaded is awaited.
NAV_TIMEOUT_SECONDS: int = _parse_timeout_seconds("PRSHOT_NAV_TIMEOUT_SECONDS", 60)
# Navigation to the login page during the session check.
LOGIN_CHECK_TIMEOUT_SECONDS: int = _parse_timeout_seconds(
    "PRSHOT_LOGIN_CHECK_TIMEOUT_SECONDS", 30
)
# Wait for any of the PR header selectors to become visible.
SELECTOR_TIMEOUT_SECONDS: int = _parse_timeout_seconds(
    "PRSHOT_SELECTOR_TIMEOUT_SECONDS", 15
)

# Fallback settle time when no header selector showed up.
SETTLE_SECONDS: float = _parse_float("PRSHOT_SETTLE_SECONDS", 3.0)
# Pause between pull requests to stay clear of GitHub rate limiting.
INTER_ITEM_DELAY_SECONDS: float = _parse_float("PRSHOT_INTER_ITEM_DELAY", 1.0)

VIEWPORT_WIDTH: int = _parse_int("PRSHOT_VIEWPORT_WIDTH", 1920)
VIEWPORT_HEIGHT: int = _parse_int("PRSHOT_VIEWPORT_HEIGHT", 1080)

# A4 width in points at 72 dpi.
PDF_MAX_WIDTH: float = _parse_float("PRSHOT_PDF_MAX_WIDTH", 595.0)

CONTENT_READY_SELECTORS: tuple[str, ...] = (
    "#partial-discussion-header",
    ".gh-header-title",
    "h1.js-issue-title",
    "[data-hpc]",
)
LOGIN_FORM_SELECTOR: str = 'input[name="login"]'

CREDENTIAL_COMMAND: tuple[str, ...] = ("gh", "auth", "token")
CREDENTIAL_COMMAND_TIMEOUT_SECONDS: int = 15
API_TIMEOUT_SECONDS: int = 10

COMMON_HEADERS: dict[str, str] = {
    "Accept": "application/vnd.github+json",
    "User-Agent": "prshot",
    "X-GitHub-Api-Version": "2022-11-28",
}


def pr_url(identifier: str) -> str:
    """Return the pull request URL for ``identifier`` in the configured repo."""

    return PR_URL_TEMPLATE.format(repo=REPO, identifier=identifier)


def screenshot_path(identifier: str, screenshots_dir: Path | None = None) -> Path:
    """Return the deterministic screenshot location for ``identifier``."""

    return (screenshots_dir or SCREENSHOTS_DIR) / f"pr-{identifier}.png"


def pdf_path(identifier: str | int, pdfs_dir: Path | None = None) -> Path:
    """Return the deterministic PDF location for ``identifier``."""

    return (pdfs_dir or PDFS_DIR) / f"pr-{identifier}.pdf"
