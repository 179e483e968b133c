"""Persistent, authenticated GitHub browser session.

The Chromium profile lives in ``config.BROWSER_PROFILE_DIR`` so cookies survive
between runs; only the first run (or an expired session) needs a manual login.
"""
from __future__ import annotations

import urllib.parse
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from playwright.sync_api import BrowserContext, Page, Playwright

from . import config
from .error_codes import ErrorCode
from .logging_utils import _log_event
from .utils import log_line


class SessionState(str, Enum):
    UNCHECKED = "unchecked"
    CHECKING_LOGIN = "checking_login"
    AWAITING_HUMAN = "awaiting_human"
    AUTHENTICATED = "authenticated"
    AUTH_FAILED = "auth_failed"


TERMINAL_STATES = frozenset({SessionState.AUTHENTICATED, SessionState.AUTH_FAILED})


class AuthenticationRequired(Exception):
    error_code = ErrorCode.AUTHENTICATION_REQUIRED


def _read_terminal_line() -> str:
    return input()


def is_login_url(url: str) -> bool:
    """Return ``True`` when ``url`` still points at the GitHub login path."""

    path = urllib.parse.urlparse(url or "").path
    return config.LOGIN_PATH_MARKER in path


def open_persistent_context(
    playwright: Playwright,
    profile_dir: Path,
    *,
    headless: bool,
    viewport: dict[str, int],
) -> BrowserContext:
    """Launch Chromium bound to ``profile_dir`` so storage persists across runs."""

    profile_dir.mkdir(parents=True, exist_ok=True)
    return playwright.chromium.launch_persistent_context(
        str(profile_dir),
        headless=headless,
        viewport=viewport,
    )


class SessionManager:
    """Establish the shared browser context used for every capture.

    ``human_signal`` is the single resume event of the ``AWAITING_HUMAN``
    state; it defaults to reading one line from the terminal.
    """

    def __init__(
        self,
        playwright: Playwright,
        *,
        profile_dir: Optional[Path] = None,
        headless: Optional[bool] = None,
        human_signal: Optional[Callable[[], object]] = None,
    ) -> None:
        self._playwright = playwright
        self.profile_dir = profile_dir or config.BROWSER_PROFILE_DIR
        self.headless = config.HEADLESS if headless is None else headless
        self._human_signal = human_signal or _read_terminal_line
        self.state = SessionState.UNCHECKED
        self.context: Optional[BrowserContext] = None

    def _transition(self, state: SessionState) -> None:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"Session already finished in state {self.state.value}")
        _log_event("session", previous=self.state.value, state=state.value)
        self.state = state

    def _is_logged_in(self, page: Page) -> bool:
        return not is_login_url(page.url)

    def establish(self) -> BrowserContext:
        """Return an authenticated context or raise :class:`AuthenticationRequired`."""

        log_line("Launching browser...")
        self.context = open_persistent_context(
            self._playwright,
            self.profile_dir,
            headless=self.headless,
            viewport={"width": config.VIEWPORT_WIDTH, "height": config.VIEWPORT_HEIGHT},
        )
        log_line(f"Browser launched (profile: {self.profile_dir})")

        self._transition(SessionState.CHECKING_LOGIN)
        page = self.context.new_page()
        try:
            page.goto(
                config.LOGIN_URL,
                wait_until="domcontentloaded",
                timeout=config.LOGIN_CHECK_TIMEOUT_SECONDS * 1000,
            )
            if self._is_logged_in(page):
                log_line("GitHub session is authenticated.")
                self._transition(SessionState.AUTHENTICATED)
                return self.context

            self._transition(SessionState.AWAITING_HUMAN)
            log_line("[AUTH][WARN] GitHub login required.")
            log_line("Log in to GitHub in the browser window, then press Enter to continue...")
            try:
                self._human_signal()
            except EOFError:
                log_line("[AUTH][WARN] No terminal input available; re-checking the session once.")

            page.reload(
                wait_until="domcontentloaded",
                timeout=config.LOGIN_CHECK_TIMEOUT_SECONDS * 1000,
            )
            if self._is_logged_in(page):
                log_line("GitHub login confirmed.")
                self._transition(SessionState.AUTHENTICATED)
                return self.context
        finally:
            page.close()

        self._transition(SessionState.AUTH_FAILED)
        self.close()
        raise AuthenticationRequired("Still not logged in to GitHub after the manual login step.")

    def close(self) -> None:
        """Release the browser context; safe to call more than once."""

        context, self.context = self.context, None
        if context is None:
            return
        try:
            context.close()
        except Exception as exc:  # noqa: BLE001
            log_line(f"[SESSION][WARN] Error while closing browser context: {exc}")


__all__ = [
    "AuthenticationRequired",
    "SessionManager",
    "SessionState",
    "is_login_url",
    "open_persistent_context",
]
