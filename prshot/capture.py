"""Sequential full-page capture of pull request pages."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from playwright.sync_api import BrowserContext, Page, TimeoutError as PWTimeout

from . import config
from .error_codes import ErrorCode
from .logging_utils import _log_event
from .utils import log_line, short_error_message
from .worklist import WorkItem

SUCCESS = "success"
FAILURE = "failure"


class CaptureError(Exception):
    def __init__(self, error_code: str, message: str) -> None:
        super().__init__(message)
        self.error_code = error_code


@dataclass(frozen=True)
class CaptureResult:
    identifier: str
    outcome: str
    image_path: Optional[Path] = None
    error_code: Optional[str] = None
    error_detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome == SUCCESS


@dataclass
class RunStatistics:
    """Accumulated outcome of one capture pass."""

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    failures: List[Tuple[str, str]] = field(default_factory=list)

    def add(self, result: CaptureResult) -> "RunStatistics":
        self.total += 1
        if result.ok:
            self.succeeded += 1
        else:
            self.failed += 1
            self.failures.append((result.identifier, result.error_detail or ""))
        return self


def _wait_for_content(page: Page, identifier: str) -> None:
    """Wait for a PR header; fall back to a short settle when none shows up."""

    try:
        page.wait_for_selector(
            ", ".join(config.CONTENT_READY_SELECTORS),
            state="visible",
            timeout=config.SELECTOR_TIMEOUT_SECONDS * 1000,
        )
    except PWTimeout:
        log_line(
            f"  [CAPTURE][WARN] PR #{identifier}: header selector timed out; "
            f"settling {config.SETTLE_SECONDS:g}s before capture"
        )
        page.wait_for_timeout(int(config.SETTLE_SECONDS * 1000))


def _capture_page(page: Page, item: WorkItem, screenshots_dir: Path) -> Path:
    url = config.pr_url(item.identifier)
    log_line(f"  Opening {url}")
    _log_event("nav", step="goto", identifier=item.identifier, url=url)
    try:
        page.goto(
            url,
            wait_until="domcontentloaded",
            timeout=config.NAV_TIMEOUT_SECONDS * 1000,
        )
    except PWTimeout as exc:
        raise CaptureError(
            ErrorCode.NAVIGATION_TIMEOUT,
            f"Navigation to {url} timed out after {config.NAV_TIMEOUT_SECONDS}s: "
            f"{short_error_message(exc)}",
        ) from exc

    _wait_for_content(page, item.identifier)

    if page.locator(config.LOGIN_FORM_SELECTOR).count() > 0:
        raise CaptureError(
            ErrorCode.AUTH_REQUIRED_FOR_ITEM,
            "GitHub login required to view this pull request.",
        )

    destination = config.screenshot_path(item.identifier, screenshots_dir)
    destination.parent.mkdir(parents=True, exist_ok=True)
    page.screenshot(path=str(destination), full_page=True)
    return destination


def capture_item(
    context: BrowserContext,
    item: WorkItem,
    *,
    screenshots_dir: Optional[Path] = None,
) -> CaptureResult:
    """Capture one pull request; every failure is folded into the result."""

    target_dir = screenshots_dir or config.SCREENSHOTS_DIR
    page: Optional[Page] = None
    try:
        page = context.new_page()
        image_path = _capture_page(page, item, target_dir)
    except CaptureError as exc:
        result = CaptureResult(
            identifier=item.identifier,
            outcome=FAILURE,
            error_code=exc.error_code,
            error_detail=str(exc),
        )
    except Exception as exc:  # noqa: BLE001
        result = CaptureResult(
            identifier=item.identifier,
            outcome=FAILURE,
            error_code=ErrorCode.CAPTURE_FAILED,
            error_detail=short_error_message(exc),
        )
    else:
        result = CaptureResult(identifier=item.identifier, outcome=SUCCESS, image_path=image_path)
    finally:
        if page is not None:
            try:
                page.close()
            except Exception as exc:  # noqa: BLE001
                log_line(f"  [CAPTURE][WARN] PR #{item.identifier}: page close failed: {exc}")

    if result.ok:
        log_line(f"  Saved -> {result.image_path}")
    else:
        log_line(f"  [CAPTURE][ERROR] PR #{item.identifier}: {result.error_detail}")
    _log_event(
        "capture",
        identifier=item.identifier,
        outcome=result.outcome,
        error_code=result.error_code,
    )
    return result


def capture_all(
    context: BrowserContext,
    items: Sequence[WorkItem],
    *,
    screenshots_dir: Optional[Path] = None,
    sleep: Callable[[float], None] = time.sleep,
    delay: Optional[float] = None,
) -> RunStatistics:
    """Capture ``items`` one at a time and return the folded statistics."""

    pause = config.INTER_ITEM_DELAY_SECONDS if delay is None else delay
    stats = RunStatistics()
    count = len(items)
    for index, item in enumerate(items, start=1):
        log_line(f"[{index}/{count}] PR #{item.identifier}")
        stats.add(capture_item(context, item, screenshots_dir=screenshots_dir))
        if index < count and pause > 0:
            sleep(pause)
    return stats


__all__ = [
    "CaptureError",
    "CaptureResult",
    "FAILURE",
    "RunStatistics",
    "SUCCESS",
    "capture_all",
    "capture_item",
]
