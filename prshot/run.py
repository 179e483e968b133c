"""Capture pull request screenshots and build their PDFs.

Flow: load the worklist, check the GitHub CLI token, open the persistent
browser session, capture every PR in order, print a summary and, when at least
one capture succeeded, build one PDF per screenshot.
"""
from __future__ import annotations

import argparse
import time
from pathlib import Path
from typing import Callable, List, Optional

from playwright.sync_api import Error as PWError, sync_playwright

from . import assemble, config, credentials
from .capture import RunStatistics, capture_all
from .config_validation import validate_runtime_config
from .logging_utils import _log_event
from .session import AuthenticationRequired, SessionManager
from .utils import ensure_dirs, log_line, setup_run_logger, short_error_message
from .worklist import WorkItem, WorklistError, load_worklist

EXIT_OK = 0
EXIT_SETUP_FAILED = 1


def report_run(stats: RunStatistics, screenshots_dir: Optional[Path] = None) -> None:
    log_line("=== Capture finished ===")
    log_line(f"Total: {stats.total}")
    log_line(f"Succeeded: {stats.succeeded}")
    log_line(f"Failed: {stats.failed}")
    if stats.failures:
        log_line("Failed pull requests:")
        for identifier, detail in stats.failures:
            log_line(f"  - PR #{identifier}: {detail}")
    log_line(f"Screenshots saved to: {screenshots_dir or config.SCREENSHOTS_DIR}/")


def _build_pdfs() -> Optional[assemble.AssemblyStatistics]:
    """Run the PDF step in-process; its failures never fail the capture run."""

    log_line("--- PDF generation ---")
    try:
        stats = assemble.assemble_all()
    except Exception as exc:  # noqa: BLE001
        log_line(f"[PDF][ERROR] PDF generation failed: {short_error_message(exc)}")
        log_line("Screenshots were saved successfully.")
        return None
    assemble.report_assembly(stats)
    return stats


def _capture_items(
    items: List[WorkItem],
    *,
    human_signal: Optional[Callable[[], object]],
    sleep: Callable[[float], None],
) -> Optional[RunStatistics]:
    """Open the session and capture ``items``; ``None`` means setup failed."""

    with sync_playwright() as pw:
        session = SessionManager(pw, human_signal=human_signal)
        try:
            try:
                context = session.establish()
            except AuthenticationRequired as exc:
                log_line(f"[AUTH][ERROR] {exc}")
                _log_event("error", phase="session", error_code=exc.error_code)
                return None
            except PWError as exc:
                log_line(f"[AUTH][ERROR] Unable to check the GitHub session: {short_error_message(exc)}")
                return None

            log_line("Starting captures...")
            return capture_all(context, items, sleep=sleep)
        finally:
            session.close()


def run_capture(
    csv_path: Path,
    *,
    human_signal: Optional[Callable[[], object]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Run the full capture pipeline and return the process exit code."""

    ensure_dirs()
    setup_run_logger()
    log_line("=== GitHub PR screenshot tool ===")

    try:
        validate_runtime_config("cli")
    except ValueError:
        return EXIT_SETUP_FAILED

    credentials.check_cli_credentials()

    log_line(f"Reading worklist: {csv_path}")
    try:
        items = load_worklist(csv_path)
    except WorklistError as exc:
        log_line(f"[WORKLIST][ERROR] {exc}")
        return EXIT_SETUP_FAILED

    if not items:
        log_line("No pull requests to capture.")
        return EXIT_OK

    stats = _capture_items(items, human_signal=human_signal, sleep=sleep)
    if stats is None:
        return EXIT_SETUP_FAILED

    report_run(stats)
    if stats.succeeded > 0:
        _build_pdfs()
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Capture full-page screenshots of GitHub pull requests listed in a CSV file.",
    )
    parser.add_argument(
        "csv_path",
        nargs="?",
        type=Path,
        default=None,
        help="CSV file listing PRs as '#<number>' tokens (default: pr_list.csv in the data dir).",
    )
    args = parser.parse_args(argv)
    return run_capture(args.csv_path or config.DEFAULT_WORKLIST_FILE)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

__all__ = ["main", "report_run", "run_capture"]
