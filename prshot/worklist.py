"""Worklist loading for pull request captures.

The input is a loosely structured CSV export (no header row). Each record is
scanned left to right and the first field holding a ``#<digits>`` token names
the pull request for that record. Records without such a token are skipped;
repeated pull request numbers keep their first occurrence.
"""
from __future__ import annotations

import csv
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from .error_codes import ErrorCode
from .logging_utils import _log_event
from .utils import log_line

PR_TOKEN_PATTERN = re.compile(r"#(\d+)")


class WorklistError(Exception):
    error_code = ""

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class SourceNotFound(WorklistError):
    error_code = ErrorCode.SOURCE_NOT_FOUND


class MalformedSource(WorklistError):
    error_code = ErrorCode.MALFORMED_SOURCE


@dataclass(frozen=True)
class WorkItem:
    """A single pull request to capture.

    ``raw_record`` keeps the original CSV fields joined with commas so failures
    can be traced back to the input line.
    """

    identifier: str
    raw_record: str


def extract_identifier(fields: Iterable[str]) -> Optional[str]:
    """Return the PR number from the first field carrying a ``#<digits>`` token."""

    for value in fields:
        match = PR_TOKEN_PATTERN.search(value or "")
        if match:
            return match.group(1)
    return None


def iter_work_items(records: Iterable[List[str]]) -> Iterator[WorkItem]:
    """Yield de-duplicated work items from already split ``records``."""

    seen: set[str] = set()
    for fields in records:
        identifier = extract_identifier(fields)
        if identifier is None or identifier in seen:
            continue
        seen.add(identifier)
        yield WorkItem(identifier=identifier, raw_record=",".join(fields))


def load_worklist(path: Path | str) -> List[WorkItem]:
    """Load the ordered, de-duplicated worklist from the CSV file at ``path``.

    Raises :class:`SourceNotFound` when ``path`` is not a file and
    :class:`MalformedSource` when the record stream itself cannot be parsed.
    """

    csv_path = Path(path)
    if not csv_path.is_file():
        _log_event(
            "error",
            phase="worklist",
            error_code=ErrorCode.SOURCE_NOT_FOUND,
            path=str(csv_path),
        )
        raise SourceNotFound(f"CSV file not found: {csv_path}", path=csv_path)

    try:
        with csv_path.open("r", encoding="utf-8-sig", newline="") as handle:
            items = list(iter_work_items(csv.reader(handle)))
    except (csv.Error, UnicodeDecodeError) as exc:
        _log_event(
            "error",
            phase="worklist",
            error_code=ErrorCode.MALFORMED_SOURCE,
            path=str(csv_path),
            error=str(exc),
        )
        raise MalformedSource(f"Unable to parse {csv_path}: {exc}", path=csv_path) from exc
    except OSError as exc:
        _log_event(
            "error",
            phase="worklist",
            error_code=ErrorCode.SOURCE_NOT_FOUND,
            path=str(csv_path),
            error=str(exc),
        )
        raise SourceNotFound(f"Unable to read {csv_path}: {exc}", path=csv_path) from exc

    log_line(f"[WORKLIST] loaded count={len(items)} path={csv_path}")
    return items


__all__ = [
    "MalformedSource",
    "SourceNotFound",
    "WorkItem",
    "WorklistError",
    "extract_identifier",
    "iter_work_items",
    "load_worklist",
]
