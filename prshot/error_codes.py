"""Error code taxonomy for capture and assembly failures.

The codes appear in structured log lines and in the per-item failure list of a
run summary. Setup codes abort a run; item and image codes are recorded and the
run moves on.
"""
from __future__ import annotations


class ErrorCode:
    # Worklist loading (fatal)
    SOURCE_NOT_FOUND = "source_not_found"
    MALFORMED_SOURCE = "malformed_source"
    # Session (fatal)
    AUTHENTICATION_REQUIRED = "authentication_required"
    # Per pull request
    NAVIGATION_TIMEOUT = "navigation_timeout"
    AUTH_REQUIRED_FOR_ITEM = "auth_required_for_item"
    CAPTURE_FAILED = "capture_failed"
    # Per screenshot
    IMAGE_READ_FAILED = "image_read_failed"
    ENCODING_FAILED = "encoding_failed"


FATAL_ERROR_CODES = frozenset(
    {
        ErrorCode.SOURCE_NOT_FOUND,
        ErrorCode.MALFORMED_SOURCE,
        ErrorCode.AUTHENTICATION_REQUIRED,
    }
)


__all__ = ["ErrorCode", "FATAL_ERROR_CODES"]
