from __future__ import annotations

from typing import Literal

from . import config
from .logging_utils import _log_event
from .utils import log_line

Entrypoint = Literal["cli", "pdf", "tests"]


def _raise_config_error(message: str, *, entrypoint: Entrypoint, error: str) -> None:
    _log_event(
        "error",
        phase="config",
        context="runtime_validation",
        error=error,
        entrypoint=entrypoint,
    )
    log_line(f"[CONFIG] {message} (entrypoint={entrypoint})")
    raise ValueError(message)


def validate_runtime_config(entrypoint: Entrypoint) -> None:
    """Validate runtime configuration for the given entrypoint.

    Raises ``ValueError`` when a blocking misconfiguration is detected.
    A negative inter-item delay is clamped to zero and logged.
    """

    if not config.REPO or config.REPO.count("/") != 1:
        _raise_config_error(
            f"PRSHOT_REPO must look like 'owner/name', got {config.REPO!r}.",
            entrypoint=entrypoint,
            error="invalid_repo",
        )

    positive_fields = [
        ("NAV_TIMEOUT_SECONDS", config.NAV_TIMEOUT_SECONDS),
        ("LOGIN_CHECK_TIMEOUT_SECONDS", config.LOGIN_CHECK_TIMEOUT_SECONDS),
        ("SELECTOR_TIMEOUT_SECONDS", config.SELECTOR_TIMEOUT_SECONDS),
        ("VIEWPORT_WIDTH", config.VIEWPORT_WIDTH),
        ("VIEWPORT_HEIGHT", config.VIEWPORT_HEIGHT),
        ("PDF_MAX_WIDTH", config.PDF_MAX_WIDTH),
    ]
    for field_name, value in positive_fields:
        if value <= 0:
            _raise_config_error(
                f"{field_name} must be greater than zero.",
                entrypoint=entrypoint,
                error="non_positive_value",
            )

    if config.INTER_ITEM_DELAY_SECONDS < 0:
        _log_event(
            "state",
            phase="config",
            context="runtime_validation",
            kind="config_adjustment",
            field="INTER_ITEM_DELAY_SECONDS",
            value=config.INTER_ITEM_DELAY_SECONDS,
            adjusted=0.0,
            entrypoint=entrypoint,
        )
        log_line("[CONFIG] INTER_ITEM_DELAY_SECONDS < 0; clamping to 0.")
        config.INTER_ITEM_DELAY_SECONDS = 0.0


__all__ = ["validate_runtime_config", "Entrypoint"]
