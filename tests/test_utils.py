import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from prshot import config, utils


def _configure_temp_paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    data_dir = tmp_path / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    monkeypatch.setattr(config, "DATA_DIR", data_dir)
    monkeypatch.setattr(config, "SCREENSHOTS_DIR", data_dir / "screenshots")
    monkeypatch.setattr(config, "PDFS_DIR", data_dir / "pdfs")
    monkeypatch.setattr(config, "LOG_DIR", data_dir / "logs")
    monkeypatch.setattr(config, "LOG_FILE", data_dir / "logs" / "latest.log")
    monkeypatch.setattr(config, "BROWSER_PROFILE_DIR", data_dir / ".browser-data")
    monkeypatch.setattr(config, "DEFAULT_WORKLIST_FILE", data_dir / "pr_list.csv")
    return data_dir


def test_ensure_dirs_creates_output_tree(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    data_dir = _configure_temp_paths(tmp_path, monkeypatch)

    utils.ensure_dirs()

    assert (data_dir / "screenshots").is_dir()
    assert (data_dir / "pdfs").is_dir()
    assert (data_dir / "logs").is_dir()
    assert not (data_dir / ".browser-data").exists()


def test_setup_run_logger_writes_lines_to_new_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    _configure_temp_paths(tmp_path, monkeypatch)

    log_path = utils.setup_run_logger()
    utils.log_line("hello from the capture run")
    for handler in utils.LOGGER.handlers:
        handler.flush()

    assert log_path.parent == config.LOG_DIR
    assert log_path.name.startswith("run_")
    assert utils.get_current_log_path() == log_path
    assert "hello from the capture run" in log_path.read_text(encoding="utf-8")


def test_short_error_message_prefixes_type_and_truncates() -> None:
    assert utils.short_error_message(ValueError("bad value")) == "ValueError: bad value"
    assert utils.short_error_message(RuntimeError()) == "RuntimeError"
    assert utils.short_error_message(RuntimeError("first\nsecond")) == "RuntimeError: first"

    long_message = utils.short_error_message(RuntimeError("x" * 500), max_length=50)
    assert len(long_message) == 50
    assert long_message.endswith("...")
