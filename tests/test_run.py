from pathlib import Path
from typing import List

import pytest

from prshot import credentials, run
from prshot.capture import RunStatistics
from tests.test_capture import FakeContext, fake_sync_playwright
from tests.test_utils import _configure_temp_paths


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = _configure_temp_paths(tmp_path, monkeypatch)
    monkeypatch.setattr(credentials, "check_cli_credentials", lambda: False)
    return path


def _install_browser(monkeypatch: pytest.MonkeyPatch, context: FakeContext):
    factory = fake_sync_playwright(context)
    monkeypatch.setattr(run, "sync_playwright", factory)
    return factory


def _record_stats(monkeypatch: pytest.MonkeyPatch) -> List[RunStatistics]:
    reported: List[RunStatistics] = []
    original = run.report_run

    def _capture(stats, *args, **kwargs):
        reported.append(stats)
        original(stats, *args, **kwargs)

    monkeypatch.setattr(run, "report_run", _capture)
    return reported


def test_end_to_end_partial_failure(data_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    csv_path = data_dir / "pr_list.csv"
    csv_path.write_text("Fix #101,alice\n#102 docs\nchore #103\n#101 again", encoding="utf-8")
    context = FakeContext({"102": "nav_timeout"}, image_size=(1190, 2000))
    _install_browser(monkeypatch, context)
    reported = _record_stats(monkeypatch)
    sleeps: List[float] = []

    exit_code = run.run_capture(csv_path, human_signal=lambda: "", sleep=sleeps.append)

    assert exit_code == 0
    stats = reported[0]
    assert (stats.total, stats.succeeded, stats.failed) == (3, 2, 1)
    assert [identifier for identifier, _ in stats.failures] == ["102"]
    assert sorted(p.name for p in (data_dir / "pdfs").iterdir()) == ["pr-101.pdf", "pr-103.pdf"]
    assert sorted(p.name for p in (data_dir / "screenshots").iterdir()) == [
        "pr-101.png",
        "pr-103.png",
    ]
    assert len(sleeps) == 2
    assert context.closed
    assert all(page.closed for page in context.pages)


def test_no_successes_skips_pdf_step(data_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    csv_path = data_dir / "pr_list.csv"
    csv_path.write_text("#1\n", encoding="utf-8")
    _install_browser(monkeypatch, FakeContext({"1": "login_wall"}))
    calls: List[int] = []
    monkeypatch.setattr(run.assemble, "assemble_all", lambda *a, **k: calls.append(1))

    assert run.run_capture(csv_path, human_signal=lambda: "", sleep=lambda _s: None) == 0
    assert calls == []


def test_pdf_step_errors_do_not_fail_run(data_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    csv_path = data_dir / "pr_list.csv"
    csv_path.write_text("#1\n", encoding="utf-8")
    _install_browser(monkeypatch, FakeContext())

    def _explode(*_args, **_kwargs):
        raise RuntimeError("pdf backend unavailable")

    monkeypatch.setattr(run.assemble, "assemble_all", _explode)

    assert run.run_capture(csv_path, human_signal=lambda: "", sleep=lambda _s: None) == 0


def test_empty_worklist_exits_zero_without_browser(
    data_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    csv_path = data_dir / "pr_list.csv"
    csv_path.write_text("title,author\nno numbers,here\n", encoding="utf-8")

    def _no_browser():
        raise AssertionError("browser must not be launched")

    monkeypatch.setattr(run, "sync_playwright", _no_browser)

    assert run.run_capture(csv_path) == 0
    assert sorted(p.name for p in data_dir.iterdir()) == ["logs", "pdfs", "pr_list.csv", "screenshots"]
    assert list((data_dir / "screenshots").iterdir()) == []
    assert list((data_dir / "pdfs").iterdir()) == []


def test_missing_source_exits_one(data_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(run, "sync_playwright", lambda: pytest.fail("unexpected launch"))

    assert run.run_capture(data_dir / "missing.csv") == 1


def test_authentication_failure_exits_one(data_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    csv_path = data_dir / "pr_list.csv"
    csv_path.write_text("#1\n#2\n", encoding="utf-8")
    context = FakeContext(logged_in=False)
    _install_browser(monkeypatch, context)

    assert run.run_capture(csv_path, human_signal=lambda: "", sleep=lambda _s: None) == 1
    assert context.closed
    assert [url for url, _, _ in context.visited] == ["https://github.com/login"]
    assert list((data_dir / "screenshots").iterdir()) == []


def test_invalid_config_exits_one(data_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    csv_path = data_dir / "pr_list.csv"
    csv_path.write_text("#1\n", encoding="utf-8")
    monkeypatch.setattr(run.config, "NAV_TIMEOUT_SECONDS", 0)

    assert run.run_capture(csv_path) == 1


def test_cli_positional_argument_overrides_default(
    data_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    captured: List[Path] = []
    monkeypatch.setattr(run, "run_capture", lambda path: captured.append(path) or 0)

    assert run.main(["custom.csv"]) == 0
    assert run.main([]) == 0
    assert captured == [Path("custom.csv"), data_dir / "pr_list.csv"]


def test_closed_stdin_during_login_exits_one(
    data_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    csv_path = data_dir / "pr_list.csv"
    csv_path.write_text("#1\n", encoding="utf-8")
    context = FakeContext(logged_in=False)
    _install_browser(monkeypatch, context)

    def _eof(*_args):
        raise EOFError

    monkeypatch.setattr("builtins.input", _eof)

    assert run.run_capture(csv_path, sleep=lambda _s: None) == 1
    assert context.closed


def test_unreadable_source_exits_one(data_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    csv_path = data_dir / "pr_list.csv"
    csv_path.write_text("#1\n", encoding="utf-8")
    monkeypatch.setattr(run, "sync_playwright", lambda: pytest.fail("unexpected launch"))

    def _denied(*_args, **_kwargs):
        raise PermissionError(13, "Permission denied")

    monkeypatch.setattr(Path, "open", _denied)

    assert run.run_capture(csv_path) == 1
