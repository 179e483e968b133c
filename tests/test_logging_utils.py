from prshot import logging_utils


def test_log_event_label_and_phase(monkeypatch):
    events: list[str] = []
    monkeypatch.setattr(logging_utils, "log_line", lambda msg: events.append(msg))

    logging_utils._log_event("capture", phase="item", identifier="42", outcome="success")

    assert events
    line = events[-1]
    assert line.startswith("[PRSHOT][CAPTURE]")
    assert "phase='item'" in line
    assert "identifier='42'" in line
    assert "outcome='success'" in line


def test_log_event_never_raises(monkeypatch):
    def _broken(_msg):
        raise OSError("disk gone")

    monkeypatch.setattr(logging_utils, "log_line", _broken)

    logging_utils._log_event("nav", step="goto")
