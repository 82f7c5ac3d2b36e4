from app.robot import logging_utils, utils


def test_robot_event_label_and_phase(monkeypatch):
    events: list[str] = []
    monkeypatch.setattr(logging_utils, "log_line", lambda msg: events.append(msg))

    logging_utils._robot_event("auth", phase="state", current="BROKER_AUTHENTICATED")

    assert events
    line = events[-1]
    assert line.startswith("[ROBOT][AUTH]")
    assert "phase='state'" in line
    assert "current='BROKER_AUTHENTICATED'" in line


def test_robot_event_never_raises(monkeypatch):
    def _boom(msg):
        raise OSError("disk full")

    monkeypatch.setattr(logging_utils, "log_line", _boom)
    logging_utils._robot_event("error", reason="x")


def test_log_line_writes_to_current_file():
    utils.log_line("[TEST] hello")
    assert "[TEST] hello" in utils.get_current_log_path().read_text(encoding="utf-8")


def test_short_error_message_truncates():
    message = utils.short_error_message(RuntimeError("a\n" * 300), max_length=20)
    assert len(message) == 20
    assert message.endswith("...")
    assert utils.short_error_message(RuntimeError()) == "RuntimeError"


def test_robot_event_masks_sensitive_fields(monkeypatch):
    events: list[str] = []
    monkeypatch.setattr(logging_utils, "log_line", lambda msg: events.append(msg))

    logging_utils._robot_event("auth", certificate="GUILHERME SOUZA:12345678900", pin="1234", available=2)

    line = events[-1]
    assert "certificate='GUI***'" in line
    assert "pin='***'" in line
    assert "12345678900" not in line
    assert "available=2" in line


def test_mask_value_short_and_empty():
    assert logging_utils.mask_value("ab") == "***"
    assert logging_utils.mask_value("") == ""
    assert logging_utils.mask_value(None) == ""
