from __future__ import annotations

import pytest

from app.robot import config, config_validation


def test_valid_config_passes() -> None:
    config_validation.validate_runtime_config("tests")


def test_missing_certificate_name_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "CERTIFICATE_NAME", "")
    with pytest.raises(ValueError, match="ROBOT_CERTIFICATE_NAME"):
        config_validation.validate_runtime_config("cli")


def test_unknown_backend_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "BROWSER_BACKEND", "puppeteer")
    with pytest.raises(ValueError, match="ROBOT_BROWSER_BACKEND"):
        config_validation.validate_runtime_config("cli")


def test_non_positive_timeout_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config, "LANDING_TIMEOUT_MS", 0)
    with pytest.raises(ValueError, match="LANDING_TIMEOUT_MS"):
        config_validation.validate_runtime_config("scheduler")


def test_negative_delay_is_clamped(monkeypatch: pytest.MonkeyPatch) -> None:
    events: list[tuple[str, dict]] = []
    monkeypatch.setattr(config, "INTER_ITEM_DELAY_SECONDS", -2.0)
    monkeypatch.setattr(
        config_validation, "_robot_event", lambda label, **fields: events.append((label, fields))
    )

    config_validation.validate_runtime_config("tests")

    assert config.INTER_ITEM_DELAY_SECONDS == 0.0
    assert events[0][1]["kind"] == "config_adjustment"


def test_parse_timeout_ms_bounds(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROBOT_TEST_TIMEOUT", "not-a-number")
    assert config._parse_timeout_ms("ROBOT_TEST_TIMEOUT", 500) == 500
    monkeypatch.setenv("ROBOT_TEST_TIMEOUT", "-10")
    assert config._parse_timeout_ms("ROBOT_TEST_TIMEOUT", 500) == 1


def test_credentials_repr_masks_secrets(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PRESTO_EMAIL", "user@example.com")
    monkeypatch.setenv("PRESTO_PASSWORD", "hunter2")
    monkeypatch.setenv("PRESTO_PIN", "9876")

    credentials = config.load_credentials()

    assert credentials.pin == "9876"
    assert "hunter2" not in repr(credentials)
    assert "9876" not in repr(credentials)
