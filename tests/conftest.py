from __future__ import annotations

from pathlib import Path

import pytest

from app.robot import config, utils


@pytest.fixture(autouse=True)
def _isolated_paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    data_dir = tmp_path / "data"
    monkeypatch.setattr(config, "DATA_DIR", data_dir)
    monkeypatch.setattr(config, "LOG_DIR", data_dir / "logs")
    monkeypatch.setattr(config, "LOG_FILE", data_dir / "logs" / "latest.log")
    monkeypatch.setattr(config, "RUNS_DIR", data_dir / "runs")
    monkeypatch.setattr(config, "PROFILE_DIR", tmp_path / "user-data")
    monkeypatch.setattr(config, "EXTENSION_PATH", tmp_path / "extension")
    monkeypatch.setattr(config, "CERTIFICATE_NAME", "guilherme")
    utils._configure_logger(data_dir / "logs" / "latest.log")
