from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from . import config
from .config_validation import validate_runtime_config
from .logging_utils import _robot_event
from .utils import log_line


@dataclass
class HealthResult:
    ok: bool
    checks: dict[str, dict[str, Any]]


def _check_extension(extension_path: Path) -> dict[str, Any]:
    manifest = extension_path / "manifest.json"
    return {
        "ok": manifest.is_file(),
        "extension_path": str(extension_path),
    }


def _check_profile(profile_dir: Path) -> dict[str, Any]:
    try:
        profile_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        return {"ok": False, "profile_dir": str(profile_dir), "error": str(exc)}
    return {"ok": os.access(profile_dir, os.W_OK), "profile_dir": str(profile_dir)}


def run_health_checks(entrypoint: str = "cli") -> HealthResult:
    checks: dict[str, dict[str, Any]] = {}

    try:
        validate_runtime_config(entrypoint or "cli")
        checks["config"] = {"ok": True}
    except ValueError as exc:
        checks["config"] = {"ok": False, "error": str(exc)}

    checks["extension"] = _check_extension(config.EXTENSION_PATH)
    checks["profile"] = _check_profile(config.PROFILE_DIR)

    try:
        credentials = config.load_credentials()
        checks["credentials"] = {"ok": True, "extension_name": credentials.extension_name}
    except ValueError as exc:
        checks["credentials"] = {"ok": False, "error": str(exc)}

    overall_ok = all(check.get("ok", False) for check in checks.values())

    _robot_event(
        "state" if overall_ok else "error",
        phase="health",
        context="healthcheck",
        ok=overall_ok,
        checks=checks,
    )

    return HealthResult(ok=overall_ok, checks=checks)


if __name__ == "__main__":  # pragma: no cover
    result = run_health_checks(entrypoint="cli")
    for name, info in result.checks.items():
        status = "OK" if info.get("ok") else "FAIL"
        log_line(f"[HEALTH] {name}: {status} {info}")
    raise SystemExit(0 if result.ok else 1)
