"""Configuration constants for the e-SAJ process robot."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DATA_DIR: Path = Path(os.getenv("ROBOT_DATA_DIR", "./data"))
LOG_DIR: Path = DATA_DIR / "logs"
LOG_FILE: Path = LOG_DIR / "latest.log"
RUNS_DIR: Path = Path(os.getenv("RUNS_DIR", str(DATA_DIR / "runs")))

# Persistent Chromium profile; the broker extension keeps its login here.
PROFILE_DIR: Path = Path(os.getenv("ROBOT_PROFILE_DIR", "./user-data"))
EXTENSION_PATH: Path = Path(
    os.getenv("ROBOT_EXTENSION_PATH", "./extensions/presto/0.77.0_0")
)

BROWSER_BACKEND: str = os.getenv("ROBOT_BROWSER_BACKEND", "playwright").strip().lower() or "playwright"
SUPPORTED_BACKENDS: tuple[str, ...] = ("playwright", "selenium")
# Chromium refuses to load extensions in the old headless mode, so default to headed.
HEADLESS: bool = os.getenv("ROBOT_HEADLESS", "false").strip().lower() in {"1", "true"}
CHROMIUM_BINARY: str = os.getenv("ROBOT_CHROMIUM_BINARY", "")

LOCALE: str = "pt-BR"
TIMEZONE_ID: str = "America/Sao_Paulo"
USER_AGENT: str = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
CLIPBOARD_PERMISSIONS: tuple[str, ...] = ("clipboard-read", "clipboard-write")

CERTIFICATE_NAME: str = os.getenv("ROBOT_CERTIFICATE_NAME", "").strip()

INTER_ITEM_DELAY_SECONDS: float = float(os.getenv("ROBOT_INTER_ITEM_DELAY_SECONDS", "1.0"))

EXECUTION_TYPES: tuple[str, ...] = ("manual", "scheduled", "retry")


def _parse_timeout_ms(env_var: str, default: int, *, minimum: int = 1) -> int:
    """Parse a timeout value in milliseconds from the environment with bounds."""

    try:
        value = int(os.getenv(env_var, str(default)))
    except ValueError:
        return default
    return max(minimum, value)


# State probes (already-logged-in checks) use a short wait.
PROBE_TIMEOUT_MS: int = _parse_timeout_ms("ROBOT_PROBE_TIMEOUT_MS", 5_000)
# Broker credential form -> logged-in marker.
LOGIN_TIMEOUT_MS: int = _parse_timeout_ms("ROBOT_LOGIN_TIMEOUT_MS", 10_000)
CERTIFICATE_LIST_TIMEOUT_MS: int = _parse_timeout_ms("ROBOT_CERTIFICATE_LIST_TIMEOUT_MS", 10_000)
# The extension fills #certificados after the select renders; re-read at this interval.
CERTIFICATE_POLL_INTERVAL_MS: int = _parse_timeout_ms("ROBOT_CERTIFICATE_POLL_INTERVAL_MS", 250)
PIN_PROMPT_TIMEOUT_MS: int = _parse_timeout_ms("ROBOT_PIN_PROMPT_TIMEOUT_MS", 10_000)
LANDING_TIMEOUT_MS: int = _parse_timeout_ms("ROBOT_LANDING_TIMEOUT_MS", 10_000)
# page.goto and the case-page marker wait.
NAVIGATION_TIMEOUT_MS: int = _parse_timeout_ms("ROBOT_NAVIGATION_TIMEOUT_MS", 25_000)


@dataclass(frozen=True)
class Credentials:
    """Broker login and certificate PIN for one extension."""

    broker_login: str
    broker_password: str
    pin: str
    extension_name: str = "presto"

    def __repr__(self) -> str:
        return (
            f"Credentials(extension_name={self.extension_name!r}, "
            f"broker_login={self.broker_login!r}, broker_password='***', pin='***')"
        )


def env_or_raise(key: str) -> str:
    """Return the environment value for ``key`` or raise ``ValueError``."""

    value = os.getenv(key, "")
    if not value:
        raise ValueError(f"{key} must be set")
    return value


def load_credentials() -> Credentials:
    """Read the broker credentials and PIN from the environment."""

    return Credentials(
        broker_login=env_or_raise("PRESTO_EMAIL"),
        broker_password=env_or_raise("PRESTO_PASSWORD"),
        pin=env_or_raise("PRESTO_PIN"),
    )


__all__ = [
    "Credentials",
    "env_or_raise",
    "load_credentials",
]
