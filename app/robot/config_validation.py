from __future__ import annotations

from typing import Literal

from . import config
from .logging_utils import _robot_event
from .utils import log_line

Entrypoint = Literal["cli", "scheduler", "api", "tests"]


def _raise_config_error(message: str, *, entrypoint: Entrypoint, error: str) -> None:
    _robot_event(
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
    Non-fatal adjustments (e.g., clamping the inter-item delay) are logged but
    do not raise.
    """

    if config.BROWSER_BACKEND not in config.SUPPORTED_BACKENDS:
        _raise_config_error(
            f"ROBOT_BROWSER_BACKEND must be one of {', '.join(config.SUPPORTED_BACKENDS)}.",
            entrypoint=entrypoint,
            error="unknown_backend",
        )

    if not config.CERTIFICATE_NAME:
        _raise_config_error(
            "ROBOT_CERTIFICATE_NAME must name the certificate used for the portal login.",
            entrypoint=entrypoint,
            error="certificate_name_missing",
        )

    if config.INTER_ITEM_DELAY_SECONDS < 0:
        adjusted = 0.0
        _robot_event(
            "state",
            phase="config",
            context="runtime_validation",
            kind="config_adjustment",
            field="INTER_ITEM_DELAY_SECONDS",
            value=config.INTER_ITEM_DELAY_SECONDS,
            adjusted=adjusted,
            entrypoint=entrypoint,
        )
        log_line("[CONFIG] INTER_ITEM_DELAY_SECONDS < 0; clamping to 0.")
        config.INTER_ITEM_DELAY_SECONDS = adjusted

    timeout_fields = [
        ("PROBE_TIMEOUT_MS", config.PROBE_TIMEOUT_MS),
        ("LOGIN_TIMEOUT_MS", config.LOGIN_TIMEOUT_MS),
        ("CERTIFICATE_LIST_TIMEOUT_MS", config.CERTIFICATE_LIST_TIMEOUT_MS),
        ("CERTIFICATE_POLL_INTERVAL_MS", config.CERTIFICATE_POLL_INTERVAL_MS),
        ("PIN_PROMPT_TIMEOUT_MS", config.PIN_PROMPT_TIMEOUT_MS),
        ("LANDING_TIMEOUT_MS", config.LANDING_TIMEOUT_MS),
        ("NAVIGATION_TIMEOUT_MS", config.NAVIGATION_TIMEOUT_MS),
    ]

    for field_name, value in timeout_fields:
        if value <= 0:
            _raise_config_error(
                f"{field_name} must be greater than zero.",
                entrypoint=entrypoint,
                error="invalid_timeout",
            )


__all__ = ["validate_runtime_config", "Entrypoint"]
