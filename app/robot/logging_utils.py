from __future__ import annotations

from typing import Any

from .utils import log_line

# Event fields that may carry credentials or a certificate holder's identity,
# with how many leading characters stay readable.
MASKED_FIELDS = {
    "certificate": 3,
    "email": 3,
    "broker_login": 3,
    "password": 0,
    "broker_password": 0,
    "pin": 0,
}


def mask_value(value: Any, *, keep: int = 3) -> str:
    """Keep the first ``keep`` characters of ``value`` and hide the rest."""

    text = "" if value is None else str(value)
    if not text:
        return ""
    return f"{text[:keep]}***" if 0 < keep < len(text) else "***"


def _robot_event(label: str = "", *, phase: str | None = None, **fields: Any) -> None:
    """Emit one ``[ROBOT][LABEL] key='value'`` line.

    ``phase`` stands in for the label when no label is given; otherwise it is
    written as a field. Values of ``MASKED_FIELDS`` are masked before writing.
    """

    try:
        if phase and label:
            fields.setdefault("phase", phase)
        tag = (label or phase or "event").upper()
        parts = []
        for key in sorted(fields):
            value = mask_value(fields[key], keep=MASKED_FIELDS[key]) if key in MASKED_FIELDS else fields[key]
            parts.append(f"{key}={value!r}")
        log_line(f"[ROBOT][{tag}] {', '.join(parts)}")
    except Exception:
        # Never let logging break a run.
        return


__all__ = ["MASKED_FIELDS", "mask_value", "_robot_event"]
