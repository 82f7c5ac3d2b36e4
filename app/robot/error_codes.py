from __future__ import annotations

"""Centralised failure codes for robot runs.

Codes prefix every failure reason in a run result (``"<code>: <message>"``)
and appear in structured logs. Consumers match on them, so keep them stable.
"""


class ErrorCode:
    SESSION = "session_error"
    FORMAT = "format_error"
    NAVIGATION = "navigation_error"
    AUTH = "authentication_error"
    INTERNAL = "internal_error"


class AuthStage:
    BROKER = "broker"
    CERTIFICATE_LIST = "certificate-list"
    CERTIFICATE_NOT_FOUND = "certificate-not-found"
    PIN_PROMPT = "pin-prompt"
    LANDING = "landing"

    ALL = (BROKER, CERTIFICATE_LIST, CERTIFICATE_NOT_FOUND, PIN_PROMPT, LANDING)


__all__ = ["ErrorCode", "AuthStage"]
