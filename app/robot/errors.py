from __future__ import annotations

from .error_codes import AuthStage, ErrorCode


class RobotError(Exception):
    """Base class for failures raised by the robot engine."""

    error_code = ErrorCode.INTERNAL

    def reason(self) -> str:
        """Return the stage-tagged reason recorded in run results."""

        return f"{self.error_code}: {self}"


class SessionError(RobotError):
    """The browser process or persistent context could not be created."""

    error_code = ErrorCode.SESSION


class AuthenticationError(RobotError):
    error_code = ErrorCode.AUTH

    def __init__(self, stage: str, message: str = "") -> None:
        if stage not in AuthStage.ALL:
            raise ValueError(f"Unknown authentication stage: {stage!r}")
        super().__init__(message or f"authentication failed at stage {stage}")
        self.stage = stage

    def reason(self) -> str:
        return f"{self.error_code}[{self.stage}]: {self}"


class AuthenticationOrderError(RobotError):
    """An operation was called before the session reached the state it needs."""


class FormatError(RobotError, ValueError):
    error_code = ErrorCode.FORMAT


class NavigationError(RobotError):
    error_code = ErrorCode.NAVIGATION

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


__all__ = [
    "RobotError",
    "SessionError",
    "AuthenticationError",
    "AuthenticationOrderError",
    "FormatError",
    "NavigationError",
]
