"""Two-stage login: Presto broker console, then e-SAJ certificate login."""
from __future__ import annotations

import enum
import time
from typing import Callable, List, Optional, Protocol

from . import config
from .browser import BrowserActionError, BrowserPage, WaitTimeout
from .error_codes import AuthStage
from .errors import AuthenticationError, AuthenticationOrderError
from .logging_utils import _robot_event
from .selectors_esaj import BROKER_SELECTORS, PORTAL_SELECTORS, BrokerSelectors, PortalSelectors
from .utils import log_line, short_error_message


class AuthState(enum.IntEnum):
    LOGGED_OUT = 0
    BROKER_AUTHENTICATED = 1
    FULLY_AUTHENTICATED = 2


class HasPage(Protocol):
    @property
    def page(self) -> BrowserPage: ...


class AuthenticationFlow:
    """Drive the login state machine against the session's active page.

    The state only moves forward. A new ``AuthenticationFlow`` (and a new
    session) is the only way back to ``LOGGED_OUT``.
    """

    def __init__(
        self,
        session: HasPage,
        *,
        certificate_name: Optional[str] = None,
        broker: BrokerSelectors = BROKER_SELECTORS,
        portal: PortalSelectors = PORTAL_SELECTORS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._session = session
        self.certificate_name = config.CERTIFICATE_NAME if certificate_name is None else certificate_name
        self.broker = broker
        self.portal = portal
        self.state = AuthState.LOGGED_OUT
        self._clock = clock
        self._sleep = sleep

    def advance(self, new_state: AuthState) -> None:
        if new_state <= self.state:
            return
        _robot_event("auth", phase="state", previous=self.state.name, current=new_state.name)
        self.state = new_state

    def require(self, minimum: AuthState) -> None:
        if self.state < minimum:
            raise AuthenticationOrderError(
                f"operation requires {minimum.name}, session is {self.state.name}"
            )

    def probe_ready(self, selector: str, timeout_ms: int) -> bool:
        """Return True once ``selector`` is visible, False if it never shows up."""

        try:
            self._session.page.wait_for_selector(selector, timeout_ms)
        except WaitTimeout:
            return False
        except BrowserActionError as exc:
            log_line(f"[AUTH] Probe for {selector} failed: {short_error_message(exc)}")
            return False
        return True

    def login_broker(self, email: str, password: str) -> None:
        page = self._session.page
        try:
            page.navigate(self.broker.login_url)
        except (WaitTimeout, BrowserActionError) as exc:
            raise AuthenticationError(
                AuthStage.BROKER, f"broker login page unreachable: {short_error_message(exc)}"
            ) from exc

        if self.probe_ready(self.broker.logged_in_marker, config.PROBE_TIMEOUT_MS):
            log_line("[AUTH] Broker session already active; skipping credential form")
            self.advance(AuthState.BROKER_AUTHENTICATED)
            return

        log_line("[AUTH] Logging in to broker console")
        try:
            page.fill(self.broker.identifier_input, email)
            page.click(self.broker.identifier_submit)
            page.fill(self.broker.password_input, password)
            page.click(self.broker.password_submit)
            page.wait_for_selector(self.broker.logged_in_marker, config.LOGIN_TIMEOUT_MS)
        except (WaitTimeout, BrowserActionError) as exc:
            raise AuthenticationError(
                AuthStage.BROKER, f"broker login did not complete: {short_error_message(exc)}"
            ) from exc
        self.advance(AuthState.BROKER_AUTHENTICATED)

    def _certificate_labels(self, page: BrowserPage) -> List[str]:
        """Labels of the loaded certificates, without the placeholder option."""

        placeholder = self.portal.certificate_placeholder.casefold()
        try:
            labels = page.option_labels(self.portal.certificate_list)
        except (WaitTimeout, BrowserActionError) as exc:
            raise AuthenticationError(
                AuthStage.CERTIFICATE_LIST, f"certificate list unreadable: {short_error_message(exc)}"
            ) from exc
        return [label for label in labels if label and not label.casefold().startswith(placeholder)]

    def _select_certificate(self, page: BrowserPage) -> int:
        """Poll the list until a certificate matches, select it and return the option count."""

        if not self.certificate_name:
            raise AuthenticationError(AuthStage.CERTIFICATE_NOT_FOUND, "no certificate name configured")

        needle = self.certificate_name.casefold()
        timeout_ms = config.CERTIFICATE_LIST_TIMEOUT_MS
        deadline = self._clock() + timeout_ms / 1000
        while True:
            labels = self._certificate_labels(page)
            match = next((label for label in labels if needle in label.casefold()), None)
            if match is not None or self._clock() >= deadline:
                break
            self._sleep(config.CERTIFICATE_POLL_INTERVAL_MS / 1000)

        if match is None:
            if not labels:
                raise AuthenticationError(
                    AuthStage.CERTIFICATE_LIST, f"certificate list still empty after {timeout_ms}ms"
                )
            raise AuthenticationError(
                AuthStage.CERTIFICATE_NOT_FOUND,
                f"no certificate matching {self.certificate_name!r} among {len(labels)} certificates",
            )
        try:
            page.select_option(self.portal.certificate_list, match)
        except (WaitTimeout, BrowserActionError) as exc:
            raise AuthenticationError(
                AuthStage.CERTIFICATE_NOT_FOUND,
                f"matching certificate not selectable: {short_error_message(exc)}",
            ) from exc
        return len(labels)

    def login_target(self, pin: str) -> None:
        self.require(AuthState.BROKER_AUTHENTICATED)
        page = self._session.page
        log_line("[AUTH] Logging in to e-SAJ with digital certificate")

        try:
            page.navigate(self.portal.login_url)
            page.click(self.portal.certificate_tab)
            page.wait_for_selector(self.portal.certificate_list, config.CERTIFICATE_LIST_TIMEOUT_MS)
        except (WaitTimeout, BrowserActionError) as exc:
            raise AuthenticationError(
                AuthStage.CERTIFICATE_LIST, f"certificate list did not load: {short_error_message(exc)}"
            ) from exc

        available = self._select_certificate(page)
        _robot_event(
            "auth",
            phase="certificate",
            certificate=self.certificate_name,
            matched=True,
            available=available,
        )

        try:
            page.click_visible(self.portal.certificate_submit)
            page.wait_for_selector(self.portal.pin_input, config.PIN_PROMPT_TIMEOUT_MS)
            page.fill(self.portal.pin_input, pin)
            page.click(self.portal.pin_submit)
        except (WaitTimeout, BrowserActionError) as exc:
            raise AuthenticationError(
                AuthStage.PIN_PROMPT, f"PIN prompt failed: {short_error_message(exc)}"
            ) from exc

        try:
            page.wait_for_selector(self.portal.landing_marker, config.LANDING_TIMEOUT_MS)
        except (WaitTimeout, BrowserActionError) as exc:
            raise AuthenticationError(
                AuthStage.LANDING, f"portal landing page not reached: {short_error_message(exc)}"
            ) from exc

        self.advance(AuthState.FULLY_AUTHENTICATED)
        log_line("[AUTH] Login completed")


__all__ = ["AuthState", "AuthenticationFlow"]
