"""Browser capability interface and its Playwright adapter.

Authentication and extraction code talks to a ``BrowserPage`` only. Each
adapter translates its driver's timeout into ``WaitTimeout`` and any other
driver failure into ``BrowserActionError``.
"""
from __future__ import annotations

from typing import List, Optional, Protocol

from playwright.sync_api import Error as PWError, Page, TimeoutError as PWTimeout


class WaitTimeout(Exception):
    """A bounded wait elapsed before its condition held."""


class BrowserActionError(Exception):
    """The driver failed for a reason other than a timeout."""


class BrowserPage(Protocol):
    def navigate(self, url: str, *, timeout_ms: Optional[int] = None) -> None: ...

    def wait_for_selector(self, selector: str, timeout_ms: int) -> None: ...

    def fill(self, selector: str, value: str) -> None: ...

    def click(self, selector: str) -> None: ...

    def click_visible(self, selector: str) -> None: ...

    def option_labels(self, selector: str) -> List[str]: ...

    def select_option(self, selector: str, label: str) -> None: ...

    def content(self) -> str: ...


class PlaywrightPage:
    """``BrowserPage`` backed by a Playwright sync ``Page``."""

    def __init__(self, page: Page, *, default_timeout_ms: Optional[int] = None) -> None:
        self._page = page
        if default_timeout_ms is not None:
            page.set_default_timeout(default_timeout_ms)
            page.set_default_navigation_timeout(default_timeout_ms)

    @property
    def raw(self) -> Page:
        return self._page

    def navigate(self, url: str, *, timeout_ms: Optional[int] = None) -> None:
        try:
            if timeout_ms is None:
                self._page.goto(url, wait_until="domcontentloaded")
            else:
                self._page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
        except PWTimeout as exc:
            raise WaitTimeout(f"navigation to {url} timed out") from exc
        except PWError as exc:
            raise BrowserActionError(f"navigation to {url} failed: {exc}") from exc

    def wait_for_selector(self, selector: str, timeout_ms: int) -> None:
        try:
            self._page.wait_for_selector(selector, state="visible", timeout=timeout_ms)
        except PWTimeout as exc:
            raise WaitTimeout(f"{selector} not visible after {timeout_ms}ms") from exc
        except PWError as exc:
            raise BrowserActionError(f"waiting for {selector} failed: {exc}") from exc

    def fill(self, selector: str, value: str) -> None:
        try:
            self._page.fill(selector, value)
        except PWTimeout as exc:
            raise WaitTimeout(f"{selector} not fillable") from exc
        except PWError as exc:
            raise BrowserActionError(f"fill {selector} failed: {exc}") from exc

    def click(self, selector: str) -> None:
        try:
            self._page.click(selector)
        except PWTimeout as exc:
            raise WaitTimeout(f"{selector} not clickable") from exc
        except PWError as exc:
            raise BrowserActionError(f"click {selector} failed: {exc}") from exc

    def click_visible(self, selector: str) -> None:
        try:
            self._page.locator(selector).locator("visible=true").first.click()
        except PWTimeout as exc:
            raise WaitTimeout(f"no visible element for {selector}") from exc
        except PWError as exc:
            raise BrowserActionError(f"click {selector} failed: {exc}") from exc

    def option_labels(self, selector: str) -> List[str]:
        try:
            labels = self._page.locator(f"{selector} option").all_text_contents()
        except PWError as exc:
            raise BrowserActionError(f"reading options of {selector} failed: {exc}") from exc
        return [label.strip() for label in labels]

    def select_option(self, selector: str, label: str) -> None:
        try:
            self._page.select_option(selector, label=label)
        except PWTimeout as exc:
            raise WaitTimeout(f"{selector} not selectable") from exc
        except PWError as exc:
            raise BrowserActionError(f"select {label!r} in {selector} failed: {exc}") from exc

    def content(self) -> str:
        try:
            return self._page.content()
        except PWError as exc:
            raise BrowserActionError(f"reading page content failed: {exc}") from exc


__all__ = [
    "BrowserPage",
    "PlaywrightPage",
    "WaitTimeout",
    "BrowserActionError",
]
