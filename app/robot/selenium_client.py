"""Selenium backend for the browser capability interface."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from selenium import webdriver
from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import Select, WebDriverWait

from . import config
from .browser import BrowserActionError, WaitTimeout
from .utils import log_line


def _by(selector: str) -> Tuple[str, str]:
    if selector.startswith("xpath="):
        return By.XPATH, selector[len("xpath="):]
    if selector.startswith("//") or selector.startswith("(//"):
        return By.XPATH, selector
    return By.CSS_SELECTOR, selector


def make_driver(extension_path: Path, profile_dir: Path) -> WebDriver:
    """Instantiate a Chrome WebDriver bound to ``profile_dir`` with the extension loaded."""

    chrome_options = Options()
    if config.CHROMIUM_BINARY:
        chrome_options.binary_location = config.CHROMIUM_BINARY
    if config.HEADLESS:
        chrome_options.add_argument("--headless=new")
    chrome_options.add_argument(f"--user-data-dir={Path(profile_dir).resolve()}")
    chrome_options.add_argument(f"--disable-extensions-except={Path(extension_path).resolve()}")
    chrome_options.add_argument(f"--load-extension={Path(extension_path).resolve()}")
    chrome_options.add_argument("--no-sandbox")
    chrome_options.add_argument("--disable-setuid-sandbox")
    chrome_options.add_argument("--disable-dev-shm-usage")
    chrome_options.add_argument("--start-maximized")
    chrome_options.add_argument(f"--lang={config.LOCALE}")
    chrome_options.add_argument(f"--user-agent={config.USER_AGENT}")
    driver = webdriver.Chrome(options=chrome_options)

    driver.execute_cdp_cmd("Emulation.setTimezoneOverride", {"timezoneId": config.TIMEZONE_ID})
    driver.execute_cdp_cmd(
        "Browser.grantPermissions",
        {"permissions": ["clipboardReadWrite", "clipboardSanitizedWrite"]},
    )
    log_line(f"Started Chrome WebDriver with profile {profile_dir}")
    return driver


class SeleniumPage:
    """``BrowserPage`` backed by a Selenium ``WebDriver``."""

    def __init__(self, driver: WebDriver, *, default_timeout_ms: Optional[int] = None) -> None:
        self._driver = driver
        self._default_timeout_ms = default_timeout_ms or config.NAVIGATION_TIMEOUT_MS

    @property
    def raw(self) -> WebDriver:
        return self._driver

    def _find(self, selector: str):
        try:
            return WebDriverWait(self._driver, self._default_timeout_ms / 1000).until(
                EC.presence_of_element_located(_by(selector))
            )
        except TimeoutException as exc:
            raise WaitTimeout(f"{selector} not present") from exc
        except WebDriverException as exc:
            raise BrowserActionError(f"locating {selector} failed: {exc.msg}") from exc

    def navigate(self, url: str, *, timeout_ms: Optional[int] = None) -> None:
        try:
            self._driver.set_page_load_timeout((timeout_ms or self._default_timeout_ms) / 1000)
            self._driver.get(url)
        except TimeoutException as exc:
            raise WaitTimeout(f"navigation to {url} timed out") from exc
        except WebDriverException as exc:
            raise BrowserActionError(f"navigation to {url} failed: {exc.msg}") from exc

    def wait_for_selector(self, selector: str, timeout_ms: int) -> None:
        try:
            WebDriverWait(self._driver, timeout_ms / 1000).until(
                EC.visibility_of_element_located(_by(selector))
            )
        except TimeoutException as exc:
            raise WaitTimeout(f"{selector} not visible after {timeout_ms}ms") from exc
        except WebDriverException as exc:
            raise BrowserActionError(f"waiting for {selector} failed: {exc.msg}") from exc

    def fill(self, selector: str, value: str) -> None:
        element = self._find(selector)
        try:
            element.clear()
            element.send_keys(value)
        except WebDriverException as exc:
            raise BrowserActionError(f"fill {selector} failed: {exc.msg}") from exc

    def click(self, selector: str) -> None:
        element = self._find(selector)
        try:
            element.click()
        except WebDriverException as exc:
            raise BrowserActionError(f"click {selector} failed: {exc.msg}") from exc

    def click_visible(self, selector: str) -> None:
        locator = _by(selector)

        def _first_displayed(driver: WebDriver):
            for element in driver.find_elements(*locator):
                if element.is_displayed():
                    return element
            return False

        try:
            element = WebDriverWait(self._driver, self._default_timeout_ms / 1000).until(_first_displayed)
            element.click()
        except TimeoutException as exc:
            raise WaitTimeout(f"no visible element for {selector}") from exc
        except WebDriverException as exc:
            raise BrowserActionError(f"click {selector} failed: {exc.msg}") from exc

    def option_labels(self, selector: str) -> List[str]:
        element = self._find(selector)
        try:
            return [option.text.strip() for option in Select(element).options]
        except WebDriverException as exc:
            raise BrowserActionError(f"reading options of {selector} failed: {exc.msg}") from exc

    def select_option(self, selector: str, label: str) -> None:
        element = self._find(selector)
        try:
            Select(element).select_by_visible_text(label)
        except WebDriverException as exc:
            raise BrowserActionError(f"select {label!r} in {selector} failed: {exc.msg}") from exc

    def content(self) -> str:
        try:
            return self._driver.page_source
        except WebDriverException as exc:
            raise BrowserActionError(f"reading page content failed: {exc.msg}") from exc


__all__ = ["make_driver", "SeleniumPage"]
