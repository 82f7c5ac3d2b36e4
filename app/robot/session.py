"""Browser session lifecycle: launch with the broker extension, guaranteed close."""
from __future__ import annotations

import _thread
import signal
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from playwright.sync_api import sync_playwright

from . import config
from .browser import BrowserPage, PlaywrightPage
from .errors import SessionError
from .logging_utils import _robot_event
from .utils import log_line, short_error_message


@dataclass
class BrowserHandle:
    page: BrowserPage
    close: Callable[[], None]


Launcher = Callable[[Path, Path], BrowserHandle]


def _extension_args(extension_path: Path) -> list[str]:
    ext = str(Path(extension_path).resolve())
    return [
        f"--disable-extensions-except={ext}",
        f"--load-extension={ext}",
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--start-maximized",
    ]


def launch_playwright(extension_path: Path, profile_dir: Path) -> BrowserHandle:
    """Start a persistent Chromium context with the extension loaded."""

    pw = sync_playwright().start()
    options: Dict[str, Any] = {
        "headless": config.HEADLESS,
        "args": _extension_args(extension_path),
        "permissions": list(config.CLIPBOARD_PERMISSIONS),
        "user_agent": config.USER_AGENT,
        "locale": config.LOCALE,
        "timezone_id": config.TIMEZONE_ID,
    }
    if config.CHROMIUM_BINARY:
        options["executable_path"] = config.CHROMIUM_BINARY
    try:
        context = pw.chromium.launch_persistent_context(str(profile_dir), **options)
    except Exception:
        pw.stop()
        raise

    # A persistent profile usually restores one blank tab; reuse it.
    pages = context.pages
    page = pages[0] if pages else context.new_page()

    def _close() -> None:
        try:
            context.close()
        finally:
            pw.stop()

    return BrowserHandle(
        page=PlaywrightPage(page, default_timeout_ms=config.NAVIGATION_TIMEOUT_MS),
        close=_close,
    )


def launch_selenium(extension_path: Path, profile_dir: Path) -> BrowserHandle:
    """Start Chrome through Selenium with the same profile and extension."""

    from .selenium_client import SeleniumPage, make_driver

    driver = make_driver(extension_path, profile_dir)
    return BrowserHandle(
        page=SeleniumPage(driver, default_timeout_ms=config.NAVIGATION_TIMEOUT_MS),
        close=driver.quit,
    )


LAUNCHERS: Dict[str, Launcher] = {
    "playwright": launch_playwright,
    "selenium": launch_selenium,
}


class SessionManager:
    """Owns one browser session and guarantees it is closed exactly once.

    ``init()`` hooks SIGINT/SIGTERM and uncaught exceptions so that they run
    ``close()`` before the process goes down. ``open()`` and ``close()`` may
    be used directly or through ``with SessionManager() as session``.
    """

    def __init__(self, *, backend: Optional[str] = None, launcher: Optional[Launcher] = None) -> None:
        self.backend = (backend or config.BROWSER_BACKEND).strip().lower()
        if launcher is None:
            if self.backend not in LAUNCHERS:
                raise ValueError(f"Unsupported browser backend: {self.backend!r}")
            launcher = LAUNCHERS[self.backend]
        self._launcher = launcher
        self._handle: Optional[BrowserHandle] = None
        self._lock = threading.RLock()
        self._hooks_installed = False
        self._previous_signal_handlers: Dict[int, Any] = {}
        self._previous_excepthook: Optional[Callable[..., Any]] = None
        self._previous_thread_excepthook: Optional[Callable[..., Any]] = None
        self.thread_failure: Optional[str] = None
        self.close_count = 0

    def __enter__(self) -> "SessionManager":
        self.init()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
        self.restore_handlers()

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    @property
    def page(self) -> BrowserPage:
        handle = self._handle
        if handle is None:
            raise SessionError("browser session is not open")
        return handle.page

    def init(self) -> None:
        if self._hooks_installed:
            return
        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                self._previous_signal_handlers[signum] = signal.getsignal(signum)
                signal.signal(signum, self._handle_signal)
            except ValueError:
                # signal.signal only works from the main thread.
                log_line(f"[SESSION][WARN] Cannot install handler for signal {signum} outside the main thread")
                self._previous_signal_handlers.pop(signum, None)
        self._previous_excepthook = sys.excepthook
        sys.excepthook = self._handle_uncaught
        self._previous_thread_excepthook = threading.excepthook
        threading.excepthook = self._handle_thread_exception
        self._hooks_installed = True

    def restore_handlers(self) -> None:
        if not self._hooks_installed:
            return
        for signum, handler in self._previous_signal_handlers.items():
            try:
                signal.signal(signum, handler)
            except ValueError:
                continue
        self._previous_signal_handlers.clear()
        if self._previous_excepthook is not None:
            sys.excepthook = self._previous_excepthook
        if self._previous_thread_excepthook is not None:
            threading.excepthook = self._previous_thread_excepthook
        self._hooks_installed = False

    def open(self, extension_path: Path, profile_dir: Path) -> BrowserPage:
        with self._lock:
            if self._handle is not None:
                log_line("[SESSION] Browser already open; reusing active page")
                return self._handle.page

            extension_path = Path(extension_path)
            profile_dir = Path(profile_dir)
            _robot_event(
                "session",
                phase="open",
                backend=self.backend,
                extension_path=str(extension_path),
                profile_dir=str(profile_dir),
            )
            try:
                profile_dir.mkdir(parents=True, exist_ok=True)
                self._handle = self._launcher(extension_path, profile_dir)
            except Exception as exc:  # noqa: BLE001
                _robot_event("error", phase="open", backend=self.backend, error=short_error_message(exc))
                raise SessionError(f"failed to launch browser: {short_error_message(exc)}") from exc
            return self._handle.page

    def close(self) -> None:
        with self._lock:
            handle, self._handle = self._handle, None
        if handle is None:
            return
        log_line("Closing browser...")
        try:
            handle.close()
            log_line("Browser closed")
        except Exception as exc:  # noqa: BLE001
            log_line(f"[SESSION][WARN] Error while closing browser: {short_error_message(exc)}")
        finally:
            self.close_count += 1

    def _handle_signal(self, signum: int, frame: Any) -> None:
        if self.thread_failure is not None:
            # Raised by _handle_thread_exception through interrupt_main.
            log_line(f"[SESSION] Stopping after failure in thread: {self.thread_failure}")
            self.close()
            raise SystemExit(1)
        log_line(f"[SESSION] Received signal {signal.Signals(signum).name}; shutting down")
        self.close()
        raise SystemExit(0)

    def _handle_uncaught(self, exc_type, exc, tb) -> None:
        log_line(f"[SESSION] Uncaught exception: {exc_type.__name__}: {exc}")
        self.close()
        previous = self._previous_excepthook or sys.__excepthook__
        previous(exc_type, exc, tb)

    def _handle_thread_exception(self, args: threading.ExceptHookArgs) -> None:
        self.thread_failure = (
            f"{getattr(args.thread, 'name', '?')}: {args.exc_type.__name__}: {args.exc_value}"
        )
        log_line(f"[SESSION] Uncaught exception in thread {self.thread_failure}")
        self.close()
        previous = self._previous_thread_excepthook or threading.__excepthook__
        previous(args)
        # _handle_signal sees thread_failure and exits with status 1.
        _thread.interrupt_main()


__all__ = [
    "BrowserHandle",
    "SessionManager",
    "launch_playwright",
    "launch_selenium",
]
