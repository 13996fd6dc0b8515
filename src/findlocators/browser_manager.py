from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from playwright.sync_api import Error as PlaywrightError

from .highlight_session import HighlightSession, LocatorTestOutcome, LocatorTester
from .locator_generator import find_locators
from .models import LocatorCapture, Rect, ResolutionFailure
from .resolver import resolve_locator
from .runtime_checks import INSTALL_HINT, is_closed_target_error, is_missing_browser_error, normalize_url
from .scheduler import TaskScheduler
from .settings import InspectorSettings

if TYPE_CHECKING:
    from playwright.sync_api import Browser, BrowserContext, ElementHandle, Page, Playwright

StatusCallback = Callable[[str], None]
RectCallback = Callable[[Rect], None]


class BrowserManager:
    def __init__(
        self,
        settings: InspectorSettings | None = None,
        on_status: StatusCallback | None = None,
        on_rect: RectCallback | None = None,
    ) -> None:
        self.settings = settings or InspectorSettings()
        self.logger = logging.getLogger("findlocators.browser")
        self._on_status = on_status or (lambda message: self.logger.info(message))
        self._on_rect = on_rect or (lambda _rect: None)
        self.session = HighlightSession()
        self.scheduler = TaskScheduler()

        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None
        self._tester: LocatorTester | None = None

    def __enter__(self) -> BrowserManager:
        return self

    def __exit__(self, *_exc: object) -> None:
        self.shutdown()

    @property
    def page(self) -> Page | None:
        return self._page

    def start(self) -> bool:
        if self._browser:
            return True
        from playwright.sync_api import sync_playwright

        self._playwright = sync_playwright().start()
        return self._ensure_browser()

    def open(self, raw_url: str) -> bool:
        url = normalize_url(raw_url)
        if not url:
            self._on_status("Please enter a URL.")
            return False
        if not self._ensure_browser():
            return False

        self._close_page_and_context()
        try:
            self._context = self._new_context()
        except PlaywrightError as exc:
            if not is_closed_target_error(exc):
                self._on_status(f"Failed to create browser context: {exc}")
                return False
            self._on_status("Browser was closed. Relaunching...")
            self._browser = None
            if not self._ensure_browser():
                return False
            self._context = self._new_context()

        self._page = self._context.new_page()
        self.scheduler.cancel_all()
        self.session = HighlightSession()
        self._tester = LocatorTester(
            self._page,
            scheduler=self.scheduler,
            settings=self.settings,
            on_rect=self._on_rect,
            on_error=self._on_status,
        )
        self._on_status(f"Opening {url}")
        try:
            self._page.goto(url, wait_until="domcontentloaded", timeout=self.settings.navigation_timeout_ms)
        except PlaywrightError as exc:
            self._on_status(f"Navigation failed: {exc}")
            return False
        self.logger.info("Page ready: %s (%s)", self._page.title(), self._page.url)
        return True

    def pick_element(self, target_selector: str) -> ElementHandle | None:
        if not self._page:
            self._on_status("Open a page first.")
            return None
        result = resolve_locator(self._page, "css", target_selector)
        if isinstance(result, ResolutionFailure):
            self._on_status(result.message)
            return None
        return result

    def find_locators(self, target_selector: str) -> LocatorCapture | None:
        element = self.pick_element(target_selector)
        if element is None or not self._page:
            return None
        try:
            return find_locators(self._page, element)
        finally:
            element.dispose()

    def test_locator(self, strategy: str, value: str) -> LocatorTestOutcome:
        if not self._tester:
            self._on_status("Open a page first.")
            return LocatorTestOutcome(accepted=False)
        outcome = self._tester.test_locator(self.session, strategy, value)
        if outcome.found:
            self._tester.wait_until_idle(self.session)
        return outcome

    def shutdown(self) -> None:
        self.scheduler.cancel_all()
        self._close_page_and_context()
        if self._browser:
            try:
                self._browser.close()
            except PlaywrightError as exc:
                self.logger.debug("Browser close failed: %s", exc)
            self._browser = None
        if self._playwright:
            self._playwright.stop()
            self._playwright = None

    def _new_context(self) -> BrowserContext:
        if not self._browser:
            raise RuntimeError("Browser is not running.")
        return self._browser.new_context(
            viewport={"width": self.settings.viewport_width, "height": self.settings.viewport_height}
        )

    def _ensure_browser(self) -> bool:
        if self._browser and self._browser.is_connected():
            return True
        if not self._playwright:
            self._on_status("Playwright is not started.")
            return False
        self._browser = None
        try:
            self._browser = self._playwright.chromium.launch(headless=self.settings.headless)
            return True
        except PlaywrightError as exc:
            if is_missing_browser_error(exc):
                self._on_status(f"Chromium not installed. {INSTALL_HINT}")
                return False
            self._on_status(f"Failed to launch Chromium: {exc}")
            return False

    def _close_page_and_context(self) -> None:
        self._tester = None
        if self._page:
            try:
                self._page.close()
            except PlaywrightError as exc:
                self.logger.debug("Page close failed: %s", exc)
        self._page = None

        if self._context:
            try:
                self._context.close()
            except PlaywrightError as exc:
                self.logger.debug("Context close failed: %s", exc)
        self._context = None
