"""
Element interaction, wait and assertion vocabulary shared by all page modules.

Page modules hold a :class:`PageActions` and keep only locators and domain
checks; waiting, timeouts and failure translation live here. Hard failures
raise framework errors. The network-idle part of a page-load wait is best
effort: some pages never go idle, so that timeout is logged and ignored.
"""

import logging
import time
from pathlib import Path
from typing import List, Optional, Pattern, Union
from playwright.async_api import (
    Error as PlaywrightError,
    Locator,
    Page,
    TimeoutError as PlaywrightTimeout,
    expect,
)
from ..core.browser import NETWORK_IDLE_TIMEOUT_MS, artifact_filename
from ..core.config import EnvironmentConfig
from ..core.errors import CaptureError, NavigationError, PageAssertionError, WaitTimeoutError
from ..core.log import log_assertion, log_page_action, log_performance, log_screenshot

logger = logging.getLogger(__name__)

UrlPattern = Union[str, Pattern[str]]


class PageActions:
    """Uniform, bounded operations against one Playwright page."""

    def __init__(self, page: Page, config: EnvironmentConfig, owner: str = "Page"):
        self.page = page
        self.config = config
        self.owner = owner

    def _action(self, action: str, element: Optional[str] = None):
        log_page_action(self.owner, action, element, log=logger)

    def resolve_url(self, url: str) -> str:
        if url.startswith(("http://", "https://")):
            return url
        return f"{self.config.base_url.rstrip('/')}/{url.lstrip('/')}"

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def navigate_to(self, url: str):
        """Navigate to an absolute or base-relative URL and wait for the page to load."""
        full_url = self.resolve_url(url)
        self._action(f"Navigating to: {full_url}")
        try:
            await self.page.goto(
                full_url,
                wait_until="domcontentloaded",
                timeout=self.config.page_load_timeout,
            )
        except PlaywrightError as e:
            logger.error(f"{self.owner}: navigation to {full_url} failed: {e}")
            raise NavigationError(full_url, str(e)) from e
        await self.wait_for_page_load()

    async def wait_for_page_load(self):
        """Wait for DOM-ready, then up to 10s for network idle without failing on the latter."""
        try:
            await self.page.wait_for_load_state(
                "domcontentloaded", timeout=self.config.page_load_timeout
            )
        except PlaywrightTimeout as e:
            raise WaitTimeoutError(
                self.page.url, self.config.page_load_timeout, "DOM content loaded"
            ) from e
        try:
            await self.page.wait_for_load_state("networkidle", timeout=NETWORK_IDLE_TIMEOUT_MS)
            logger.info(f"{self.owner}: Page loaded successfully")
        except PlaywrightTimeout:
            logger.warning(f"{self.owner}: Page load timeout, continuing...")

    async def refresh_page(self):
        self._action("Refreshing page")
        await self.page.reload(wait_until="domcontentloaded")
        await self.wait_for_page_load()

    async def get_current_url(self) -> str:
        return self.page.url

    async def get_page_title(self) -> str:
        title = await self.page.title()
        self._action(f"Page title: {title}")
        return title

    # ------------------------------------------------------------------
    # Element lookup and interaction
    # ------------------------------------------------------------------

    async def find_element(self, selector: str, timeout: Optional[int] = None) -> Locator:
        """Return a lazy locator; when ``timeout`` is given, block until a match is attached."""
        element = self.page.locator(selector)
        if timeout:
            try:
                await element.first.wait_for(state="attached", timeout=timeout)
            except PlaywrightTimeout as e:
                raise WaitTimeoutError(selector, timeout, "element") from e
        return element

    async def find_elements(self, selector: str) -> Locator:
        return self.page.locator(selector)

    async def _visible(self, selector: str, timeout: Optional[int] = None) -> Locator:
        element = await self.find_element(selector)
        target = element.first
        wait_ms = timeout or self.config.element_timeout
        try:
            await target.wait_for(state="visible", timeout=wait_ms)
        except PlaywrightTimeout as e:
            raise WaitTimeoutError(selector, wait_ms, "visible element") from e
        return target

    async def click(self, selector: str, timeout: Optional[int] = None, force: bool = False):
        self._action("Clicking element", selector)
        target = await self._visible(selector, timeout)
        await target.click(force=force)

    async def double_click(self, selector: str):
        self._action("Double clicking element", selector)
        target = await self._visible(selector)
        await target.dblclick()

    async def hover(self, selector: str):
        self._action("Hovering over element", selector)
        target = await self._visible(selector)
        await target.hover()

    async def type_text(
        self, selector: str, text: str, clear: bool = False, delay: Optional[int] = None
    ):
        """Fill an input; with ``delay`` the text is typed key by key instead."""
        self._action("Typing text into element", selector)
        target = await self._visible(selector)
        if clear:
            await target.clear()
        if delay:
            await target.press_sequentially(text, delay=delay)
        else:
            await target.fill(text, timeout=self.config.element_timeout)

    async def press_key(self, key: str, selector: Optional[str] = None):
        self._action(f"Pressing key: {key}", selector)
        if selector:
            target = await self._visible(selector)
            await target.press(key)
        else:
            await self.page.keyboard.press(key)

    async def select_option(self, selector: str, option: Union[str, List[str]]):
        self._action("Selecting option in", selector)
        target = await self._visible(selector)
        await target.select_option(option)

    async def upload_file(self, selector: str, file_path: Union[str, Path, List[Union[str, Path]]]):
        self._action("Uploading file to", selector)
        target = await self._visible(selector)
        await target.set_input_files(file_path)

    # ------------------------------------------------------------------
    # Waits
    # ------------------------------------------------------------------

    async def wait_for_element(
        self, selector: str, state: str = "visible", timeout: Optional[int] = None
    ) -> Locator:
        self._action("Waiting for element", selector)
        element = await self.find_element(selector)
        wait_ms = timeout or self.config.element_timeout
        try:
            await element.first.wait_for(state=state, timeout=wait_ms)
        except PlaywrightTimeout as e:
            raise WaitTimeoutError(selector, wait_ms, f"{state} element") from e
        return element

    async def wait_for_text(self, selector: str, text: str, timeout: Optional[int] = None):
        self._action(f'Waiting for text "{text}" in element', selector)
        element = await self.find_element(selector)
        wait_ms = timeout or self.config.element_timeout
        try:
            await expect(element.first).to_contain_text(text, timeout=wait_ms)
        except AssertionError as e:
            raise WaitTimeoutError(selector, wait_ms, f'text "{text}"') from e

    async def wait_for_url(self, pattern: UrlPattern, timeout: Optional[int] = None):
        self._action(f"Waiting for URL pattern: {pattern}")
        wait_ms = timeout or self.config.page_load_timeout
        try:
            await self.page.wait_for_url(pattern, timeout=wait_ms)
        except PlaywrightTimeout as e:
            raise WaitTimeoutError(str(pattern), wait_ms, "URL") from e

    # ------------------------------------------------------------------
    # Assertions
    # ------------------------------------------------------------------

    async def _assert(self, check, description: str, expected=None, actual_getter=None):
        try:
            await check
        except AssertionError as e:
            log_assertion(description, False, logger)
            actual = None
            if actual_getter is not None:
                try:
                    actual = await actual_getter()
                except PlaywrightError:
                    actual = None
            raise PageAssertionError(description, expected, actual) from e
        log_assertion(description, True, logger)

    async def assert_element_visible(self, selector: str, message: Optional[str] = None):
        element = await self.find_element(selector)
        await self._assert(
            expect(element.first).to_be_visible(timeout=self.config.element_timeout),
            message or f"Element {selector} is visible",
        )

    async def assert_element_hidden(self, selector: str, message: Optional[str] = None):
        element = await self.find_element(selector)
        await self._assert(
            expect(element.first).to_be_hidden(timeout=self.config.element_timeout),
            message or f"Element {selector} is hidden",
        )

    async def assert_element_text(
        self, selector: str, expected_text: str, message: Optional[str] = None
    ):
        element = await self.find_element(selector)
        await self._assert(
            expect(element.first).to_contain_text(expected_text, timeout=self.config.element_timeout),
            message or f"Element {selector} contains text: {expected_text}",
            expected_text,
            element.first.text_content,
        )

    async def assert_element_value(
        self, selector: str, expected_value: str, message: Optional[str] = None
    ):
        element = await self.find_element(selector)
        await self._assert(
            expect(element.first).to_have_value(expected_value, timeout=self.config.element_timeout),
            message or f"Element {selector} has value: {expected_value}",
            expected_value,
            element.first.input_value,
        )

    async def assert_page_title(self, expected_title: str, message: Optional[str] = None):
        await self._assert(
            expect(self.page).to_have_title(expected_title, timeout=self.config.element_timeout),
            message or f"Page title is: {expected_title}",
            expected_title,
            self.page.title,
        )

    async def assert_page_url(self, expected_url: UrlPattern, message: Optional[str] = None):
        async def current_url():
            return self.page.url

        await self._assert(
            expect(self.page).to_have_url(expected_url, timeout=self.config.element_timeout),
            message or f"Page URL matches: {expected_url}",
            expected_url,
            current_url,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_element_text(self, selector: str) -> str:
        element = await self.find_element(selector)
        text = (await element.first.text_content()) or ""
        self._action(f"Retrieved text from {selector}: {text.strip()[:100]}")
        return text.strip()

    async def get_element_attribute(self, selector: str, attribute: str) -> Optional[str]:
        element = await self.find_element(selector)
        value = await element.first.get_attribute(attribute)
        self._action(f"Retrieved attribute {attribute} from {selector}: {value}")
        return value

    async def get_element_value(self, selector: str) -> str:
        element = await self.find_element(selector)
        value = await element.first.input_value()
        self._action(f"Retrieved value from {selector}: {value}")
        return value

    async def is_element_visible(self, selector: str) -> bool:
        """True when any element matching ``selector`` is visible."""
        try:
            elements = await self.page.locator(selector).all()
            for element in elements:
                if await element.is_visible():
                    self._action(f"Element {selector} visibility: True")
                    return True
        except PlaywrightError as e:
            self._action(f"Element {selector} visibility check failed: {e}")
            return False
        self._action(f"Element {selector} visibility: False (no visible elements found)")
        return False

    async def is_element_enabled(self, selector: str) -> bool:
        try:
            element = await self.find_element(selector)
            enabled = await element.first.is_enabled(timeout=self.config.element_timeout)
        except PlaywrightError:
            return False
        self._action(f"Element {selector} enabled: {enabled}")
        return enabled

    async def get_element_count(self, selector: str) -> int:
        elements = await self.find_elements(selector)
        count = await elements.count()
        self._action(f"Element count for {selector}: {count}")
        return count

    async def is_element_present(self, selector: str) -> bool:
        try:
            count = await self.get_element_count(selector)
        except PlaywrightError:
            return False
        return count > 0

    # ------------------------------------------------------------------
    # Scrolling, viewport, timing, screenshots
    # ------------------------------------------------------------------

    async def scroll_to_element(self, selector: str):
        self._action("Scrolling to element", selector)
        target = await self._visible(selector)
        await target.scroll_into_view_if_needed()

    async def scroll_to_top(self):
        self._action("Scrolling to top of page")
        await self.page.evaluate("() => window.scrollTo(0, 0)")

    async def scroll_to_bottom(self):
        self._action("Scrolling to bottom of page")
        await self.page.evaluate("() => window.scrollTo(0, document.body.scrollHeight)")

    async def set_viewport(self, width: int, height: int):
        self._action(f"Setting viewport to {width}x{height}")
        await self.page.set_viewport_size({"width": width, "height": height})

    async def measure_page_load_time(self) -> float:
        """Milliseconds from now until the page reports DOM content loaded."""
        start = time.perf_counter()
        await self.page.wait_for_load_state("domcontentloaded")
        load_time = (time.perf_counter() - start) * 1000
        log_performance(f"{self.owner} page load", load_time, logger)
        return load_time

    async def take_screenshot(self, name: Optional[str] = None) -> str:
        label = name or f"{self.owner}-{int(time.time() * 1000)}"
        path = self.config.screenshot_dir / artifact_filename(label, "png")
        try:
            await self.page.screenshot(path=str(path), full_page=True)
        except PlaywrightError as e:
            raise CaptureError(f"Screenshot '{label}' failed: {e}") from e
        log_screenshot(str(path), logger)
        return str(path)
