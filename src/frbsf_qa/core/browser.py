"""Browser management for Playwright-based testing.

One :class:`BrowserManager` owns the browser process for the whole run and at
most one context and page at a time. Contexts and pages are recreated per
scenario; the browser process is launched once and reused.
"""

import asyncio
import logging
import re
import sys
import time
from datetime import datetime, timezone
from typing import List, Optional
from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeout,
    async_playwright,
)
from .config import BrowserType, EnvironmentConfig
from .errors import CaptureError, LaunchError, NavigationError, NoContextError
from .log import log_page_action, log_performance, log_screenshot

logger = logging.getLogger(__name__)

NETWORK_IDLE_TIMEOUT_MS = 10_000
CONTEXT_CLOSE_TIMEOUT_S = 1.0

CHROMIUM_STABILITY_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-web-security",
    "--allow-running-insecure-content",
    "--disable-features=VizDisplayCompositor",
]

# Headed Chromium on Windows needs these to render reliably
WINDOWS_HEADED_ARGS = [
    "--disable-gpu-sandbox",
    "--disable-software-rasterizer",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
]


def launch_args(engine: BrowserType, headless: bool, platform: str = sys.platform) -> List[str]:
    """Stability flags for the engine. Only Chromium understands Chromium switches."""
    if engine != BrowserType.CHROMIUM:
        return []
    args = list(CHROMIUM_STABILITY_ARGS)
    if platform == "win32" and not headless:
        args.extend(WINDOWS_HEADED_ARGS)
    return args


def artifact_filename(label: str, ext: str, now: Optional[datetime] = None) -> str:
    """Build ``<label>-<ISO timestamp>.<ext>`` with ``:`` and ``.`` replaced by ``-``."""
    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    stamp = stamp.replace("+00:00", "Z")
    stamp = re.sub(r"[:.]", "-", stamp)
    safe_label = re.sub(r"[\s/\\]+", "-", label.strip()) or "artifact"
    return f"{safe_label}-{stamp}.{ext}"


class BrowserManager:
    """Manages the Playwright browser, context and page lifecycle."""

    def __init__(self, config: EnvironmentConfig):
        self.config = config
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    @property
    def engine(self) -> BrowserType:
        return self.config.browser.engine

    @property
    def browser(self) -> Optional[Browser]:
        return self._browser

    @property
    def context(self) -> Optional[BrowserContext]:
        return self._context

    @property
    def page(self) -> Optional[Page]:
        return self._page

    async def launch_browser(self) -> Browser:
        """Launch the configured browser once; later calls return the same instance."""
        if self._browser:
            return self._browser

        options = self.config.browser
        logger.info(
            f"Launching {options.engine.value} browser | headless={options.headless} "
            f"viewport={options.viewport.width}x{options.viewport.height}"
        )
        try:
            if self._playwright is None:
                self._playwright = await async_playwright().start()
            launchers = {
                BrowserType.CHROMIUM: self._playwright.chromium,
                BrowserType.FIREFOX: self._playwright.firefox,
                BrowserType.WEBKIT: self._playwright.webkit,
            }
            launcher = launchers.get(options.engine, self._playwright.chromium)
            self._browser = await launcher.launch(
                headless=options.headless,
                slow_mo=options.slow_mo,
                args=launch_args(options.engine, options.headless),
            )
        except PlaywrightError as e:
            logger.error(f"Failed to launch browser: {e}")
            raise LaunchError(f"Could not launch {options.engine.value}: {e}") from e

        logger.info("Browser launched successfully")
        return self._browser

    async def create_context(self) -> BrowserContext:
        """Return the current context, creating it (and the browser) when missing."""
        if not self._browser:
            await self.launch_browser()
        if self._context:
            return self._context

        options = self.config.browser
        viewport = options.viewport.as_dict()
        logger.info(
            f"Creating browser context | viewport={viewport} video={options.video} "
            f"har={options.record_har}"
        )
        context_options = {"viewport": viewport, "ignore_https_errors": True}
        if options.video:
            context_options["record_video_dir"] = str(self.config.video_dir)
            context_options["record_video_size"] = viewport
        if options.record_har:
            context_options["record_har_path"] = str(self.config.har_path)

        try:
            self._context = await self._browser.new_context(**context_options)
        except PlaywrightError as e:
            logger.error(f"Failed to create browser context: {e}")
            raise

        self._context.set_default_timeout(options.timeout)
        self._context.set_default_navigation_timeout(self.config.page_load_timeout)
        logger.info("Browser context created successfully")
        return self._context

    async def create_page(self) -> Page:
        """Return the open page, or open a new one with console/error observers."""
        if not self._context:
            await self.create_context()
        if self._page and not self._page.is_closed():
            return self._page

        logger.info("Creating new page")
        try:
            self._page = await self._context.new_page()
        except PlaywrightError as e:
            logger.error(f"Failed to create page: {e}")
            raise

        self._page.set_default_timeout(self.config.element_timeout)
        self._page.set_default_navigation_timeout(self.config.page_load_timeout)
        self._page.on("console", self._on_console)
        self._page.on("pageerror", self._on_page_error)
        self._page.on("requestfailed", self._on_request_failed)
        logger.info("Page created successfully")
        return self._page

    async def get_current_page(self) -> Page:
        if not self._page or self._page.is_closed():
            return await self.create_page()
        return self._page

    def _on_console(self, msg):
        if msg.type == "error":
            logger.error(f"Console error: {msg.text}")
        elif self.config.debug:
            logger.debug(f"Console {msg.type}: {msg.text}")

    def _on_page_error(self, error):
        logger.error(f"Page error occurred: {error}")

    def _on_request_failed(self, request):
        logger.warning(f"Request failed: {request.url} - {request.failure}")

    async def close_page(self):
        if self._page and not self._page.is_closed():
            logger.info("Closing page")
            await self._page.close()
        self._page = None

    async def close_context(self):
        """Close the context without letting a hung or dead context block teardown."""
        if not self._context:
            return
        try:
            logger.info("Closing browser context")
            await asyncio.wait_for(self._context.close(), timeout=CONTEXT_CLOSE_TIMEOUT_S)
        except asyncio.TimeoutError:
            logger.warning(f"Context close did not finish within {CONTEXT_CLOSE_TIMEOUT_S}s, moving on")
        except PlaywrightError as e:
            logger.info(f"Context already closed or error during close: {e}")
        finally:
            self._context = None
            self._page = None

    async def close_browser(self):
        """Close the browser and stop the Playwright driver."""
        try:
            if self._browser:
                logger.info("Closing browser")
                await self._browser.close()
        finally:
            self._browser = None
            self._context = None
            self._page = None
            if self._playwright:
                await self._playwright.stop()
                self._playwright = None

    async def take_screenshot(self, name: str) -> str:
        """Capture a full-page screenshot and return its path."""
        page = await self.get_current_page()
        path = self.config.screenshot_dir / artifact_filename(name, "png")
        try:
            await page.screenshot(path=str(path), full_page=True)
        except PlaywrightError as e:
            logger.error(f"Failed to take screenshot: {e}")
            raise CaptureError(f"Screenshot '{name}' failed: {e}") from e
        log_screenshot(str(path), logger)
        return str(path)

    async def capture_trace(self, name: str) -> str:
        """Start tracing on the current context and return where it will be saved."""
        if not self._context:
            raise NoContextError("Browser context not available for trace capture")

        path = self.config.trace_dir / artifact_filename(name, "zip")
        try:
            await self._context.tracing.start(screenshots=True, snapshots=True, sources=True)
        except PlaywrightError as e:
            logger.error(f"Failed to start trace capture: {e}")
            raise CaptureError(f"Trace '{name}' could not start: {e}") from e
        logger.info(f"Trace capture started for: {name}")
        return str(path)

    async def stop_trace(self, path: str):
        if not self._context:
            raise NoContextError("Browser context not available for trace stop")
        try:
            await self._context.tracing.stop(path=path)
        except PlaywrightError as e:
            logger.error(f"Failed to stop trace capture: {e}")
            raise CaptureError(f"Trace could not be saved to {path}: {e}") from e
        logger.info(f"Trace saved to: {path}")

    async def navigate_to_url(self, url: str) -> float:
        """Navigate the current page and return the DOM-ready time in ms."""
        page = await self.get_current_page()
        start = time.perf_counter()
        log_page_action("BrowserManager", f"Navigating to: {url}", log=logger)
        try:
            await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self.config.page_load_timeout,
            )
        except PlaywrightError as e:
            logger.error(f"Failed to navigate to {url}: {e}")
            raise NavigationError(url, str(e)) from e

        duration = (time.perf_counter() - start) * 1000
        log_performance(f"Navigation to {url}", duration, logger)
        try:
            await page.wait_for_load_state("networkidle", timeout=NETWORK_IDLE_TIMEOUT_MS)
        except PlaywrightTimeout:
            logger.warning(f"Network did not go idle after navigating to {url}, continuing...")
        return duration

    async def wait_for_page_load(self):
        page = await self.get_current_page()
        try:
            await page.wait_for_load_state("domcontentloaded")
            await page.wait_for_load_state("networkidle", timeout=NETWORK_IDLE_TIMEOUT_MS)
            logger.info("Page loaded successfully")
        except PlaywrightTimeout as e:
            logger.warning(f"Page load wait timed out, continuing... ({e})")

    async def refresh_page(self):
        page = await self.get_current_page()
        log_page_action("BrowserManager", "Refreshing page", log=logger)
        await page.reload(wait_until="domcontentloaded")
        await self.wait_for_page_load()
