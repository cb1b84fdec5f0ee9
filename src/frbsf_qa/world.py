"""
Per-scenario world: the object every step of one scenario works through.

It holds the current page, the page objects bound to it, free-form test data,
cross-step scenario context, captured artifact paths and scenario metadata.
A new world is created for every scenario, so nothing here outlives one.
"""

import asyncio
import json
import logging
import time
from enum import Enum
from typing import Any, Dict, List, Optional
from playwright.async_api import Error as PlaywrightError, Page
from .core.browser import BrowserManager
from .core.config import VIEWPORTS, EnvironmentConfig, ViewportType
from .core.log import log_performance, log_screenshot
from .pages import BasePage, HomePage, NewsMediaPage, ResearchInsightsPage, SearchResultsPage

logger = logging.getLogger(__name__)

CURRENT_PAGE_KEY = "currentPage"


class PageIdentity(str, Enum):
    """Which page object describes the page a scenario is currently on."""

    HOME = "home"
    SEARCH_RESULTS = "search-results"
    NEWS_MEDIA = "news-media"
    RESEARCH_INSIGHTS = "research-insights"


class ScenarioWorld:
    """Scenario-scoped state and helpers shared by step code."""

    def __init__(self, browser_manager: BrowserManager, config: EnvironmentConfig):
        self.browser_manager = browser_manager
        self.config = config
        self.page: Optional[Page] = None

        self.home_page: Optional[HomePage] = None
        self.search_results_page: Optional[SearchResultsPage] = None
        self.news_media_page: Optional[NewsMediaPage] = None
        self.research_insights_page: Optional[ResearchInsightsPage] = None

        self.test_data: Dict[str, Any] = {}
        self.scenario_context: Dict[str, Any] = {}
        self.screenshots: List[str] = []
        self.traces: List[str] = []
        self.active_trace: Optional[str] = None

        self.current_scenario: Optional[str] = None
        self.current_step: Optional[str] = None
        self.test_start_time: Optional[float] = None

    # ------------------------------------------------------------------
    # Page objects
    # ------------------------------------------------------------------

    async def initialize_page_objects(self):
        """Bind fresh page objects to the current browser page."""
        try:
            self.page = await self.browser_manager.get_current_page()
        except Exception as e:
            logger.error(f"Failed to initialize page objects: {e}")
            raise
        self.home_page = HomePage(self.page, self.config)
        self.search_results_page = SearchResultsPage(self.page, self.config)
        self.news_media_page = NewsMediaPage(self.page, self.config)
        self.research_insights_page = ResearchInsightsPage(self.page, self.config)
        logger.info("Page objects initialized successfully")

    def page_object(self, identity: PageIdentity) -> Optional[BasePage]:
        pages = {
            PageIdentity.HOME: self.home_page,
            PageIdentity.SEARCH_RESULTS: self.search_results_page,
            PageIdentity.NEWS_MEDIA: self.news_media_page,
            PageIdentity.RESEARCH_INSIGHTS: self.research_insights_page,
        }
        return pages[identity]

    async def _require_page_objects(self):
        if self.home_page is None or self.page is None or self.page.is_closed():
            await self.initialize_page_objects()

    # ------------------------------------------------------------------
    # Scenario-scoped storage
    # ------------------------------------------------------------------

    def cleanup_test_data(self):
        self.test_data.clear()
        self.scenario_context.clear()
        self.screenshots = []
        self.traces = []
        self.active_trace = None
        self.current_scenario = None
        self.current_step = None
        self.test_start_time = None
        logger.info("Test data cleaned up")

    def is_pristine(self) -> bool:
        return not (
            self.test_data
            or self.scenario_context
            or self.screenshots
            or self.traces
            or self.test_start_time is not None
        )

    def set_test_data(self, key: str, value: Any):
        self.test_data[key] = value
        logger.debug(f"Test data set: {key} = {_preview(value)}")

    def get_test_data(self, key: str, default: Any = None) -> Any:
        value = self.test_data.get(key, default)
        logger.debug(f"Test data retrieved: {key} = {_preview(value)}")
        return value

    def set_scenario_context(self, key: str, value: Any):
        self.scenario_context[key] = value
        logger.debug(f"Scenario context set: {key} = {_preview(value)}")

    def get_scenario_context(self, key: str, default: Any = None) -> Any:
        value = self.scenario_context.get(key, default)
        logger.debug(f"Scenario context retrieved: {key} = {_preview(value)}")
        return value

    # ------------------------------------------------------------------
    # Artifacts
    # ------------------------------------------------------------------

    async def capture_screenshot(self, name: Optional[str] = None) -> str:
        screenshot_name = name or f"screenshot-{int(time.time() * 1000)}"
        try:
            path = await self.browser_manager.take_screenshot(screenshot_name)
        except Exception as e:
            logger.error(f"Failed to capture screenshot: {e}")
            raise
        self.screenshots.append(path)
        log_screenshot(path, logger)
        return path

    async def capture_trace(self, name: Optional[str] = None) -> str:
        trace_name = name or f"trace-{int(time.time() * 1000)}"
        try:
            path = await self.browser_manager.capture_trace(trace_name)
        except Exception as e:
            logger.error(f"Failed to start trace capture: {e}")
            raise
        self.traces.append(path)
        self.active_trace = path
        logger.info(f"Trace capture started: {path}")
        return path

    async def stop_trace(self, path: str):
        try:
            await self.browser_manager.stop_trace(path)
        except Exception as e:
            logger.error(f"Failed to stop trace capture: {e}")
            raise
        if self.active_trace == path:
            self.active_trace = None
        logger.info(f"Trace saved: {path}")

    # ------------------------------------------------------------------
    # Navigation helpers used by step code
    # ------------------------------------------------------------------

    async def navigate_to_home_page(self):
        await self._require_page_objects()
        await self.home_page.navigate_to_home_page()
        self.set_scenario_context(CURRENT_PAGE_KEY, PageIdentity.HOME)

    async def perform_search(self, search_term: str):
        await self._require_page_objects()
        await self.home_page.perform_search(search_term)
        self.set_scenario_context("searchTerm", search_term)
        self.set_scenario_context(CURRENT_PAGE_KEY, PageIdentity.SEARCH_RESULTS)

    async def navigate_to_news_page(self):
        await self._require_page_objects()
        await self.news_media_page.navigate_to_news_page()
        self.set_scenario_context(CURRENT_PAGE_KEY, PageIdentity.NEWS_MEDIA)

    async def navigate_to_research_page(self):
        await self._require_page_objects()
        await self.research_insights_page.navigate_to_research_page()
        self.set_scenario_context(CURRENT_PAGE_KEY, PageIdentity.RESEARCH_INSIGHTS)

    async def validate_current_page_loaded(self) -> bool:
        """Ask the page object for the current page whether its landmarks are present."""
        current = self.get_scenario_context(CURRENT_PAGE_KEY)
        try:
            identity = PageIdentity(current)
        except ValueError:
            logger.warning(f"Unknown page type: {current}")
            return False

        page_object = self.page_object(identity)
        if page_object is None:
            logger.warning(f"Page objects not initialized; cannot validate {identity.value}")
            return False
        return await page_object.is_page_loaded()

    # ------------------------------------------------------------------
    # Performance measurement
    # ------------------------------------------------------------------

    def start_performance_measurement(self):
        self.test_start_time = time.perf_counter()
        logger.info("Performance measurement started")

    def end_performance_measurement(self, action_name: str) -> float:
        """Elapsed ms since the matching start; 0 when no measurement was started."""
        if self.test_start_time is None:
            logger.warning("Performance measurement was not started")
            return 0
        duration = (time.perf_counter() - self.test_start_time) * 1000
        self.test_start_time = None
        log_performance(action_name, duration, logger)
        return duration

    # ------------------------------------------------------------------
    # Viewport
    # ------------------------------------------------------------------

    async def _set_viewport(self, viewport_type: ViewportType):
        if self.page is None or self.page.is_closed():
            self.page = await self.browser_manager.get_current_page()
        await self.page.set_viewport_size(VIEWPORTS[viewport_type].as_dict())
        self.set_scenario_context("viewport", viewport_type.value)
        logger.info(f"Viewport set to {viewport_type.value}")

    async def set_mobile_viewport(self):
        await self._set_viewport(ViewportType.MOBILE)

    async def set_tablet_viewport(self):
        await self._set_viewport(ViewportType.TABLET)

    async def set_desktop_viewport(self):
        await self._set_viewport(ViewportType.DESKTOP)

    # ------------------------------------------------------------------
    # Failure handling
    # ------------------------------------------------------------------

    async def handle_test_failure(self, error: BaseException, step_name: Optional[str] = None):
        """Collect what is still collectable after a failure; never raises."""
        step = step_name or self.current_step or "unknown"
        logger.error(f"Test failure in step: {step} | {type(error).__name__}: {error}")

        try:
            await self.capture_screenshot(f"failure-{step}-{int(time.time() * 1000)}")
        except Exception as e:
            logger.error(f"Failed to capture failure screenshot: {e}")

        if self.page is not None:
            try:
                title = await self.page.title()
                logger.error(f"Failure occurred on page: {self.page.url} ({title})")
            except PlaywrightError as e:
                logger.error(f"Could not read page state at failure: {e}")

        if self.scenario_context:
            try:
                dump = json.dumps(self.scenario_context, default=str)
            except (TypeError, ValueError):
                dump = repr(self.scenario_context)
            logger.error(f"Scenario context at failure: {dump}")

    # ------------------------------------------------------------------
    # Browser helpers
    # ------------------------------------------------------------------

    async def refresh_current_page(self):
        if self.page:
            await self.page.reload(wait_until="domcontentloaded")
            logger.info("Page refreshed")

    async def go_back(self):
        if self.page:
            await self.page.go_back(wait_until="domcontentloaded")
            logger.info("Navigated back")

    async def go_forward(self):
        if self.page:
            await self.page.go_forward(wait_until="domcontentloaded")
            logger.info("Navigated forward")

    async def wait_for_page_load(self):
        await self.browser_manager.wait_for_page_load()

    async def wait_for_timeout(self, milliseconds: int):
        await asyncio.sleep(milliseconds / 1000)
        logger.info(f"Waited for {milliseconds}ms")


def _preview(value: Any) -> str:
    try:
        text = json.dumps(value, default=str)
    except (TypeError, ValueError):
        text = repr(value)
    return text if len(text) <= 200 else text[:200] + "..."
