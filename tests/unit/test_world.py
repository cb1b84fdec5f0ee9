"""ScenarioWorld: scenario-scoped state, page dispatch and failure handling."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError

from frbsf_qa.core import BrowserManager, CaptureError
from frbsf_qa.pages import HomePage, NewsMediaPage
from frbsf_qa.world import CURRENT_PAGE_KEY, PageIdentity, ScenarioWorld


@pytest.fixture
def browser_manager(page):
    manager = MagicMock(spec=BrowserManager)
    manager.get_current_page = AsyncMock(return_value=page)
    manager.take_screenshot = AsyncMock(return_value="reports/screenshots/shot.png")
    manager.capture_trace = AsyncMock(return_value="reports/traces/trace.zip")
    manager.stop_trace = AsyncMock()
    manager.wait_for_page_load = AsyncMock()
    return manager


@pytest.fixture
def world(browser_manager, config) -> ScenarioWorld:
    return ScenarioWorld(browser_manager, config)


def test_new_world_is_pristine(world):
    assert world.is_pristine()
    assert world.page is None
    assert world.home_page is None


async def test_initialize_page_objects(world, page):
    await world.initialize_page_objects()
    assert world.page is page
    assert isinstance(world.home_page, HomePage)
    assert world.page_object(PageIdentity.NEWS_MEDIA) is world.news_media_page
    assert world.search_results_page.page is page


def test_worlds_do_not_share_state(browser_manager, config):
    first = ScenarioWorld(browser_manager, config)
    second = ScenarioWorld(browser_manager, config)
    first.set_test_data("searchTerm", "inflation")
    first.set_scenario_context("viewport", "mobile")
    assert second.get_test_data("searchTerm") is None
    assert second.get_scenario_context("viewport", "desktop") == "desktop"


def test_cleanup_resets_everything(world):
    world.set_test_data("k", 1)
    world.set_scenario_context("k", 2)
    world.screenshots.append("a.png")
    world.traces.append("t.zip")
    world.current_scenario = "Home loads"
    world.start_performance_measurement()
    assert not world.is_pristine()
    world.cleanup_test_data()
    assert world.is_pristine()
    assert world.current_scenario is None


class TestPageValidation:

    async def test_unknown_page_type(self, world):
        world.set_scenario_context(CURRENT_PAGE_KEY, "contact-us")
        assert await world.validate_current_page_loaded() is False

    async def test_no_current_page(self, world):
        assert await world.validate_current_page_loaded() is False

    async def test_page_objects_not_initialized(self, world):
        world.set_scenario_context(CURRENT_PAGE_KEY, PageIdentity.HOME)
        assert await world.validate_current_page_loaded() is False

    async def test_dispatches_to_current_page_object(self, world):
        await world.initialize_page_objects()
        world.news_media_page.is_page_loaded = AsyncMock(return_value=True)
        world.home_page.is_page_loaded = AsyncMock(return_value=False)
        world.set_scenario_context(CURRENT_PAGE_KEY, "news-media")
        assert await world.validate_current_page_loaded() is True
        world.home_page.is_page_loaded.assert_not_awaited()

    async def test_navigation_records_current_page(self, world, page):
        await world.navigate_to_news_page()
        assert isinstance(world.news_media_page, NewsMediaPage)
        assert world.get_scenario_context(CURRENT_PAGE_KEY) == PageIdentity.NEWS_MEDIA
        assert page.goto.call_args.args[0] == "https://frbsf.org/news-and-media/"

    async def test_perform_search_records_term(self, world):
        await world.initialize_page_objects()
        world.home_page.perform_search = AsyncMock()
        await world.perform_search("inflation")
        world.home_page.perform_search.assert_awaited_once_with("inflation")
        assert world.get_scenario_context("searchTerm") == "inflation"
        assert world.get_scenario_context(CURRENT_PAGE_KEY) == PageIdentity.SEARCH_RESULTS


class TestPerformance:

    def test_end_without_start_returns_zero(self, world):
        assert world.end_performance_measurement("nothing") == 0

    def test_measurement_resets_after_end(self, world):
        world.start_performance_measurement()
        assert world.end_performance_measurement("home") >= 0
        assert world.test_start_time is None


@pytest.mark.parametrize(
    "setter, name, size",
    [
        ("set_mobile_viewport", "mobile", {"width": 375, "height": 667}),
        ("set_tablet_viewport", "tablet", {"width": 768, "height": 1024}),
        ("set_desktop_viewport", "desktop", {"width": 1920, "height": 1080}),
    ],
)
async def test_viewport_setters(world, page, setter, name, size):
    await getattr(world, setter)()
    page.set_viewport_size.assert_awaited_once_with(size)
    assert world.get_scenario_context("viewport") == name


class TestArtifacts:

    async def test_screenshots_are_recorded(self, world, browser_manager):
        path = await world.capture_screenshot("home")
        browser_manager.take_screenshot.assert_awaited_once_with("home")
        assert world.screenshots == [path]

    async def test_trace_start_and_stop(self, world):
        path = await world.capture_trace("critical")
        assert world.active_trace == path
        assert world.traces == [path]
        await world.stop_trace(path)
        assert world.active_trace is None

    async def test_failed_screenshot_propagates(self, world, browser_manager):
        browser_manager.take_screenshot.side_effect = CaptureError("boom")
        with pytest.raises(CaptureError):
            await world.capture_screenshot()
        assert world.screenshots == []


class TestFailureHandling:

    async def test_collects_screenshot(self, world, browser_manager):
        await world.initialize_page_objects()
        world.current_step = "search"
        await world.handle_test_failure(AssertionError("no results"))
        assert len(world.screenshots) == 1
        assert browser_manager.take_screenshot.call_args.args[0].startswith("failure-search-")

    async def test_never_raises(self, world, browser_manager, page):
        await world.initialize_page_objects()
        browser_manager.take_screenshot.side_effect = CaptureError("page crashed")
        page.title.side_effect = PlaywrightError("Target closed")
        world.set_scenario_context("unserializable", object())
        await world.handle_test_failure(RuntimeError("boom"), "open home page")
        assert world.screenshots == []
