"""
Fixtures for unit tests: Playwright objects are replaced by mocks so the
framework logic runs without a browser.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from frbsf_qa.core.config import BrowserOptions, BrowserType, EnvironmentConfig

# Env vars that Settings reads; cleared so the host environment cannot leak in
SETTINGS_ENV_VARS = [
    "ENV", "BASE_URL", "BROWSER", "HEADED", "SLOW_MO", "VIEWPORT", "VIEWPORT_WIDTH",
    "VIEWPORT_HEIGHT", "TIMEOUT", "RECORD_VIDEO", "RECORD_HAR", "TRACE_CRITICAL",
    "REPORT_DIR", "DEBUG", "VERBOSE", "CI",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def make_locator(visible: bool = True, count: int = 1, text: str = "") -> MagicMock:
    """A locator whose ``first`` and element handles answer like a real match."""
    locator = MagicMock(name="locator")
    locator.first = AsyncMock(name="first")
    locator.first.text_content.return_value = text
    locator.first.is_visible.return_value = visible
    locator.count = AsyncMock(return_value=count)
    element = AsyncMock(name="element")
    element.is_visible.return_value = visible
    locator.all = AsyncMock(return_value=[element] * count)
    return locator


def make_page(url: str = "https://frbsf.org/") -> MagicMock:
    page = MagicMock(name="page")
    page.url = url
    page.is_closed = MagicMock(return_value=False)
    page.locator = MagicMock(side_effect=lambda selector: make_locator())
    for method in (
        "goto", "wait_for_load_state", "reload", "screenshot", "set_viewport_size",
        "evaluate", "wait_for_url", "go_back", "go_forward", "close",
    ):
        setattr(page, method, AsyncMock())
    page.title = AsyncMock(return_value="Federal Reserve Bank of San Francisco")
    page.keyboard.press = AsyncMock()
    return page


@pytest.fixture
def page() -> MagicMock:
    return make_page()


@pytest.fixture
def config(tmp_path) -> EnvironmentConfig:
    return EnvironmentConfig(
        name="t3",
        base_url="https://frbsf.org",
        browser=BrowserOptions(video=False),
        report_dir=tmp_path / "reports",
    )


@pytest.fixture
def firefox_config(config) -> EnvironmentConfig:
    browser = config.browser.model_copy(update={"engine": BrowserType.FIREFOX})
    return config.model_copy(update={"browser": browser})


@pytest.fixture
def locator_factory():
    return make_locator


@pytest.fixture
def fake_playwright(page):
    """Patch ``async_playwright`` with a driver whose browsers hand out ``page``."""
    context = MagicMock(name="context")
    context.new_page = AsyncMock(return_value=page)
    context.close = AsyncMock()
    context.tracing.start = AsyncMock()
    context.tracing.stop = AsyncMock()

    browser = MagicMock(name="browser")
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()

    driver = MagicMock(name="playwright")
    for engine in ("chromium", "firefox", "webkit"):
        getattr(driver, engine).launch = AsyncMock(return_value=browser)
    driver.stop = AsyncMock()

    starter = MagicMock()
    starter.start = AsyncMock(return_value=driver)
    with patch("frbsf_qa.core.browser.async_playwright", return_value=starter):
        yield SimpleNamespace(playwright=driver, browser=browser, context=context, page=page)
