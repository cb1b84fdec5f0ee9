"""Page Object Model for site search results."""

import logging
from typing import List
from urllib.parse import quote_plus
from .base_page import BasePage

logger = logging.getLogger(__name__)


class SearchResultsPage(BasePage):
    SELECTORS = {
        "search_input": '[data-testid="search-input"], input[type="search"], #search-input, .search-field',
        "search_button": '[data-testid="search-button"], button[type="submit"], .search-submit',
        "results_container": 'main#wp--skip-link--target, main, [data-testid="search-results"]',
        "result_item": '[class*="post"], .result-item, .search-result, [data-testid="result-item"]',
        "result_title": '[data-testid="result-title"], .result-title, .result h3, .result h2, [class*="post"] h2 a, [class*="post"] h3 a',
        "no_results_message": '[data-testid="no-results"], .no-results, .search-no-results',
    }
    PATH = "/"

    async def search_for(self, term: str):
        await self.actions.navigate_to(f"/?s={quote_plus(term)}")

    async def is_page_loaded(self) -> bool:
        if not await self.landmarks_visible("search_input"):
            return False
        has_results = await self.actions.is_element_visible(self.SELECTORS["results_container"])
        has_no_results = await self.actions.is_element_visible(self.SELECTORS["no_results_message"])
        return has_results or has_no_results

    async def get_results_count(self) -> int:
        return await self.actions.get_element_count(self.SELECTORS["result_item"])

    async def has_no_results_message(self) -> bool:
        return await self.actions.is_element_visible(self.SELECTORS["no_results_message"])

    async def get_result_titles(self, limit: int = 10) -> List[str]:
        titles = self.page.locator(self.SELECTORS["result_title"])
        count = min(await titles.count(), limit)
        result = []
        for i in range(count):
            text = (await titles.nth(i).text_content()) or ""
            if text.strip():
                result.append(text.strip())
        logger.info(f"Found {len(result)} result titles")
        return result

    async def click_first_result(self):
        await self.actions.click(self.SELECTORS["result_title"])
        await self.actions.wait_for_page_load()
