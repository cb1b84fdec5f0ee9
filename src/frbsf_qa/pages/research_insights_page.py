"""Page Object Model for the Research & Insights section."""

from .base_page import BasePage


class ResearchInsightsPage(BasePage):
    SELECTORS = {
        "page_title": '[data-testid="page-title"], h1, .page-title',
        "research_container": '[data-testid="research-container"], .research-list, .publications, main',
        "research_categories": '[data-testid="research-categories"], .research-categories, .topic-filters',
        "category_filter": '[data-testid="category-filter"], .category-filter, select[name*="category"]',
        "publication_item": '[data-testid="publication-item"], .publication, article, [class*="post"]',
        "publication_title": '[data-testid="publication-title"], .publication h3, article h2, article h3',
    }
    PATH = "/research-and-insights/"

    async def navigate_to_research_page(self):
        await self.open()

    async def is_page_loaded(self) -> bool:
        return await self.landmarks_visible("page_title", "research_container")

    async def get_publication_count(self) -> int:
        return await self.actions.get_element_count(self.SELECTORS["publication_item"])

    async def filter_by_category(self, category: str):
        await self.actions.select_option(self.SELECTORS["category_filter"], category)
        await self.actions.wait_for_page_load()
