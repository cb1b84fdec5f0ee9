"""Page Object Model for the News & Media section."""

from .base_page import BasePage


class NewsMediaPage(BasePage):
    SELECTORS = {
        "page_title": '[data-testid="page-title"], h1, .page-title',
        "breadcrumbs": '[data-testid="breadcrumbs"], .breadcrumbs, .breadcrumb-nav',
        "featured_news": '[data-testid="featured-news"], .featured-news, .hero-news',
        "news_container": '[data-testid="news-container"], .news-list, .news-grid, main',
        "news_item": '[data-testid="news-item"], .news-item, article, [class*="post"]',
        "news_title": '[data-testid="news-title"], .news-item h3, article h2, article h3',
        "press_releases": 'a[href*="press-release"], a:has-text("Press Release")',
    }
    PATH = "/news-and-media/"

    async def navigate_to_news_page(self):
        await self.open()

    async def is_page_loaded(self) -> bool:
        if not await self.landmarks_visible("page_title"):
            return False
        container_visible = await self.actions.is_element_visible(self.SELECTORS["news_container"])
        featured_visible = await self.actions.is_element_visible(self.SELECTORS["featured_news"])
        return container_visible or featured_visible

    async def get_news_count(self) -> int:
        return await self.actions.get_element_count(self.SELECTORS["news_item"])

    async def get_first_news_title(self) -> str:
        return await self.actions.get_element_text(self.SELECTORS["news_title"])
