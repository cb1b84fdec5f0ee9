"""
Page Object Model for the FRBSF home page.
"""
import logging
from typing import Dict
from .base_page import BasePage

logger = logging.getLogger(__name__)


class HomePage(BasePage):
    """Page object for the site landing page."""

    SELECTORS = {
        # Header
        "logo": '[data-testid="frbsf-logo"], .logo, img[alt*="Federal Reserve"]',
        "main_navigation": 'nav[role="navigation"], .main-nav, .primary-navigation',
        "search_button": '[data-testid="search-button"], .search-toggle, button[aria-label*="search" i]',
        "search_input": '[data-testid="search-input"], input[type="search"], #search-input',
        # Hero
        "hero_section": '[data-testid="hero-section"], .hero, .banner, .main-banner',
        "hero_title": '[data-testid="hero-title"], .hero h1, .banner h1',
        # Main menu
        "research_menu": 'a[href*="research"], nav a:has-text("Research")',
        "news_menu": 'a[href*="news"], nav a:has-text("News")',
        "about_menu": 'a[href*="about"], nav a:has-text("About")',
        # Footer
        "footer": "footer, .footer, .site-footer",
        "footer_links": "footer a, .footer a",
        "social_links": '[data-testid="social-links"], .social-media, .social-links',
        # Accessibility
        "skip_to_content": 'a[href="#main"], .skip-link',
        "main_content": '#main, main, [role="main"]',
    }
    PATH = "/"

    async def navigate_to_home_page(self):
        await self.open()

    async def is_page_loaded(self) -> bool:
        return await self.landmarks_visible("logo", "main_navigation")

    async def open_search_dialog(self):
        # Some layouts render the search field inline without a toggle
        if not await self.actions.is_element_visible(self.SELECTORS["search_input"]):
            await self.actions.click(self.SELECTORS["search_button"])
        await self.actions.wait_for_element(self.SELECTORS["search_input"])

    async def perform_search(self, search_term: str):
        logger.info(f"Searching for: {search_term}")
        await self.open_search_dialog()
        await self.actions.type_text(self.SELECTORS["search_input"], search_term, clear=True)
        await self.actions.press_key("Enter", self.SELECTORS["search_input"])
        await self.actions.wait_for_page_load()

    async def click_research_menu(self):
        await self.actions.click(self.SELECTORS["research_menu"])

    async def click_news_menu(self):
        await self.actions.click(self.SELECTORS["news_menu"])

    async def get_hero_title(self) -> str:
        return await self.actions.get_element_text(self.SELECTORS["hero_title"])

    async def validate_branding(self) -> bool:
        title = await self.actions.get_page_title()
        logo_visible = await self.actions.is_element_visible(self.SELECTORS["logo"])
        return logo_visible and "Federal Reserve" in title

    async def validate_footer(self) -> Dict[str, bool]:
        await self.actions.scroll_to_bottom()
        return {
            "footer": await self.actions.is_element_visible(self.SELECTORS["footer"]),
            "links": await self.actions.get_element_count(self.SELECTORS["footer_links"]) > 0,
            "social": await self.actions.is_element_present(self.SELECTORS["social_links"]),
        }
