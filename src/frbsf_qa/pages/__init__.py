"""Page objects for the FRBSF site."""

from .actions import PageActions
from .base_page import BasePage
from .home_page import HomePage
from .news_media_page import NewsMediaPage
from .research_insights_page import ResearchInsightsPage
from .search_results_page import SearchResultsPage

__all__ = [
    "BasePage",
    "HomePage",
    "NewsMediaPage",
    "PageActions",
    "ResearchInsightsPage",
    "SearchResultsPage",
]
