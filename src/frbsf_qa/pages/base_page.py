"""Common contract for FRBSF page objects."""

import logging
from abc import ABC, abstractmethod
from typing import Dict
from playwright.async_api import Page
from ..core.config import EnvironmentConfig
from ..core.errors import WaitTimeoutError
from .actions import PageActions

logger = logging.getLogger(__name__)


class BasePage(ABC):
    """
    A page object is a set of locators plus a definition of "loaded".

    Interaction goes through ``self.actions`` rather than inherited helpers,
    so page modules stay limited to what is specific to their page.
    """

    SELECTORS: Dict[str, str] = {}
    PATH = "/"

    def __init__(self, page: Page, config: EnvironmentConfig):
        self.page = page
        self.config = config
        self.actions = PageActions(page, config, owner=type(self).__name__)
        logger.info(f"{type(self).__name__} initialized")

    async def open(self):
        await self.actions.navigate_to(self.PATH)

    async def landmarks_visible(self, *names: str, timeout: int = 10000) -> bool:
        """Wait for each named landmark in turn; False as soon as one never shows up."""
        try:
            for name in names:
                await self.actions.wait_for_element(self.SELECTORS[name], timeout=timeout)
        except WaitTimeoutError as e:
            logger.info(f"{type(self).__name__} landmark missing: {e.target}")
            return False
        return True

    @abstractmethod
    async def is_page_loaded(self) -> bool:
        """Whether the page-specific landmarks are present."""
