"""Scalar text fields read from a listing detail page."""

from __future__ import annotations

from typing import Optional

from loguru import logger
from playwright.async_api import Page

from config.settings import ADDRESS_NOT_FOUND, DAYS_ON_MARKET_NOT_FOUND, FIELD_RETRY_GRACE_MS
from src.scrapers.locators import Locator, PageRole, XPathLocator, find_with_retry

FIELD_DEFAULTS: dict[PageRole, str] = {
    PageRole.ADDRESS: ADDRESS_NOT_FOUND,
    PageRole.DAYS_ON_MARKET: DAYS_ON_MARKET_NOT_FOUND,
}


class ListingFieldExtractor:
    """
    Reads address and days on market.

    A missing or unreadable field degrades to its sentinel string and never
    fails the request. A located element's text is trimmed and otherwise
    accepted as-is, even when empty; no check that it looks like an address
    or a day count.
    """

    def __init__(self, locator: Optional[Locator] = None, grace_ms: int = FIELD_RETRY_GRACE_MS):
        self.locator = locator or XPathLocator()
        self.grace_ms = grace_ms

    async def read_field(self, page: Page, role: PageRole) -> str:
        default = FIELD_DEFAULTS[role]
        try:
            element = await find_with_retry(self.locator, page, role, self.grace_ms)
            if element is None:
                logger.warning("Could not extract {}: element not found", role.value)
                return default
            text = await element.text_content()
        except Exception as e:
            logger.warning("Could not extract {}: {}", role.value, e)
            return default

        text = (text or "").strip()
        if not text:
            logger.warning("{} element is present but empty", role.value)
        return text

    async def extract(self, page: Page) -> tuple[str, str]:
        """Return ``(address, days_on_market)``, in that order."""
        logger.debug("Extracting address...")
        address = await self.read_field(page, PageRole.ADDRESS)
        logger.debug("Extracting days on market...")
        days_on_market = await self.read_field(page, PageRole.DAYS_ON_MARKET)
        return address, days_on_market
