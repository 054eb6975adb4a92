"""
Agent profile -> first listing detail page.

Usage:
    navigator = AgentProfileNavigator()
    await navigator.open_profile(page, "melody-acevedo")
    outcome = await navigator.open_first_listing(page)
"""

from __future__ import annotations

from typing import Optional, Sequence

from loguru import logger
from playwright.async_api import ElementHandle, Error as PlaywrightError, Page

from config.settings import DETAIL_SETTLE_MS, LISTINGS_RETRY_GRACE_MS, PROFILE_SETTLE_MS, SCROLL_SETTLE_MS
from src.exceptions import ListingsSectionNotFound
from src.scrapers.base import goto_network_idle
from src.scrapers.click_strategies import DEFAULT_CLICK_LADDER, ClickOutcome, ClickStrategy, resolve_listing_click
from src.scrapers.locators import Locator, PageRole, XPathLocator, find_with_retry
from src.utils.slug import build_profile_url


class AgentProfileNavigator:
    def __init__(
        self,
        locator: Optional[Locator] = None,
        strategies: Sequence[ClickStrategy] = DEFAULT_CLICK_LADDER,
    ):
        self.locator = locator or XPathLocator()
        self.strategies = strategies

    async def open_profile(self, page: Page, slug: str) -> str:
        """Load the agent's profile page. Raises NavigationTimeout."""
        url = build_profile_url(slug)
        logger.debug("Navigating to agent page: {}", url)
        await goto_network_idle(page, url)
        # Listing cards render after network idle
        await page.wait_for_timeout(PROFILE_SETTLE_MS)
        return url

    async def find_first_listing(self, page: Page) -> ElementHandle:
        listing = await find_with_retry(self.locator, page, PageRole.FIRST_LISTING, LISTINGS_RETRY_GRACE_MS)
        if listing is None:
            raise ListingsSectionNotFound()
        return listing

    async def open_first_listing(self, page: Page) -> ClickOutcome:
        """
        Locate the first listing card and navigate to its detail page.

        Raises:
            ListingsSectionNotFound: no card after the initial query and one retry.
            ListingClickFailed: every click strategy failed.
            NavigationTimeout: a direct link was found but did not load in time.
        """
        listing = await self.find_first_listing(page)

        try:
            await listing.scroll_into_view_if_needed()
        except PlaywrightError as e:
            logger.debug("Could not scroll listing into view: {}", e)
        await page.wait_for_timeout(SCROLL_SETTLE_MS)

        outcome = await resolve_listing_click(page, listing, self.strategies)
        await page.wait_for_timeout(DETAIL_SETTLE_MS)
        logger.info("Reached listing page via {}: {}", outcome.strategy, page.url)
        return outcome
