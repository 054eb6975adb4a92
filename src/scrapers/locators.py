"""
Structural element lookup for agent profile and listing detail pages.

The pipeline asks for elements by role; the XPath expressions behind each role
are pinned to one observed page layout. A layout change means a new path table,
not a change to the navigator or extractors.
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping, Optional, Protocol

from loguru import logger
from playwright.async_api import ElementHandle, Page


class PageRole(Enum):
    FIRST_LISTING = "first_listing"
    ADDRESS = "address"
    DAYS_ON_MARKET = "days_on_market"
    GALLERY_IMAGE = "gallery_image"  # templated with {position}, 1-based


class Locator(Protocol):
    async def find(self, page: Page, role: PageRole, **params) -> Optional[ElementHandle]: ...


COMPASS_LAYOUT_2024: dict[PageRole, str] = {
    PageRole.FIRST_LISTING: "/html/body/main/div/div/section[2]/div[1]",
    PageRole.ADDRESS: "/html/body/div[1]/main/div/main/div[1]/div[1]/div/div/h1/p",
    # Third row of the listing details table
    PageRole.DAYS_ON_MARKET: "/html/body/div[1]/main/div/main/div[4]/div[2]/table/tbody/tr[3]/td",
    PageRole.GALLERY_IMAGE: "/html/body/div[1]/main/div/main/div[3]/div[1]/div/div[1]/div[2]/div/div/div[{position}]/img",
}


class XPathLocator:
    def __init__(self, paths: Mapping[PageRole, str] = COMPASS_LAYOUT_2024, version: str = "compass-2024"):
        missing = [role.value for role in PageRole if role not in paths]
        if missing:
            raise ValueError(f"Layout {version} has no path for: {', '.join(missing)}")
        self.paths = dict(paths)
        self.version = version

    def xpath_for(self, role: PageRole, **params) -> str:
        return self.paths[role].format(**params) if params else self.paths[role]

    async def find(self, page: Page, role: PageRole, **params) -> Optional[ElementHandle]:
        xpath = self.xpath_for(role, **params)
        element = await page.query_selector(f"xpath={xpath}")
        if element is None:
            logger.debug("No element for {role} ({layout}): {xpath}", role=role.value, layout=self.version, xpath=xpath)
        return element


async def find_with_retry(
    locator: Locator,
    page: Page,
    role: PageRole,
    grace_ms: int,
    **params,
) -> Optional[ElementHandle]:
    """Query once; if nothing is there, wait ``grace_ms`` and query exactly once more."""
    element = await locator.find(page, role, **params)
    if element is not None:
        return element
    logger.debug("{role} not rendered yet, retrying once after {ms}ms", role=role.value, ms=grace_ms)
    await page.wait_for_timeout(grace_ms)
    return await locator.find(page, role, **params)
