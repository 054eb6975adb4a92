"""
Ways to get from a listing card to its detail page.

Listing cards are not reliably plain links, so resolution walks a fixed ladder:
read a link and load it, click natively, then click from page script. The
first strategy that lands on a new page wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence
from urllib.parse import urljoin

from loguru import logger
from playwright.async_api import ElementHandle, Error as PlaywrightError, Page

from config.settings import NAVIGATION_TIMEOUT_MS, WAIT_UNTIL
from src.exceptions import ListingClickFailed
from src.scrapers.base import goto_network_idle

FIND_LINK_JS = """
el => {
    const link = el.querySelector('a');
    if (link && link.href) return link.href;
    if (el.tagName === 'A' && el.href) return el.href;
    return el.getAttribute('data-href') || el.getAttribute('href') || null;
}
"""

SCRIPTED_CLICK_JS = """
el => {
    const link = el.querySelector('a');
    if (link) {
        link.click();
        return;
    }
    el.dispatchEvent(new MouseEvent('click', {view: window, bubbles: true, cancelable: true}));
}
"""


class ClickStatus(Enum):
    SUCCEEDED = "succeeded"
    NOT_APPLICABLE = "not_applicable"  # Strategy has nothing to work with (e.g. no link)
    FAILED = "failed"


@dataclass
class ClickOutcome:
    status: ClickStatus
    strategy: str
    detail: Optional[str] = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.status is ClickStatus.SUCCEEDED


class ClickStrategy:
    name = "base"
    # A failure here ends the ladder instead of falling through
    fatal_on_failure = False

    async def attempt(self, page: Page, element: ElementHandle) -> ClickOutcome:
        raise NotImplementedError


class DirectLinkStrategy(ClickStrategy):
    """Read an href (descendant anchor, own href, data-href) and load it directly."""

    name = "direct_link"
    fatal_on_failure = True

    async def attempt(self, page: Page, element: ElementHandle) -> ClickOutcome:
        try:
            href = await element.evaluate(FIND_LINK_JS)
        except PlaywrightError as e:
            logger.debug("Could not read link from listing element: {}", e)
            return ClickOutcome(ClickStatus.FAILED, self.name, "link lookup failed", error=e)
        if not href:
            return ClickOutcome(ClickStatus.NOT_APPLICABLE, self.name, "no link on listing element")
        url = urljoin(page.url, href)
        logger.debug("Found link, navigating directly to: {}", url)
        try:
            await goto_network_idle(page, url)
        except PlaywrightError as e:
            return ClickOutcome(ClickStatus.FAILED, self.name, url, error=e)
        return ClickOutcome(ClickStatus.SUCCEEDED, self.name, url)


class _NavigatingClickStrategy(ClickStrategy):
    async def _trigger(self, element: ElementHandle) -> None:
        raise NotImplementedError

    async def attempt(self, page: Page, element: ElementHandle) -> ClickOutcome:
        try:
            async with page.expect_navigation(wait_until=WAIT_UNTIL, timeout=NAVIGATION_TIMEOUT_MS):
                await self._trigger(element)
        except PlaywrightError as e:
            logger.debug("{} click did not navigate: {}", self.name, e)
            return ClickOutcome(ClickStatus.FAILED, self.name, error=e)
        return ClickOutcome(ClickStatus.SUCCEEDED, self.name, page.url)


class NativeClickStrategy(_NavigatingClickStrategy):
    name = "native_click"

    async def _trigger(self, element: ElementHandle) -> None:
        await element.click(timeout=NAVIGATION_TIMEOUT_MS)


class ScriptedClickStrategy(_NavigatingClickStrategy):
    """Click a descendant link from page script, else dispatch a synthetic click on the card."""

    name = "scripted_click"

    async def _trigger(self, element: ElementHandle) -> None:
        await element.evaluate(SCRIPTED_CLICK_JS)


DEFAULT_CLICK_LADDER: tuple[ClickStrategy, ...] = (
    DirectLinkStrategy(),
    NativeClickStrategy(),
    ScriptedClickStrategy(),
)


async def resolve_listing_click(
    page: Page,
    element: ElementHandle,
    strategies: Sequence[ClickStrategy] = DEFAULT_CLICK_LADDER,
) -> ClickOutcome:
    """Try each strategy in order and return the first success; raise ListingClickFailed when exhausted."""
    last_error: Optional[BaseException] = None
    for strategy in strategies:
        outcome = await strategy.attempt(page, element)
        if outcome.succeeded:
            logger.debug("Listing opened via {}", strategy.name)
            return outcome
        if outcome.status is ClickStatus.FAILED:
            last_error = outcome.error
            if strategy.fatal_on_failure:
                raise ListingClickFailed(cause=last_error) from last_error
        logger.debug("{} {}, trying next strategy", strategy.name, outcome.status.value)

    raise ListingClickFailed(cause=last_error) from last_error
