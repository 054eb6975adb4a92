from __future__ import annotations

import os
from datetime import datetime
from typing import Optional

from loguru import logger
from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)
from playwright_stealth import Stealth

from config.settings import CHROMIUM_ARGS, NAVIGATION_TIMEOUT_MS, SCREENSHOT_DIR, VIEWPORT, WAIT_UNTIL
from src.exceptions import NavigationTimeout


class BrowsingSession:
    """
    One isolated browser + page, owned by a single extraction request.

    Never pooled or shared. ``close()`` is safe to call more than once and
    never raises, so callers can put it in a ``finally`` block.
    """

    def __init__(
        self,
        playwright: Optional[Playwright] = None,
        browser: Optional[Browser] = None,
        context: Optional[BrowserContext] = None,
        page: Optional[Page] = None,
    ):
        self.playwright = playwright
        self.browser = browser
        self.context = context
        self.page = page
        self.closed = False

    @classmethod
    async def open(cls, headless: bool = True) -> "BrowsingSession":
        session = cls(playwright=await async_playwright().start())
        try:
            session.browser = await session.playwright.chromium.launch(headless=headless, args=CHROMIUM_ARGS)
            session.context = await session.browser.new_context(viewport=VIEWPORT, locale="en-US")
            session.page = await session.context.new_page()
            await Stealth().apply_stealth_async(session.page)
        except Exception:
            await session.close()
            raise
        logger.debug("Browser session opened (headless={})", headless)
        return session

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            if self.browser is not None:
                await self.browser.close()
        except PlaywrightError as e:
            logger.warning(f"Error closing browser: {e}")
        finally:
            if self.playwright is not None:
                try:
                    await self.playwright.stop()
                except Exception as e:
                    logger.warning(f"Error stopping Playwright: {e}")
        logger.debug("Browser session closed")


async def goto_network_idle(page: Page, url: str, timeout_ms: int = NAVIGATION_TIMEOUT_MS) -> None:
    """Load ``url`` and wait for network quiescence; timeouts become NavigationTimeout."""
    try:
        await page.goto(url, wait_until=WAIT_UNTIL, timeout=timeout_ms)
    except PlaywrightTimeoutError as e:
        raise NavigationTimeout(f"Timed out after {timeout_ms}ms loading {url}", cause=e) from e


async def capture_screenshot(page: Page, name_prefix: str = "error") -> Optional[str]:
    """Captures a full-page screenshot for debugging."""
    try:
        os.makedirs(SCREENSHOT_DIR, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = str(SCREENSHOT_DIR / f"{name_prefix}_{timestamp}.png")
        await page.screenshot(path=filename, full_page=True)
        return filename
    except Exception as e:
        logger.warning(f"Failed to capture screenshot: {e}")
        return None
