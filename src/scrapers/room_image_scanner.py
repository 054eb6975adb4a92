"""
First empty-room photo from a listing's gallery.

Only the first MAX_IMAGE_CANDIDATES gallery positions are checked, in order,
one classifier call at a time. The scan stops at the first "room" answer.
"""

from __future__ import annotations

from typing import Optional, Protocol
from urllib.parse import urljoin

from loguru import logger
from playwright.async_api import ElementHandle, Page

from config.settings import IMAGE_SOURCE_ATTRIBUTES, MAX_IMAGE_CANDIDATES, NETWORK_SCHEMES
from src.models import ImageCandidate, RoomVerdict
from src.scrapers.locators import Locator, PageRole, XPathLocator


class RoomClassifierLike(Protocol):
    async def classify_async(self, image_url: str) -> RoomVerdict: ...


async def resolve_image_url(page: Page, element: ElementHandle) -> Optional[str]:
    """
    Absolute URL of an <img>, checking ``src`` then the lazy-load attributes.

    ``src`` is resolved against the page URL like the DOM property would be.
    Placeholders (data: URIs, blanks, relative lazy paths) are skipped.
    """
    for attr in IMAGE_SOURCE_ATTRIBUTES:
        value = await element.get_attribute(attr)
        if not value or not value.strip():
            continue
        value = value.strip()
        if attr == "src":
            value = urljoin(page.url, value)
        if value.startswith(NETWORK_SCHEMES):
            return value
    return None


class RoomImageScanner:
    def __init__(
        self,
        classifier: RoomClassifierLike,
        locator: Optional[Locator] = None,
        max_candidates: int = MAX_IMAGE_CANDIDATES,
    ):
        self.classifier = classifier
        self.locator = locator or XPathLocator()
        self.max_candidates = max_candidates

    async def _classify(self, url: str) -> RoomVerdict:
        try:
            return await self.classifier.classify_async(url)
        except Exception as e:
            # A broken classifier call counts as "not a room"; the scan keeps going
            logger.warning("Room classifier failed for {}: {}", url, e)
            return RoomVerdict.UNKNOWN

    async def scan(self, page: Page) -> tuple[Optional[str], list[ImageCandidate]]:
        """Return ``(first_room_url_or_None, candidates_evaluated)``."""
        logger.debug("Looking for room images...")
        candidates: list[ImageCandidate] = []

        for position in range(1, self.max_candidates + 1):
            candidate = ImageCandidate(position=position)
            candidates.append(candidate)

            try:
                element = await self.locator.find(page, PageRole.GALLERY_IMAGE, position=position)
                if element is None:
                    candidate.miss_reason = "element_missing"
                    logger.debug("Image {} not found", position)
                    continue
                candidate.url = await resolve_image_url(page, element)
            except Exception as e:
                candidate.miss_reason = "read_error"
                logger.warning("Image {} could not be read: {}", position, e)
                continue

            if candidate.url is None:
                candidate.miss_reason = "no_network_url"
                logger.debug("Image {} has no usable URL", position)
                continue

            logger.debug("Checking image {}: {}", position, candidate.url)
            candidate.verdict = await self._classify(candidate.url)
            if candidate.verdict.is_room:
                logger.info("Found room image at position {}", position)
                return candidate.url, candidates

        return None, candidates
