"""
Agent name -> ListingRecord.

Owns the browser session for one request and sequences the pipeline:
profile page, first listing, text fields, room photo. Every stage runs to
completion before the next starts; the session is closed exactly once on
every path.

Usage:
    service = ExtractionService(get_settings())
    record = await service.extract("Melody Acevedo", credential)
"""

from __future__ import annotations

import functools
import hmac
from typing import Any, Awaitable, Callable, Optional

from config.settings import MAX_IMAGE_CANDIDATES
from src.exceptions import AuthenticationFailed, ExtractionError, ExtractionFailed, MissingIdentifier
from src.models import ExtractionStage, ListingRecord
from src.scrapers.agent_profile_navigator import AgentProfileNavigator
from src.scrapers.base import BrowsingSession, capture_screenshot
from src.scrapers.listing_fields import ListingFieldExtractor
from src.scrapers.locators import Locator, XPathLocator
from src.scrapers.room_image_scanner import RoomClassifierLike, RoomImageScanner
from src.services.vision_service import RoomClassifier
from src.utils.logging_utils import StageClock, bind_context, new_request_id, stage_finished, stage_started
from src.utils.settings import Settings
from src.utils.slug import normalize_agent_name

# Anything with a ``page`` attribute and an async ``close()``
SessionFactory = Callable[[], Awaitable[Any]]


class ExtractionService:
    def __init__(
        self,
        settings: Settings,
        classifier: Optional[RoomClassifierLike] = None,
        session_factory: Optional[SessionFactory] = None,
        locator: Optional[Locator] = None,
    ):
        self.settings = settings
        self.classifier = classifier or RoomClassifier(
            api_key=settings.vision_api_key,
            model=settings.vision_model,
            base_url=settings.vision_base_url,
        )
        self.session_factory = session_factory or functools.partial(BrowsingSession.open, headless=settings.headless)
        self.locator = locator or XPathLocator()
        self.navigator = AgentProfileNavigator(self.locator)
        self.field_extractor = ListingFieldExtractor(self.locator)
        self.image_scanner = RoomImageScanner(self.classifier, self.locator, max_candidates=MAX_IMAGE_CANDIDATES)

    def validate(self, agent_name: Optional[str], credential: Optional[str]) -> str:
        """Credential first, then agent name. Nothing is launched if either check fails."""
        if not credential or not hmac.compare_digest(
            credential.encode("utf-8"), self.settings.endpoint_key.encode("utf-8")
        ):
            raise AuthenticationFailed()
        if agent_name is None or not agent_name.strip():
            raise MissingIdentifier()
        return agent_name

    async def extract(self, agent_name: Optional[str], credential: Optional[str]) -> ListingRecord:
        """
        Run the full pipeline for one agent.

        Raises:
            AuthenticationFailed, MissingIdentifier: before any browser is started.
            NavigationTimeout, ListingsSectionNotFound, ListingClickFailed: pipeline-fatal.
            ExtractionFailed: any other error, wrapped.
        """
        agent_name = self.validate(agent_name, credential)
        slug = normalize_agent_name(agent_name)
        log = bind_context(request_id=new_request_id(), agent=slug)
        log.info("Starting extraction for agent: {} (formatted: {})", agent_name, slug)

        stage = ExtractionStage.IDLE
        session = None
        clock = StageClock()

        def advance(next_stage: ExtractionStage, **summary: Any) -> None:
            nonlocal stage
            stage_finished(log, next_stage.value, ms=clock.lap(), **summary)
            stage = next_stage

        try:
            stage_started(log, ExtractionStage.SESSION_ACQUIRED.value)
            session = await self.session_factory()
            advance(ExtractionStage.SESSION_ACQUIRED)
            page = session.page

            profile_url = await self.navigator.open_profile(page, slug)
            advance(ExtractionStage.PROFILE_LOADED, url=profile_url)

            outcome = await self.navigator.open_first_listing(page)
            advance(ExtractionStage.LISTING_LOADED, strategy=outcome.strategy)

            address, days_on_market = await self.field_extractor.extract(page)
            advance(ExtractionStage.FIELDS_EXTRACTED)

            first_room_image, candidates = await self.image_scanner.scan(page)
            advance(ExtractionStage.IMAGES_SCANNED, candidates=len(candidates))

        except ExtractionError as e:
            e.stage = stage.value
            await self._on_failure(session, log, e)
            raise
        except Exception as e:
            wrapped = ExtractionFailed(str(e) or type(e).__name__, cause=e)
            wrapped.stage = stage.value
            await self._on_failure(session, log, wrapped)
            raise wrapped from e
        finally:
            if session is not None:
                await session.close()
            stage_finished(log, ExtractionStage.SESSION_RELEASED.value, total_ms=clock.total_ms)

        record = ListingRecord(
            address=address,
            days_on_market=days_on_market,
            first_room_image=first_room_image,
        )
        log.info("Extraction complete in {}ms: {}", clock.total_ms, record.to_response())
        return record

    async def _on_failure(self, session: Any, log, error: ExtractionError) -> None:
        log.error("Extraction failed at {} ({}): {}", error.stage, error.kind, error.message)
        if self.settings.debug and session is not None and getattr(session, "page", None) is not None:
            path = await capture_screenshot(session.page, name_prefix=error.kind)
            if path:
                log.debug("Failure screenshot saved: {}", path)
