"""
ExtractionService end to end, with a fake browser session and classifier.

Every scenario checks the session bookkeeping: nothing is opened before the
request is validated, and an opened session is closed exactly once.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.exceptions import (
    AuthenticationFailed,
    ExtractionFailed,
    ListingClickFailed,
    ListingsSectionNotFound,
    MissingIdentifier,
    NavigationTimeout,
)
from src.scrapers import base
from src.scrapers.locators import PageRole, XPathLocator
from src.services.extraction_service import ExtractionService
from src.utils.settings import Settings
from fakes import LISTING_URL, FakeClassifier, FakeElement, FakePage, FakeSession, build_listing_page, gallery_url, xpath

KEY = "endpoint-secret"
PROFILE_URL = "https://www.compass.com/agents/melody-acevedo/"


def agent_page(card: FakeElement | None = None, with_card: bool = True, **kwargs: Any) -> FakePage:
    """Profile card plus every element of the listing detail page."""
    page = FakePage(build_listing_page(), **kwargs)
    if with_card:
        page.add(xpath(PageRole.FIRST_LISTING), card or FakeElement(link=LISTING_URL))
    return page


class Harness:
    def __init__(
        self,
        page: FakePage,
        classifier: FakeClassifier | None = None,
        debug: bool = False,
        locator: Any = None,
    ):
        self.page = page
        self.sessions: list[FakeSession] = []
        self.classifier = classifier or FakeClassifier(rooms={gallery_url(2)})
        self.service = ExtractionService(
            Settings(endpoint_key=KEY, vision_api_key="sk-test", debug=debug),
            classifier=self.classifier,
            session_factory=self.open_session,
            locator=locator,
        )

    async def open_session(self) -> FakeSession:
        session = FakeSession(self.page)
        self.sessions.append(session)
        return session

    def run(self, agent_name: str | None = "Melody Acevedo", credential: str | None = KEY):
        return asyncio.run(self.service.extract(agent_name, credential))

    @property
    def close_calls(self) -> list[int]:
        return [s.close_calls for s in self.sessions]


def test_successful_extraction_returns_record() -> None:
    harness = Harness(agent_page())

    record = harness.run()

    assert record.to_response() == {
        "address": "123 Main St, Brooklyn, NY 11201",
        "daysOnMarket": "12",
        "firstRoomImage": gallery_url(2),
    }
    assert harness.page.visited == [PROFILE_URL, LISTING_URL]
    assert harness.close_calls == [1]


def test_no_room_photo_is_still_a_success() -> None:
    harness = Harness(agent_page(), classifier=FakeClassifier())

    record = harness.run()

    assert record.first_room_image is None
    assert harness.close_calls == [1]


@pytest.mark.parametrize("credential", [None, "", "wrong-key"])
def test_bad_credential_rejected_before_browser_starts(credential) -> None:
    harness = Harness(agent_page())

    with pytest.raises(AuthenticationFailed, match="Invalid endpoint key"):
        harness.run(credential=credential)

    assert harness.sessions == []


@pytest.mark.parametrize("agent_name", [None, "", "   "])
def test_missing_agent_name_rejected_before_browser_starts(agent_name) -> None:
    harness = Harness(agent_page())

    with pytest.raises(MissingIdentifier, match="Agent name is required"):
        harness.run(agent_name=agent_name)

    assert harness.sessions == []


def test_credential_is_checked_before_agent_name() -> None:
    harness = Harness(agent_page())

    with pytest.raises(AuthenticationFailed):
        harness.run(agent_name=None, credential="wrong-key")


def test_profile_timeout_fails_and_releases_session() -> None:
    page = agent_page(goto_errors={PROFILE_URL: PlaywrightTimeoutError("Timeout 30000ms exceeded.")})
    harness = Harness(page)

    with pytest.raises(NavigationTimeout) as exc_info:
        harness.run()

    assert exc_info.value.stage == "session_acquired"
    assert harness.close_calls == [1]


def test_missing_listings_fails_and_releases_session() -> None:
    harness = Harness(agent_page(with_card=False))

    with pytest.raises(ListingsSectionNotFound) as exc_info:
        harness.run()

    assert exc_info.value.stage == "profile_loaded"
    assert harness.close_calls == [1]
    assert harness.classifier.calls == []


def test_unclickable_listing_fails_and_releases_session() -> None:
    harness = Harness(agent_page(card=FakeElement()))

    with pytest.raises(ListingClickFailed) as exc_info:
        harness.run()

    assert exc_info.value.stage == "profile_loaded"
    assert harness.close_calls == [1]


class ListingLookupCrashes(XPathLocator):
    async def find(self, page, role, **params):
        if role is PageRole.FIRST_LISTING:
            raise RuntimeError("renderer crashed")
        return await super().find(page, role, **params)


def test_field_read_error_still_returns_record() -> None:
    page = agent_page()
    page.add(xpath(PageRole.ADDRESS), FakeElement(read_error=RuntimeError("evaluation failed")))
    harness = Harness(page)

    record = harness.run()

    assert record.address == "Address not found"
    assert record.days_on_market == "12"
    assert record.first_room_image == gallery_url(2)
    assert harness.close_calls == [1]


def test_unexpected_error_is_wrapped() -> None:
    harness = Harness(agent_page(), locator=ListingLookupCrashes())

    with pytest.raises(ExtractionFailed, match="renderer crashed") as exc_info:
        harness.run()

    assert exc_info.value.stage == "profile_loaded"
    assert isinstance(exc_info.value.cause, RuntimeError)
    assert harness.close_calls == [1]


def test_browser_launch_failure_is_wrapped() -> None:
    async def broken_factory():
        raise RuntimeError("Executable doesn't exist")

    service = ExtractionService(
        Settings(endpoint_key=KEY, vision_api_key="sk-test"),
        classifier=FakeClassifier(),
        session_factory=broken_factory,
    )

    with pytest.raises(ExtractionFailed, match="Executable doesn't exist") as exc_info:
        asyncio.run(service.extract("Melody Acevedo", KEY))

    assert exc_info.value.stage == "idle"


def test_debug_mode_captures_failure_screenshot(monkeypatch: Any, tmp_path: Any) -> None:
    monkeypatch.setattr(base, "SCREENSHOT_DIR", tmp_path)
    harness = Harness(agent_page(with_card=False), debug=True)

    with pytest.raises(ListingsSectionNotFound):
        harness.run()

    (shot,) = harness.page.screenshots
    assert "listings_section_not_found" in shot
    assert harness.close_calls == [1]
