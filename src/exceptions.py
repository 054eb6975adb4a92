"""Extraction pipeline exceptions (no Playwright dependency)."""

from __future__ import annotations


class ConfigurationError(Exception):
    """Raised at startup when a required key cannot be loaded."""


class ExtractionError(Exception):
    """Base class for every failure surfaced by the extraction pipeline."""

    kind = "extraction_failed"
    status_code = 500
    default_message = "Failed to extract listing data"

    def __init__(self, message: str | None = None, *, cause: BaseException | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.cause = cause
        # Set by ExtractionService to the last stage reached before failing
        self.stage: str | None = None


class AuthenticationFailed(ExtractionError):
    """Credential missing or does not match the endpoint key."""

    kind = "authentication_failed"
    status_code = 401
    default_message = "Invalid endpoint key"


class MissingIdentifier(ExtractionError):
    """Agent name absent or blank."""

    kind = "missing_identifier"
    status_code = 400
    default_message = "Agent name is required"


class NavigationTimeout(ExtractionError):
    kind = "navigation_timeout"
    default_message = "Navigation timed out"


class ListingsSectionNotFound(ExtractionError):
    kind = "listings_section_not_found"
    default_message = "Listings section not found on page"


class ListingClickFailed(ExtractionError):
    kind = "listing_click_failed"

    def __init__(self, message: str | None = None, *, cause: BaseException | None = None):
        if message is None:
            message = f"Failed to click listing: {cause}" if cause else "Failed to click listing"
        super().__init__(message, cause=cause)


class ExtractionFailed(ExtractionError):
    """Wraps any unexpected error raised inside the pipeline."""

    kind = "extraction_failed"
