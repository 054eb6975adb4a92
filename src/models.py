from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from config.settings import ADDRESS_NOT_FOUND, DAYS_ON_MARKET_NOT_FOUND


class RoomVerdict(Enum):
    ROOM = "ROOM"           # Classifier answered yes
    NOT_ROOM = "NOT_ROOM"   # Classifier answered no
    UNKNOWN = "UNKNOWN"     # Error, empty or ambiguous answer; treated as NOT_ROOM

    @property
    def is_room(self) -> bool:
        return self is RoomVerdict.ROOM


class ExtractionStage(Enum):
    IDLE = "idle"
    SESSION_ACQUIRED = "session_acquired"
    PROFILE_LOADED = "profile_loaded"
    LISTING_LOADED = "listing_loaded"
    FIELDS_EXTRACTED = "fields_extracted"
    IMAGES_SCANNED = "images_scanned"
    SESSION_RELEASED = "session_released"


@dataclass
class ImageCandidate:
    """One gallery position considered by the room image scan."""
    position: int
    url: Optional[str] = None
    verdict: Optional[RoomVerdict] = None
    miss_reason: Optional[str] = None  # "element_missing", "no_network_url", "read_error"


class ListingRecord(BaseModel):
    """
    Result returned for one agent.
    Address and days on market are never absent; they fall back to sentinel strings.
    """
    model_config = ConfigDict(populate_by_name=True)

    address: str = ADDRESS_NOT_FOUND
    days_on_market: str = Field(default=DAYS_ON_MARKET_NOT_FOUND, alias="daysOnMarket")
    first_room_image: Optional[str] = Field(default=None, alias="firstRoomImage")

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True)


class ExtractionRequest(BaseModel):
    # Both optional so the service decides the rejection order (credential, then name)
    model_config = ConfigDict(populate_by_name=True)

    agent_name: Optional[str] = Field(default=None, alias="agentName")
    endpointkey: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
    message: Optional[str] = None
    kind: Optional[str] = None
    error_id: Optional[str] = None
