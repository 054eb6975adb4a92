"""
Listing extraction configuration.

Constants for the agent profile -> listing detail -> room photo pipeline.
Timing values are milliseconds unless the name says otherwise.
"""

from pathlib import Path

# Source site
BASE_URL = "https://www.compass.com"
AGENT_PROFILE_PATH = "/agents/{slug}/"

# Navigation
NAVIGATION_TIMEOUT_MS = 30000
WAIT_UNTIL = "networkidle"

# Grace intervals (single retry only)
PROFILE_SETTLE_MS = 3000
LISTINGS_RETRY_GRACE_MS = 3000
SCROLL_SETTLE_MS = 1000
DETAIL_SETTLE_MS = 2000
FIELD_RETRY_GRACE_MS = 2000

# Image scan
MAX_IMAGE_CANDIDATES = 5
IMAGE_SOURCE_ATTRIBUTES = ("src", "data-src", "data-lazy-src")
NETWORK_SCHEMES = ("http://", "https://")

# Sentinel values returned when a field cannot be located
ADDRESS_NOT_FOUND = "Address not found"
DAYS_ON_MARKET_NOT_FOUND = "Days on market not found"

# Browser
VIEWPORT = {"width": 1920, "height": 1080}
CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
]
SCREENSHOT_DIR = Path("screenshots")

# Vision classifier
DEFAULT_VISION_MODEL = "gpt-4o"
ROOM_CLASSIFIER_MAX_TOKENS = 10
ROOM_CLASSIFIER_PROMPT = (
    "Is this image showing just a room (like a bedroom, living room, kitchen, etc.) "
    "without people or external views? Respond with only 'yes' or 'no'."
)

# Process configuration: env var name -> fallback file (relative to project root)
ENDPOINT_KEY_ENV = "ENDPOINT_KEY"
ENDPOINT_KEY_FILE = "endpointkey.txt"
VISION_API_KEY_ENV = "GPT_API_KEY"
VISION_API_KEY_FILE = "gpt-key.txt"
DEBUG_ENV = "DEBUG"
DEBUG_FILE = "debug.txt"
DEFAULT_PORT = 3000

PROJECT_ROOT = Path(__file__).resolve().parent.parent
