import asyncio
import functools
import re
from typing import Optional

from loguru import logger
from openai import OpenAI

from config.settings import DEFAULT_VISION_MODEL, ROOM_CLASSIFIER_MAX_TOKENS, ROOM_CLASSIFIER_PROMPT
from src.models import RoomVerdict

_NO_RE = re.compile(r"\bno\b")


def parse_verdict(text: Optional[str]) -> RoomVerdict:
    """
    Map the model's free-text answer to a verdict.

    Any answer containing "yes" counts as a room. An explicit "no" is NOT_ROOM;
    anything else is UNKNOWN, which callers treat the same as NOT_ROOM.
    """
    answer = (text or "").strip().lower()
    if not answer:
        return RoomVerdict.UNKNOWN
    if "yes" in answer:
        return RoomVerdict.ROOM
    if _NO_RE.search(answer):
        return RoomVerdict.NOT_ROOM
    return RoomVerdict.UNKNOWN


class RoomClassifier:
    """
    Yes/no "is this just an interior room" check against an OpenAI-compatible
    vision chat endpoint (OpenAI by default, or any server set via base_url).

    ``classify`` never raises: transport and API errors come back as UNKNOWN.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_VISION_MODEL,
        base_url: Optional[str] = None,
        client: Optional[OpenAI] = None,
        max_tokens: int = ROOM_CLASSIFIER_MAX_TOKENS,
    ):
        self.client = client or OpenAI(api_key=api_key, base_url=base_url)
        self.model = model
        self.max_tokens = max_tokens

    def _build_messages(self, image_url: str) -> list[dict]:
        return [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": ROOM_CLASSIFIER_PROMPT},
                    {"type": "image_url", "image_url": {"url": image_url}},
                ],
            }
        ]

    def classify(self, image_url: str) -> RoomVerdict:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=self._build_messages(image_url),
                max_tokens=self.max_tokens,
            )
            content = response.choices[0].message.content
        except Exception as e:
            logger.warning("Error checking image with vision model ({}): {}", self.model, e)
            return RoomVerdict.UNKNOWN

        verdict = parse_verdict(content)
        logger.debug("Vision answer {!r} -> {} for {}", content, verdict.value, image_url)
        return verdict

    async def classify_async(self, image_url: str) -> RoomVerdict:
        """Run the blocking client call in the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(self.classify, image_url))
