"""Agent name -> URL path token used by agent profile pages."""

from __future__ import annotations

import re

from config.settings import AGENT_PROFILE_PATH, BASE_URL

_WHITESPACE_RE = re.compile(r"\s+")
_DISALLOWED_RE = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUN_RE = re.compile(r"-+")


def normalize_agent_name(raw: str) -> str:
    """
    Turn a free-form agent name into a profile slug.

    "Melody Acevedo" -> "melody-acevedo"
    "  Jo!! Ann--Lee  " -> "jo-ann-lee"

    Order matters: whitespace becomes hyphens before disallowed characters are
    stripped, so "Jo!! Ann" keeps its word break. An input with nothing usable
    yields "".
    """
    slug = raw.lower().strip()
    slug = _WHITESPACE_RE.sub("-", slug)
    slug = _DISALLOWED_RE.sub("", slug)
    slug = _HYPHEN_RUN_RE.sub("-", slug)
    return slug.strip("-")


def build_profile_url(slug: str) -> str:
    return BASE_URL + AGENT_PROFILE_PATH.format(slug=slug)
