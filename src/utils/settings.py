"""
Process-wide configuration.

Keys come from the environment first (deployment), then from plain-text files
next to the project root (local runs). Loaded once and never mutated.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

from config.settings import (
    DEBUG_ENV,
    DEBUG_FILE,
    DEFAULT_PORT,
    DEFAULT_VISION_MODEL,
    ENDPOINT_KEY_ENV,
    ENDPOINT_KEY_FILE,
    PROJECT_ROOT,
    VISION_API_KEY_ENV,
    VISION_API_KEY_FILE,
)
from src.exceptions import ConfigurationError


def _env_true(value: str | None, default: bool = False) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class Settings:
    endpoint_key: str
    vision_api_key: str
    debug: bool = False
    vision_model: str = DEFAULT_VISION_MODEL
    vision_base_url: str | None = None
    headless: bool = True
    port: int = DEFAULT_PORT


def read_key(env_var: str, filename: str, base_dir: Path = PROJECT_ROOT) -> str:
    """Return ``env_var`` if set, else the stripped contents of ``base_dir/filename``."""
    value = os.getenv(env_var)
    if value:
        return value
    path = Path(base_dir) / filename
    try:
        value = path.read_text(encoding="utf-8").strip()
    except OSError as exc:
        raise ConfigurationError(f"Missing {env_var} environment variable and {filename} file not found") from exc
    if not value:
        raise ConfigurationError(f"Missing {env_var} environment variable and {filename} file is empty")
    return value


def read_debug_flag(base_dir: Path = PROJECT_ROOT) -> bool:
    value = os.getenv(DEBUG_ENV)
    if value:
        return value.strip().lower() == "true"
    try:
        return (Path(base_dir) / DEBUG_FILE).read_text(encoding="utf-8").strip().lower() == "true"
    except OSError:
        return False


def load_settings(base_dir: Path | None = None) -> Settings:
    """Build Settings from env/.env/key files. Raises ConfigurationError if a key is missing."""
    load_dotenv()
    root = Path(base_dir) if base_dir is not None else PROJECT_ROOT
    return Settings(
        endpoint_key=read_key(ENDPOINT_KEY_ENV, ENDPOINT_KEY_FILE, root),
        vision_api_key=read_key(VISION_API_KEY_ENV, VISION_API_KEY_FILE, root),
        debug=read_debug_flag(root),
        vision_model=os.getenv("VISION_MODEL") or DEFAULT_VISION_MODEL,
        vision_base_url=os.getenv("VISION_BASE_URL") or None,
        headless=_env_true(os.getenv("HEADLESS"), default=True),
        port=int(os.getenv("PORT") or DEFAULT_PORT),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
