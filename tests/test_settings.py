from __future__ import annotations

from typing import Any

import pytest

from src.exceptions import ConfigurationError
from src.utils import settings as settings_mod

ENV_VARS = ("ENDPOINT_KEY", "GPT_API_KEY", "DEBUG", "VISION_MODEL", "VISION_BASE_URL", "HEADLESS", "PORT")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: Any) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a stray .env in the working directory out of these tests
    monkeypatch.setattr(settings_mod, "load_dotenv", lambda *_a, **_k: False)


def test_read_key_prefers_environment(monkeypatch: Any, tmp_path: Any) -> None:
    (tmp_path / "endpointkey.txt").write_text("from-file\n", encoding="utf-8")
    monkeypatch.setenv("ENDPOINT_KEY", "from-env")

    assert settings_mod.read_key("ENDPOINT_KEY", "endpointkey.txt", tmp_path) == "from-env"


def test_read_key_falls_back_to_stripped_file(tmp_path: Any) -> None:
    (tmp_path / "endpointkey.txt").write_text("  from-file\n", encoding="utf-8")

    assert settings_mod.read_key("ENDPOINT_KEY", "endpointkey.txt", tmp_path) == "from-file"


def test_read_key_missing_everywhere_raises(tmp_path: Any) -> None:
    with pytest.raises(ConfigurationError, match="Missing ENDPOINT_KEY environment variable and endpointkey.txt"):
        settings_mod.read_key("ENDPOINT_KEY", "endpointkey.txt", tmp_path)


def test_read_key_empty_file_raises(tmp_path: Any) -> None:
    (tmp_path / "gpt-key.txt").write_text("\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="is empty"):
        settings_mod.read_key("GPT_API_KEY", "gpt-key.txt", tmp_path)


def test_debug_flag_from_env(monkeypatch: Any, tmp_path: Any) -> None:
    (tmp_path / "debug.txt").write_text("false", encoding="utf-8")
    monkeypatch.setenv("DEBUG", "TRUE")

    assert settings_mod.read_debug_flag(tmp_path) is True


def test_debug_flag_from_file_then_default(tmp_path: Any) -> None:
    assert settings_mod.read_debug_flag(tmp_path) is False

    (tmp_path / "debug.txt").write_text(" true \n", encoding="utf-8")
    assert settings_mod.read_debug_flag(tmp_path) is True


def test_load_settings_reads_keys_and_defaults(tmp_path: Any) -> None:
    (tmp_path / "endpointkey.txt").write_text("endpoint-secret", encoding="utf-8")
    (tmp_path / "gpt-key.txt").write_text("sk-test", encoding="utf-8")

    settings = settings_mod.load_settings(tmp_path)

    assert settings.endpoint_key == "endpoint-secret"
    assert settings.vision_api_key == "sk-test"
    assert settings.debug is False
    assert settings.vision_model == "gpt-4o"
    assert settings.vision_base_url is None
    assert settings.headless is True
    assert settings.port == 3000


def test_load_settings_env_overrides(monkeypatch: Any, tmp_path: Any) -> None:
    monkeypatch.setenv("ENDPOINT_KEY", "k1")
    monkeypatch.setenv("GPT_API_KEY", "k2")
    monkeypatch.setenv("VISION_MODEL", "qwen/qwen3-vl-8b")
    monkeypatch.setenv("VISION_BASE_URL", "http://localhost:1234/v1")
    monkeypatch.setenv("HEADLESS", "false")
    monkeypatch.setenv("PORT", "8081")

    settings = settings_mod.load_settings(tmp_path)

    assert settings.vision_model == "qwen/qwen3-vl-8b"
    assert settings.vision_base_url == "http://localhost:1234/v1"
    assert settings.headless is False
    assert settings.port == 8081


def test_load_settings_missing_vision_key_is_fatal(tmp_path: Any) -> None:
    (tmp_path / "endpointkey.txt").write_text("endpoint-secret", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="GPT_API_KEY"):
        settings_mod.load_settings(tmp_path)


def test_settings_are_immutable() -> None:
    settings = settings_mod.Settings(endpoint_key="a", vision_api_key="b")

    with pytest.raises(AttributeError):
        settings.endpoint_key = "c"  # type: ignore[misc]
