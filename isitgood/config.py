"""Configuration utilities.

Values come from the environment; a local ``.env`` file is loaded first
when present. API keys are never defaulted in source.
"""

import os
from typing import Optional

from dotenv import load_dotenv

from isitgood.domain.shared.errors import ConfigurationError


def load_environment(dotenv_path: Optional[str] = None) -> None:
    """Load ``.env`` without overriding variables already set."""
    load_dotenv(dotenv_path=dotenv_path, override=False)


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


def get_openai_api_key() -> Optional[str]:
    return os.getenv("OPENAI_API_KEY")


def get_openai_model() -> str:
    """
    Get the reasoning model name.

    Returns:
        Model from OPENAI_MODEL, defaults to "gpt-4o" (vision capable)
    """
    return os.getenv("OPENAI_MODEL", "gpt-4o")


def get_google_search_api_key() -> Optional[str]:
    return os.getenv("GOOGLE_SEARCH_API_KEY")


def get_google_search_engine_id() -> Optional[str]:
    return os.getenv("GOOGLE_SEARCH_ENGINE_ID")


def get_page_fetch_proxy() -> Optional[str]:
    """
    Get the optional page-fetch intermediary.

    Example .env:
        PAGE_FETCH_PROXY=https://api.allorigins.win/raw?url={url}

    Returns:
        URL template with a {url} placeholder, or None for direct fetch

    Raises:
        ConfigurationError: If set without the {url} placeholder
    """
    template = os.getenv("PAGE_FETCH_PROXY")
    if not template:
        return None
    if "{url}" not in template:
        raise ConfigurationError("PAGE_FETCH_PROXY must contain a {url} placeholder")
    return template


def get_http_timeout_seconds() -> float:
    return _float_env("HTTP_TIMEOUT_SECONDS", 10.0)


def get_deep_search_delay_seconds() -> float:
    return _float_env("DEEP_SEARCH_DELAY_SECONDS", 0.3)


def get_reasoning_provider() -> str:
    """
    Get the reasoning provider name.

    Returns:
        "openai" (default) or "stub"

    Raises:
        ConfigurationError: On any other value
    """
    provider = os.getenv("REASONING_PROVIDER", "openai").strip().lower()
    if provider not in ("openai", "stub"):
        raise ConfigurationError(f"Unknown REASONING_PROVIDER: {provider}")
    return provider
