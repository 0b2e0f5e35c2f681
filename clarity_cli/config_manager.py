"""Configuration manager for Clarity CLI using TOML files."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict

import toml

logger = logging.getLogger(__name__)

BASE_DIR = Path(os.environ.get("CLARITY_HOME", str(Path.home() / ".clarity"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"


# Default configurations for each provider
DEFAULT_CONFIGS = {
    "openrouter": {
        "provider": "openrouter",
        "model": "anthropic/claude-sonnet-4",
        "api_key": "",
        "endpoint": "https://openrouter.ai/api/v1/chat/completions",
    },
    "openai": {
        "provider": "openai",
        "model": "gpt-4o",
        "api_key": "",
        "endpoint": "https://api.openai.com/v1/chat/completions",
    },
    "anthropic": {
        "provider": "anthropic",
        "model": "claude-3-5-sonnet-20241022",
        "api_key": "",
    },
    "ollama": {
        "provider": "ollama",
        "model": "qwen2.5-coder:7b",
        "endpoint": "http://127.0.0.1:11434/api/generate",
    },
}

DEFAULT_VIEW_CONFIG = {
    "hide_tests": True,
    "direction": "TB",
}


def load_full_config() -> Dict[str, Any]:
    """Load the entire TOML config (all sections)."""
    if not CONFIG_FILE.exists():
        return {}
    try:
        with open(CONFIG_FILE, "r") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Could not read %s: %s", CONFIG_FILE, exc)
        return {}


def load_config() -> Dict[str, Any]:
    """Load the ``[llm]`` section.

    Returns:
        Configuration dictionary with provider settings.
        Falls back to OpenRouter defaults if the file or section is missing.
    """
    config = load_full_config()
    return config.get("llm", DEFAULT_CONFIGS["openrouter"].copy())


def load_view_config() -> Dict[str, Any]:
    """Load the ``[view]`` section merged over the defaults."""
    merged = DEFAULT_VIEW_CONFIG.copy()
    merged.update(load_full_config().get("view", {}))
    return merged


def _save_full_config(config: Dict[str, Any]) -> bool:
    """Write entire config dict to TOML file, preserving all sections."""
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(CONFIG_FILE, "w") as f:
            toml.dump(config, f)
        return True
    except OSError as exc:
        logger.warning("Could not write %s: %s", CONFIG_FILE, exc)
        return False


def save_config(provider: str, model: str, api_key: str = "", endpoint: str = "") -> bool:
    """Save LLM configuration to TOML file.

    Preserves other sections (e.g. ``[view]``) in the file.

    Args:
        provider: Provider name (openrouter, openai, anthropic, ollama)
        model: Model name
        api_key: API key for cloud providers
        endpoint: Custom endpoint

    Returns:
        True if saved successfully, False otherwise
    """
    config = load_full_config()

    config["llm"] = {
        "provider": provider,
        "model": model,
    }
    if api_key:
        config["llm"]["api_key"] = api_key
    if endpoint:
        config["llm"]["endpoint"] = endpoint

    return _save_full_config(config)


def save_view_config(**values: Any) -> bool:
    """Update keys of the ``[view]`` section."""
    config = load_full_config()
    view = config.get("view", {})
    view.update(values)
    config["view"] = view
    return _save_full_config(config)


def clear_llm_config() -> bool:
    """Remove ``[llm]`` section from config, resetting to default."""
    config = load_full_config()
    config.pop("llm", None)
    return _save_full_config(config)


def get_provider_config(provider: str) -> Dict[str, Any]:
    """Get default configuration for a specific provider."""
    return DEFAULT_CONFIGS.get(provider, DEFAULT_CONFIGS["openrouter"]).copy()
