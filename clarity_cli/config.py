"""Configuration paths and LLM settings for Clarity."""

from __future__ import annotations

import os
from pathlib import Path

from .config_manager import load_config, load_view_config

DATA_DIR = Path(os.environ.get("CLARITY_DATA_DIR", "data/clarity")).expanduser()

DATASET_FILES = {
    "structure": "structure.json",
    "calls": "calls.json",
    "arch": "arch.json",
    "classifications": "classifications.json",
}

_toml_config = load_config()
_view_config = load_view_config()

# LLM provider configuration, loaded from ~/.clarity/config.toml (set via `clarity set-llm`)
LLM_PROVIDER = _toml_config.get("provider", "openrouter")
OPENROUTER_ENV_KEY = os.environ.get("OPENROUTER_API_KEY", "")
LLM_API_KEY = (OPENROUTER_ENV_KEY if LLM_PROVIDER == "openrouter" else "") or _toml_config.get("api_key", "")
LLM_MODEL = _toml_config.get("model", "anthropic/claude-sonnet-4")
LLM_ENDPOINT = _toml_config.get("endpoint", "")

# View defaults from the [view] section
HIDE_TESTS_DEFAULT = bool(_view_config.get("hide_tests", True))
LAYOUT_DIRECTION = str(_view_config.get("direction", "TB")).upper()
