"""Multi-provider LLM adapter supporting OpenRouter, OpenAI, Anthropic and Ollama.

Providers raise :class:`~clarity_cli.errors.ClassificationError` with a short,
user-readable message on any failure so callers can surface it as-is.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from . import config
from .config_manager import get_provider_config
from .errors import ClassificationError

logger = logging.getLogger(__name__)


def _post_json(label: str, url: str, headers: Dict[str, str], payload: Dict[str, Any], timeout: int) -> Any:
    try:
        response = requests.post(url, headers=headers, json=payload, timeout=timeout)
    except requests.RequestException as exc:
        raise ClassificationError(f"{label} request failed: {exc}") from exc

    if not response.ok:
        logger.error("%s error %s: %s", label, response.status_code, response.text[:500])
        raise ClassificationError(f"{label} API error: {response.status_code}")

    try:
        return response.json()
    except ValueError as exc:
        raise _malformed(label) from exc


def _malformed(label: str) -> ClassificationError:
    return ClassificationError(f"{label} returned a malformed response body")


def _text_or_empty(label: str, value: Any) -> str:
    """``value`` if it is a string, ``""`` if missing; anything else is malformed."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _malformed(label)
    return value


class LLMProvider:
    """Base class for LLM providers."""

    label = "LLM"

    def generate(self, prompt: str, json_schema: Optional[Dict[str, Any]] = None) -> str:
        """Return the model's text reply to ``prompt``."""
        raise NotImplementedError


class OpenAIProvider(LLMProvider):
    """OpenAI API provider (also works with other OpenAI-compatible APIs)."""

    label = "OpenAI"

    def __init__(self, model: str, api_key: str, endpoint: str = "https://api.openai.com/v1/chat/completions"):
        self.model = model
        self.api_key = api_key
        self.endpoint = endpoint

    def generate(self, prompt: str, json_schema: Optional[Dict[str, Any]] = None) -> str:
        if not self.api_key:
            raise ClassificationError(f"{self.label} API key not configured")

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": 0.1,
        }
        if json_schema is not None:
            payload["response_format"] = {"type": "json_schema", "json_schema": json_schema}

        parsed = _post_json(
            self.label,
            self.endpoint,
            {
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}",
            },
            payload,
            timeout=60,
        )
        return self._extract_response(parsed)

    def _extract_response(self, parsed: Any) -> str:
        """Extract response text, handling reasoning models that return empty content."""
        try:
            msg = parsed["choices"][0]["message"]
        except (KeyError, IndexError, TypeError):
            return ""
        if not isinstance(msg, dict):
            raise _malformed(self.label)
        content = _text_or_empty(self.label, msg.get("content"))
        if content.strip():
            return content
        # Reasoning models put output in 'reasoning' field
        return _text_or_empty(self.label, msg.get("reasoning"))


class OpenRouterProvider(OpenAIProvider):
    """OpenRouter API provider (OpenAI-compatible, multi-model gateway)."""

    label = "OpenRouter"

    def __init__(self, model: str, api_key: str, endpoint: str = "https://openrouter.ai/api/v1/chat/completions"):
        super().__init__(model, api_key, endpoint)


class AnthropicProvider(LLMProvider):
    """Anthropic Claude API provider."""

    label = "Anthropic"

    def __init__(self, model: str, api_key: str):
        self.model = model
        self.api_key = api_key
        self.endpoint = "https://api.anthropic.com/v1/messages"

    def generate(self, prompt: str, json_schema: Optional[Dict[str, Any]] = None) -> str:
        if not self.api_key:
            raise ClassificationError(f"{self.label} API key not configured")

        parsed = _post_json(
            self.label,
            self.endpoint,
            {
                "Content-Type": "application/json",
                "x-api-key": self.api_key,
                "anthropic-version": "2023-06-01",
            },
            {
                "model": self.model,
                "messages": [{"role": "user", "content": prompt}],
                "max_tokens": 4096,
                "temperature": 0.1,
            },
            timeout=60,
        )
        try:
            text = parsed["content"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return ""
        return _text_or_empty(self.label, text)


class OllamaProvider(LLMProvider):
    """Ollama local LLM provider."""

    label = "Ollama"

    def __init__(self, model: str, endpoint: str):
        self.model = model
        self.endpoint = endpoint

    def generate(self, prompt: str, json_schema: Optional[Dict[str, Any]] = None) -> str:
        payload: Dict[str, Any] = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": 0.1},
        }
        if json_schema is not None:
            payload["format"] = json_schema.get("schema", "json")
        parsed = _post_json(self.label, self.endpoint, {"Content-Type": "application/json"}, payload, timeout=120)
        if not isinstance(parsed, dict):
            raise _malformed(self.label)
        return _text_or_empty(self.label, parsed.get("response"))


class LocalLLM:
    """Provider selection from explicit arguments or the TOML configuration."""

    def __init__(
        self,
        model: Optional[str] = None,
        provider: Optional[str] = None,
        api_key: Optional[str] = None,
        endpoint: Optional[str] = None,
    ):
        """Initialize LLM with provider selection.

        Args:
            model: Model name (defaults to config)
            provider: "openrouter", "openai", "anthropic" or "ollama" (defaults to config)
            api_key: API key for cloud providers (defaults to config / OPENROUTER_API_KEY)
            endpoint: Custom endpoint (defaults to config, then the provider's default)
        """
        self.provider_name = (provider or config.LLM_PROVIDER).lower()
        # Configured model, key and endpoint belong to the configured provider only
        if self.provider_name == config.LLM_PROVIDER.lower():
            default_model, default_key, default_endpoint = config.LLM_MODEL, config.LLM_API_KEY, config.LLM_ENDPOINT
        else:
            defaults = get_provider_config(self.provider_name)
            default_model, default_endpoint = defaults.get("model", ""), ""
            default_key = config.OPENROUTER_ENV_KEY if self.provider_name == "openrouter" else ""
        self.model = model or default_model
        self.api_key = api_key or default_key
        self.endpoint = endpoint or default_endpoint

        self.provider = self._create_provider()

    def _create_provider(self) -> LLMProvider:
        if self.provider_name == "openai":
            return OpenAIProvider(self.model, self.api_key, self.endpoint or "https://api.openai.com/v1/chat/completions")
        elif self.provider_name == "anthropic":
            return AnthropicProvider(self.model, self.api_key)
        elif self.provider_name == "ollama":
            return OllamaProvider(self.model, self.endpoint or "http://127.0.0.1:11434/api/generate")
        else:  # Default to OpenRouter
            return OpenRouterProvider(self.model, self.api_key, self.endpoint or "https://openrouter.ai/api/v1/chat/completions")

    def complete(self, prompt: str, json_schema: Optional[Dict[str, Any]] = None) -> str:
        """Generate a reply; an empty reply is an error."""
        text = self.provider.generate(prompt, json_schema)
        if not text or not text.strip():
            raise ClassificationError("No response from LLM")
        return text
