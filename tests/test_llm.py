"""Tests for the LLM provider adapters with HTTP stubbed out."""

import pytest
import requests

from clarity_cli import config
from clarity_cli.errors import ClassificationError
from clarity_cli.llm import (
    AnthropicProvider,
    LocalLLM,
    OllamaProvider,
    OpenAIProvider,
    OpenRouterProvider,
)


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=""):
        self.status_code = status_code
        self._body = body
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("no JSON")
        return self._body


@pytest.fixture
def captured(monkeypatch):
    """Patch ``requests.post``; set ``captured['response']`` before calling."""
    calls = {"response": FakeResponse(body={})}

    def _post(url, headers=None, json=None, timeout=None):
        calls.update(url=url, headers=headers, json=json, timeout=timeout)
        response = calls["response"]
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr("clarity_cli.llm.requests.post", _post)
    return calls


def _chat(content, reasoning=None):
    message = {"content": content}
    if reasoning is not None:
        message["reasoning"] = reasoning
    return {"choices": [{"message": message}]}


class TestOpenRouter:
    def test_sends_schema_and_bearer_token(self, captured):
        captured["response"] = FakeResponse(body=_chat('{"classifications": []}'))
        provider = OpenRouterProvider("anthropic/claude-sonnet-4", "sk-test")
        schema = {"name": "x", "schema": {"type": "object"}}

        assert provider.generate("hello", schema) == '{"classifications": []}'
        assert captured["url"] == "https://openrouter.ai/api/v1/chat/completions"
        assert captured["headers"]["Authorization"] == "Bearer sk-test"
        assert captured["json"]["response_format"] == {"type": "json_schema", "json_schema": schema}
        assert captured["json"]["messages"] == [{"role": "user", "content": "hello"}]

    def test_missing_key(self, captured):
        with pytest.raises(ClassificationError, match="OpenRouter API key not configured"):
            OpenRouterProvider("m", "").generate("hello")
        assert "url" not in captured

    def test_http_error_status(self, captured):
        captured["response"] = FakeResponse(status_code=429, text="rate limited")
        with pytest.raises(ClassificationError, match="OpenRouter API error: 429"):
            OpenRouterProvider("m", "k").generate("hello")

    def test_transport_failure(self, captured):
        captured["response"] = requests.ConnectionError("refused")
        with pytest.raises(ClassificationError, match="OpenRouter request failed"):
            OpenRouterProvider("m", "k").generate("hello")

    def test_malformed_body(self, captured):
        captured["response"] = FakeResponse(body=None)
        with pytest.raises(ClassificationError, match="malformed response body"):
            OpenRouterProvider("m", "k").generate("hello")

    def test_reasoning_fallback(self, captured):
        captured["response"] = FakeResponse(body=_chat("", reasoning="{}"))
        assert OpenAIProvider("m", "k").generate("hello") == "{}"


def test_anthropic_payload(captured):
    captured["response"] = FakeResponse(body={"content": [{"text": "reply"}]})
    assert AnthropicProvider("claude", "key").generate("hello") == "reply"
    assert captured["headers"]["x-api-key"] == "key"
    assert captured["json"]["max_tokens"] == 4096


def test_ollama_uses_schema_as_format(captured):
    captured["response"] = FakeResponse(body={"response": "{}"})
    provider = OllamaProvider("qwen", "http://localhost:11434/api/generate")
    assert provider.generate("hello", {"schema": {"type": "object"}}) == "{}"
    assert captured["json"]["format"] == {"type": "object"}
    assert captured["json"]["stream"] is False


class TestLocalLLM:
    def test_provider_selection(self):
        assert isinstance(LocalLLM(model="m", provider="openai", api_key="k").provider, OpenAIProvider)
        assert isinstance(LocalLLM(model="m", provider="anthropic", api_key="k").provider, AnthropicProvider)
        assert isinstance(LocalLLM(model="m", provider="ollama").provider, OllamaProvider)
        assert isinstance(LocalLLM(model="m", provider="mystery", api_key="k").provider, OpenRouterProvider)

    def test_empty_reply_is_an_error(self, captured):
        captured["response"] = FakeResponse(body=_chat("   "))
        llm = LocalLLM(model="m", provider="openrouter", api_key="k", endpoint="https://example.test/v1")
        with pytest.raises(ClassificationError, match="No response from LLM"):
            llm.complete("hello")
        assert captured["url"] == "https://example.test/v1"

    def test_key_falls_back_to_config(self, monkeypatch):
        monkeypatch.setattr(config, "LLM_PROVIDER", "openrouter")
        monkeypatch.setattr(config, "LLM_API_KEY", "from-config")
        assert LocalLLM(model="m", provider="openrouter").api_key == "from-config"

    def test_other_provider_ignores_configured_endpoint(self, monkeypatch):
        monkeypatch.setattr(config, "LLM_PROVIDER", "openrouter")
        monkeypatch.setattr(config, "LLM_MODEL", "anthropic/claude-sonnet-4")
        monkeypatch.setattr(config, "LLM_API_KEY", "or-config-key")
        monkeypatch.setattr(config, "LLM_ENDPOINT", "https://openrouter.ai/api/v1/chat/completions")

        llm = LocalLLM(provider="openai", api_key="k")
        assert llm.provider.endpoint == "https://api.openai.com/v1/chat/completions"
        assert llm.model == "gpt-4o"
        assert LocalLLM(provider="openai").api_key == ""
        assert LocalLLM(provider="ollama").provider.endpoint == "http://127.0.0.1:11434/api/generate"

    def test_configured_provider_keeps_configured_endpoint(self, monkeypatch):
        monkeypatch.setattr(config, "LLM_PROVIDER", "openai")
        monkeypatch.setattr(config, "LLM_ENDPOINT", "https://proxy.example.test/v1/chat")
        assert LocalLLM(provider="OpenAI", api_key="k").provider.endpoint == "https://proxy.example.test/v1/chat"

    def test_openrouter_env_key_only_for_openrouter(self, monkeypatch):
        monkeypatch.setattr(config, "LLM_PROVIDER", "anthropic")
        monkeypatch.setattr(config, "LLM_API_KEY", "")
        monkeypatch.setattr(config, "OPENROUTER_ENV_KEY", "or-key")
        assert LocalLLM(provider="openrouter").api_key == "or-key"
        assert LocalLLM(provider="openai").api_key == ""
        assert LocalLLM(provider="anthropic").api_key == ""


class TestMalformedBodies:
    """Well-formed JSON of the wrong shape is a classification failure."""

    @pytest.mark.parametrize(
        "body",
        [
            {"choices": [{"message": None}]},
            {"choices": [{"message": {"content": 5}}]},
            {"choices": [{"message": {"content": None, "reasoning": ["x"]}}]},
        ],
    )
    def test_openai_shapes(self, captured, body):
        captured["response"] = FakeResponse(body=body)
        with pytest.raises(ClassificationError, match="malformed response body"):
            OpenAIProvider("m", "k").generate("hello")

    def test_anthropic_non_string_text(self, captured):
        captured["response"] = FakeResponse(body={"content": [{"text": 5}]})
        with pytest.raises(ClassificationError, match="malformed response body"):
            AnthropicProvider("claude", "key").generate("hello")

    def test_ollama_list_body(self, captured):
        captured["response"] = FakeResponse(body=[])
        with pytest.raises(ClassificationError, match="malformed response body"):
            OllamaProvider("qwen", "http://localhost:11434/api/generate").generate("hello")

    def test_ollama_non_string_response(self, captured):
        captured["response"] = FakeResponse(body={"response": {"a": 1}})
        with pytest.raises(ClassificationError, match="malformed response body"):
            OllamaProvider("qwen", "http://localhost:11434/api/generate").generate("hello")

    def test_missing_content_reads_as_empty(self, captured):
        captured["response"] = FakeResponse(body={"choices": [{"message": {}}]})
        assert OpenAIProvider("m", "k").generate("hello") == ""
