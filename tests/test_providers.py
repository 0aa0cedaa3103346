"""Tests for the Anthropic and OpenAI provider implementations.

LLM API clients are mocked at their construction point so no network
calls are made and no API keys are required.
"""

import base64
from unittest.mock import MagicMock, patch

import pytest

from vision_tool.prompt import QUESTION_PROMPT, RECOGNITION_PROMPT
from vision_tool.providers.anthropic import AnthropicProvider
from vision_tool.providers.base import BaseProvider
from vision_tool.providers.openai import OpenAIProvider

FAKE_IMAGE = b"fake-png-bytes"


def _content_types(content: list) -> list[str]:
    return [block["type"] for block in content]


class TestBaseProvider:
    def test_cannot_instantiate_without_both_operations(self):
        class RecognizeOnly(BaseProvider):
            def recognize(self, image):
                return ""

        with pytest.raises(TypeError):
            RecognizeOnly()


# ══════════════════════════════════════════════════════════════════════════
# AnthropicProvider
# ══════════════════════════════════════════════════════════════════════════


class TestAnthropicProvider:
    @pytest.fixture
    def mock_anthropic_client(self):
        """Patch anthropic.Anthropic so no real client is created."""
        with patch("vision_tool.providers.anthropic.anthropic.Anthropic") as MockCls:
            yield MockCls.return_value

    @pytest.fixture
    def provider(self, mock_anthropic_client):
        return AnthropicProvider(api_key="test-key", model="claude-test-model")

    def _stub_response(self, mock_client: MagicMock, text: str) -> None:
        response = MagicMock()
        response.content = [MagicMock(text=text)]
        mock_client.messages.create.return_value = response

    def _call_kwargs(self, mock_client: MagicMock) -> dict:
        return mock_client.messages.create.call_args.kwargs

    # ── Request layout ────────────────────────────────────────────────────

    def test_content_is_image_then_instruction(self, provider, mock_anthropic_client):
        self._stub_response(mock_anthropic_client, "result")
        provider.recognize(FAKE_IMAGE)
        content = self._call_kwargs(mock_anthropic_client)["messages"][0]["content"]
        assert _content_types(content) == ["image", "text"]

    def test_image_is_base64_png(self, provider, mock_anthropic_client):
        self._stub_response(mock_anthropic_client, "result")
        provider.recognize(FAKE_IMAGE)
        image_block = self._call_kwargs(mock_anthropic_client)["messages"][0]["content"][0]
        assert image_block["source"]["type"] == "base64"
        assert image_block["source"]["media_type"] == "image/png"
        assert base64.standard_b64decode(image_block["source"]["data"]) == FAKE_IMAGE

    def test_recognize_uses_recognition_prompt(self, provider, mock_anthropic_client):
        self._stub_response(mock_anthropic_client, "result")
        provider.recognize(FAKE_IMAGE)
        assert self._call_kwargs(mock_anthropic_client)["system"] == RECOGNITION_PROMPT

    def test_ask_uses_question_prompt_and_forwards_question(
        self, provider, mock_anthropic_client
    ):
        self._stub_response(mock_anthropic_client, "a cat")
        provider.ask(FAKE_IMAGE, "What animal is this?")
        kwargs = self._call_kwargs(mock_anthropic_client)
        assert kwargs["system"] == QUESTION_PROMPT
        assert kwargs["messages"][0]["content"][-1]["text"] == "What animal is this?"

    def test_uses_configured_model_and_max_tokens(self, mock_anthropic_client):
        provider = AnthropicProvider(api_key="k", model="claude-x", max_tokens=123)
        self._stub_response(mock_anthropic_client, "result")
        provider.recognize(FAKE_IMAGE)
        kwargs = self._call_kwargs(mock_anthropic_client)
        assert kwargs["model"] == "claude-x"
        assert kwargs["max_tokens"] == 123

    # ── Return value ──────────────────────────────────────────────────────

    def test_returns_text_from_response_content(self, provider, mock_anthropic_client):
        self._stub_response(mock_anthropic_client, "Line one\nLine two")
        assert provider.recognize(FAKE_IMAGE) == "Line one\nLine two"

    def test_returns_empty_string_when_reply_has_no_content(
        self, provider, mock_anthropic_client
    ):
        mock_anthropic_client.messages.create.return_value = MagicMock(content=[])
        assert provider.recognize(FAKE_IMAGE) == ""


# ══════════════════════════════════════════════════════════════════════════
# OpenAIProvider
# ══════════════════════════════════════════════════════════════════════════


class TestOpenAIProvider:
    @pytest.fixture
    def mock_openai_client(self):
        """Patch openai.OpenAI so no real client is created."""
        with patch("vision_tool.providers.openai.OpenAI") as MockCls:
            yield MockCls.return_value

    @pytest.fixture
    def provider(self, mock_openai_client):
        return OpenAIProvider(api_key="test-key", model="gpt-test-model")

    def _stub_response(self, mock_client: MagicMock, text) -> None:
        response = MagicMock()
        response.choices = [MagicMock(message=MagicMock(content=text))]
        mock_client.chat.completions.create.return_value = response

    def _messages(self, mock_client: MagicMock) -> list:
        return mock_client.chat.completions.create.call_args.kwargs["messages"]

    # ── Request layout ────────────────────────────────────────────────────

    def test_content_is_image_then_instruction(self, provider, mock_openai_client):
        self._stub_response(mock_openai_client, "result")
        provider.recognize(FAKE_IMAGE)
        assert _content_types(self._messages(mock_openai_client)[1]["content"]) == [
            "image_url", "text",
        ]

    def test_image_is_base64_data_url_with_high_detail(self, provider, mock_openai_client):
        self._stub_response(mock_openai_client, "result")
        provider.recognize(FAKE_IMAGE)
        image_block = self._messages(mock_openai_client)[1]["content"][0]
        url = image_block["image_url"]["url"]
        assert url.startswith("data:image/png;base64,")
        assert base64.b64decode(url.split(",", 1)[1]) == FAKE_IMAGE
        assert image_block["image_url"]["detail"] == "high"

    def test_recognize_sends_recognition_system_message(self, provider, mock_openai_client):
        self._stub_response(mock_openai_client, "result")
        provider.recognize(FAKE_IMAGE)
        messages = self._messages(mock_openai_client)
        assert messages[0] == {"role": "system", "content": RECOGNITION_PROMPT}

    def test_ask_sends_question(self, provider, mock_openai_client):
        self._stub_response(mock_openai_client, "blue")
        answer = provider.ask(FAKE_IMAGE, "What colour is the sky?")
        messages = self._messages(mock_openai_client)
        assert messages[0]["content"] == QUESTION_PROMPT
        assert messages[1]["content"][-1]["text"] == "What colour is the sky?"
        assert answer == "blue"

    def test_uses_the_configured_model(self, provider, mock_openai_client):
        self._stub_response(mock_openai_client, "result")
        provider.recognize(FAKE_IMAGE)
        kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test-model"

    # ── Return value ──────────────────────────────────────────────────────

    def test_returns_empty_string_when_content_is_none(self, provider, mock_openai_client):
        self._stub_response(mock_openai_client, None)
        assert provider.recognize(FAKE_IMAGE) == ""
