"""Anthropic Claude vision provider."""

import base64
import logging
from typing import Any

import anthropic

from vision_tool.providers.base import BaseProvider
from vision_tool.prompt import QUESTION_PROMPT, RECOGNITION_PROMPT

logger = logging.getLogger(__name__)


class AnthropicProvider(BaseProvider):
    def __init__(self, api_key: str, model: str, max_tokens: int = 2048) -> None:
        self.client = anthropic.Anthropic(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens

    def recognize(self, image: bytes) -> str:
        return self._complete(RECOGNITION_PROMPT, image, "Transcribe all text in this image.")

    def ask(self, image: bytes, question: str) -> str:
        return self._complete(QUESTION_PROMPT, image, question)

    def _complete(self, system: str, image: bytes, instruction: str) -> str:
        content: list[Any] = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": "image/png",
                    "data": base64.standard_b64encode(image).decode("utf-8"),
                },
            },
            {"type": "text", "text": instruction},
        ]

        logger.debug("Sending %d image bytes to %s", len(image), self.model)
        response = self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=system,
            messages=[{"role": "user", "content": content}],
        )

        if not response.content:
            logger.debug("Empty reply from %s", self.model)
            return ""
        return response.content[0].text
