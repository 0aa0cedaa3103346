"""OpenAI GPT-4o vision provider."""

import base64
import logging
from typing import Any

from openai import OpenAI

from vision_tool.providers.base import BaseProvider
from vision_tool.prompt import QUESTION_PROMPT, RECOGNITION_PROMPT

logger = logging.getLogger(__name__)


class OpenAIProvider(BaseProvider):
    def __init__(self, api_key: str, model: str, max_tokens: int = 2048) -> None:
        self.client = OpenAI(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens

    def recognize(self, image: bytes) -> str:
        return self._complete(RECOGNITION_PROMPT, image, "Transcribe all text in this image.")

    def ask(self, image: bytes, question: str) -> str:
        return self._complete(QUESTION_PROMPT, image, question)

    def _complete(self, system: str, image: bytes, instruction: str) -> str:
        b64 = base64.standard_b64encode(image).decode("utf-8")
        content: list[Any] = [
            {
                "type": "image_url",
                "image_url": {
                    "url": f"data:image/png;base64,{b64}",
                    "detail": "high",
                },
            },
            {"type": "text", "text": instruction},
        ]

        logger.debug("Sending %d image bytes to %s", len(image), self.model)
        response = self.client.chat.completions.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": content},
            ],
        )

        return response.choices[0].message.content or ""
