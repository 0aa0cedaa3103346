"""Abstract base for vision LLM providers."""

from abc import ABC, abstractmethod


class BaseProvider(ABC):
    @abstractmethod
    def recognize(self, image: bytes) -> str:
        """Return the raw text visible in *image* (PNG bytes)."""
        ...

    @abstractmethod
    def ask(self, image: bytes, question: str) -> str:
        """Answer a natural-language *question* about *image* (PNG bytes)."""
        ...
