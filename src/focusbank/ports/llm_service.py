"""LLM service interface."""

from typing import Protocol


class LLMService(Protocol):
    """Interface for LLM text generation, used for categorizing and summarizing."""

    def generate(self, prompt: str) -> str:
        """Generate text from a prompt. Returns complete response."""
        ...
