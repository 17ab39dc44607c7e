"""Gemini API adapter - HTTP client for hosted text generation."""

import logging

import requests

API_BASE = "https://generativelanguage.googleapis.com/v1beta"

logger = logging.getLogger(__name__)


class GeminiModelService:
    """
    Hosted Gemini adapter.

    Implements LLMService protocol. One generateContent call per prompt,
    no business logic - just I/O.
    """

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash", timeout: int = 60):
        if not api_key:
            raise RuntimeError("No Gemini API key. Set GEMINI_API_KEY in focusbank.conf.")
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._session = requests.Session()

    def generate(self, prompt: str) -> str:
        """Generate text from a prompt. Returns complete response."""
        try:
            resp = self._session.post(
                f"{API_BASE}/models/{self.model}:generateContent",
                params={"key": self.api_key},
                json={"contents": [{"parts": [{"text": prompt}]}]},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise RuntimeError(f"Gemini request failed: {e}")

        if resp.status_code != 200:
            logger.error(f"Gemini API error {resp.status_code}: {resp.text}")
            raise RuntimeError(f"Gemini API error {resp.status_code}")

        data = resp.json()
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError):
            raise RuntimeError("No response from Gemini")
        return "".join(p.get("text", "") for p in parts)
