"""LLM provider interface, Gemini implementation and the process-wide handle."""

from __future__ import annotations

import logging
import threading
import time
from typing import Protocol

from google import genai
from google.genai import types

from archflow import config

logger = logging.getLogger(__name__)


class GenerationProvider(Protocol):
    """Protocol for text generation providers."""

    def generate(self, prompt: str, system: str | None = None, json_output: bool = False) -> str:
        """Generate text from a prompt, returning the response string."""
        ...


class GeminiProvider:
    """Gemini implementation of text generation."""

    def __init__(
        self,
        api_key: str | None = None,
        generation_model: str | None = None,
    ) -> None:
        self._client = genai.Client(api_key=api_key or config.GEMINI_API_KEY)
        self._generation_model = generation_model or config.GEMINI_MODEL

    @property
    def model(self) -> str:
        return self._generation_model

    def generate(self, prompt: str, system: str | None = None, json_output: bool = False) -> str:
        """Generate text using Gemini.

        Args:
            prompt: The user prompt.
            system: Optional system instruction.
            json_output: Ask the model for a JSON response body.

        Returns:
            The generated text response ("" when the model returns nothing).
        """
        logger.debug(
            "Generate via %s (%d char prompt, json=%s)",
            self._generation_model, len(prompt), json_output,
        )
        t0 = time.perf_counter()
        gen_config = None
        if system or json_output:
            gen_config = types.GenerateContentConfig(
                system_instruction=system,
                response_mime_type="application/json" if json_output else None,
            )
        response = self._client.models.generate_content(
            model=self._generation_model,
            contents=prompt,
            config=gen_config,
        )
        text = response.text or ""
        logger.debug("Generate complete: %d chars, %.0fms", len(text), (time.perf_counter() - t0) * 1000)
        return text


# Constructed on first use, then only read
_provider: GenerationProvider | None = None
_provider_lock = threading.Lock()


def get_provider() -> GenerationProvider:
    """Return the process-wide provider, creating it on first call."""
    global _provider
    if _provider is None:
        with _provider_lock:
            if _provider is None:
                logger.info("Initializing generation provider (%s)...", config.GEMINI_MODEL)
                _provider = GeminiProvider()
    return _provider
