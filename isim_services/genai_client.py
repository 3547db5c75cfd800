# genai_client.py
# Thin Gemini client used by the name classifier

# Wraps google-genai's Client with the configured API key, model name and an
# explicit request timeout. Failures are raised as UpstreamError without any
# retry; a missing key raises ConfigurationError at first use so the
# catalogue endpoints keep working on deployments without a key.

# @see: isim_services/classifier.py - Sole caller
# @note: Set GOOGLE_API_KEY (and optionally GEMINI_MODEL, GEMINI_TIMEOUT_SECONDS)

from __future__ import annotations

from typing import Any, Optional

from google import genai
from google.genai import types

from isim_api.errors import ConfigurationError, UpstreamError
from isim_api.logging_config import get_logger

logger = get_logger("genai")

GENERATION_TEMPERATURE = 0.2
MAX_OUTPUT_TOKENS = 1024


class GenAIClient:
    """Prompt in, text out."""

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str,
        timeout_seconds: float = 20.0,
        client: Any = None,
    ):
        self.api_key = api_key
        self.model_name = model_name
        self.timeout_seconds = timeout_seconds
        self._client = client

    def _get_client(self):
        if self._client is not None:
            return self._client

        if not self.api_key:
            logger.error("GOOGLE_API_KEY is not configured")
            raise ConfigurationError("API key not configured")

        self._client = genai.Client(
            api_key=self.api_key,
            http_options=types.HttpOptions(timeout=int(self.timeout_seconds * 1000)),
        )
        return self._client

    def generate_text(self, prompt: str) -> str:
        """
        Send one prompt and return the raw reply text.

        Raises:
            ConfigurationError: No API key configured
            UpstreamError: Transport, auth or model failure (incl. timeout)
        """
        client = self._get_client()
        try:
            response = client.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=GENERATION_TEMPERATURE,
                    max_output_tokens=MAX_OUTPUT_TOKENS,
                ),
            )
        except Exception as e:
            logger.error(f"Gemini request failed: {e}", exc_info=True)
            if "API key" in str(e):
                raise UpstreamError(
                    "Invalid or missing API key",
                    error="API authentication failed",
                ) from e
            raise UpstreamError(str(e) or "An unexpected error occurred") from e

        return response.text or ""
