from __future__ import annotations

from typing import Any, Optional

import anthropic
import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from .config import Settings
from .errors import ExternalCallError, ResponseFormatError
from .retry import with_retry


class GeminiBackend:
    """Text completions from Google Gemini."""

    def __init__(self, api_key: str, model_name: str, model: Any = None, retries: int = 3, backoff: float = 2.0):
        self.model_name = model_name
        self.retries = retries
        self.backoff = backoff
        if model is None:
            genai.configure(api_key=api_key)
            model = genai.GenerativeModel(model_name)
        self._model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiBackend":
        settings.require_gemini()
        return cls(
            settings.gemini_api_key,
            settings.gemini_model,
            retries=settings.retries,
            backoff=settings.backoff_seconds,
        )

    def _generate_once(self, prompt: str):
        try:
            return self._model.generate_content(prompt)
        except google_exceptions.GoogleAPIError as e:
            retryable = not isinstance(e, google_exceptions.ClientError) or isinstance(
                e, google_exceptions.TooManyRequests
            )
            raise ExternalCallError(f"Gemini request failed: {e}", retryable=retryable) from e

    def generate(self, prompt: str, system: str | None = None) -> str:
        print(f"🤖 Generating with {self.model_name}...")
        if system:
            prompt = f"{system}\n\n{prompt}"
        response = with_retry(self._generate_once, prompt, max_retries=self.retries, base_delay=self.backoff)
        try:
            result = response.text
        except ValueError as e:
            # No text part: the candidate was blocked or empty.
            raise ResponseFormatError(f"Gemini returned no text: {e}") from e
        result = (result or "").strip()
        print(f"   ✅ Received {len(result)} characters")
        return result


class AnthropicBackend:
    """Text completions from Anthropic Claude with a fixed system instruction."""

    def __init__(
        self,
        api_key: str,
        model_name: str,
        max_tokens: int = 4000,
        temperature: float = 0.2,
        client: Optional[anthropic.Anthropic] = None,
        retries: int = 3,
        backoff: float = 2.0,
    ):
        self.model_name = model_name
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.retries = retries
        self.backoff = backoff
        self._client = client or anthropic.Anthropic(api_key=api_key)

    @classmethod
    def from_settings(cls, settings: Settings) -> "AnthropicBackend":
        settings.require_anthropic()
        return cls(
            settings.anthropic_api_key,
            settings.anthropic_model,
            max_tokens=settings.anthropic_max_tokens,
            temperature=settings.anthropic_temperature,
            retries=settings.retries,
            backoff=settings.backoff_seconds,
        )

    def _create_once(self, prompt: str, system: str | None):
        kwargs = {
            "model": self.model_name,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            kwargs["system"] = system
        try:
            return self._client.messages.create(**kwargs)
        except anthropic.APIStatusError as e:
            raise ExternalCallError(
                f"Anthropic request failed ({e.status_code}): {e}",
                retryable=e.status_code == 429 or e.status_code >= 500,
            ) from e
        except anthropic.APIError as e:
            raise ExternalCallError(f"Anthropic request failed: {e}") from e

    def generate(self, prompt: str, system: str | None = None) -> str:
        print(f"🤖 Generating with {self.model_name} (max_tokens={self.max_tokens}, temperature={self.temperature})...")
        message = with_retry(self._create_once, prompt, system, max_retries=self.retries, base_delay=self.backoff)
        content = getattr(message, "content", None) or []
        if not content or getattr(content[0], "type", None) != "text":
            kind = getattr(content[0], "type", None) if content else "empty"
            raise ResponseFormatError(f"Unexpected response format from Anthropic API: {kind} content")
        result = content[0].text
        print(f"   ✅ Received {len(result)} characters")
        return result
