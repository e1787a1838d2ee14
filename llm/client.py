# =============================================================================
# llm/client.py - OpenAI Chat Completions Wrapper
# =============================================================================
# One place that talks to OpenAI. Feature code asks for either plain text or
# a parsed JSON object and gets an LLMError with an actionable message when
# anything goes wrong.
#
# Usage:
#   from llm.client import get_llm_client
#   text = get_llm_client().complete_text(messages, max_tokens=350)
#   data = get_llm_client().complete_json(messages)
# =============================================================================

from __future__ import annotations

import json
import logging
from typing import Any

import openai
from openai import OpenAI

from app.config import settings
from lib.utils import ApplicationError

logger = logging.getLogger(__name__)


# =============================================================================
# Exceptions
# =============================================================================

class LLMError(ApplicationError):
    """
    Error while calling the language model.

    Attributes:
        rate_limited: True when OpenAI rejected the call with a rate limit
    """

    def __init__(self, message: str, rate_limited: bool = False, **kwargs: Any):
        super().__init__(message, code="LLM_RATE_LIMITED" if rate_limited else "LLM_ERROR", **kwargs)
        self.rate_limited = rate_limited


# =============================================================================
# Client
# =============================================================================

class LLMClient:
    """
    Wrapper around OpenAI chat completions.

    Attributes:
        model: Default model (settings.OPENAI_MODEL)
        fast_model: Cheaper model for chat and translations
    """

    def __init__(self, client: OpenAI | None = None):
        self.client = client or OpenAI(api_key=settings.OPENAI_API_KEY)
        self.model = settings.OPENAI_MODEL
        self.fast_model = settings.OPENAI_FAST_MODEL

        logger.info(f"LLMClient initialized with model={self.model}, fast_model={self.fast_model}")

    def _create(self, messages: list[dict[str, str]], model: str | None, **params: Any) -> str:
        model = model or self.model
        try:
            response = self.client.chat.completions.create(
                model=model,
                messages=messages,
                **params,
            )
        except openai.RateLimitError as e:
            raise LLMError(
                message=f"OpenAI rate limit: {e}",
                rate_limited=True,
                suggestion="Wait a few seconds and retry",
            )
        except openai.OpenAIError as e:
            raise LLMError(
                message=f"OpenAI API call failed: {e}",
                suggestion="Check OPENAI_API_KEY and your OpenAI account status",
                details={"model": model},
            )

        content = response.choices[0].message.content if response.choices else None
        logger.debug(f"OpenAI response ({model}): {(content or '')[:200]}")
        return (content or "").strip()

    def complete_text(
        self,
        messages: list[dict[str, str]],
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """
        Run a chat completion and return the assistant text.

        Raises:
            LLMError: If the API call fails or returns no text
        """
        params: dict[str, Any] = {}
        if temperature is not None:
            params["temperature"] = temperature
        if max_tokens is not None:
            params["max_tokens"] = max_tokens

        text = self._create(messages, model, **params)
        if not text:
            raise LLMError(message="OpenAI returned an empty response", details={"model": model or self.model})
        return text

    def complete_json(
        self,
        messages: list[dict[str, str]],
        model: str | None = None,
        temperature: float | None = None,
    ) -> dict[str, Any]:
        """
        Run a chat completion in JSON mode and parse the object.

        Raises:
            LLMError: If the call fails or the reply isn't a JSON object
        """
        params: dict[str, Any] = {"response_format": {"type": "json_object"}}
        if temperature is not None:
            params["temperature"] = temperature

        raw = self._create(messages, model, **params)
        try:
            parsed = json.loads(raw or "{}")
        except json.JSONDecodeError as e:
            raise LLMError(
                message=f"OpenAI returned invalid JSON: {e}",
                details={"raw": raw[:500]},
            )
        if not isinstance(parsed, dict):
            raise LLMError(message="OpenAI returned JSON that is not an object", details={"raw": raw[:500]})
        return parsed


# Lazy-loaded shared client
_client: LLMClient | None = None


def get_llm_client() -> LLMClient:
    """Get or create the process-wide LLMClient."""
    global _client
    if _client is None:
        _client = LLMClient()
    return _client
