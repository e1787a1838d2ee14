# =============================================================================
# llm/__init__.py - Language Model Integration
# =============================================================================
# OpenAI client wrapper, prompt templates and language helpers.
# =============================================================================

from llm.client import LLMClient, LLMError, get_llm_client

__all__ = [
    "LLMClient",
    "LLMError",
    "get_llm_client",
]
