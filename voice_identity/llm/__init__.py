"""LLM provider abstraction layer."""

from .provider import (
    LLMProvider,
    LLMError,
    LLMRateLimitError,
    LLMTimeoutError,
    LLMResponseError,
    LLMResponse,
    Message,
    MessageRole,
    get_provider,
    create_generation_provider,
    register_provider,
)

# Import providers to register them
from . import openai_compat
from . import ollama

__all__ = [
    "LLMProvider",
    "LLMError",
    "LLMRateLimitError",
    "LLMTimeoutError",
    "LLMResponseError",
    "LLMResponse",
    "Message",
    "MessageRole",
    "get_provider",
    "create_generation_provider",
    "register_provider",
]
