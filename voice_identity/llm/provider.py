"""Abstract base class for generation providers."""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Type

from ..config import LLMConfig, LLMProviderConfig
from ..utils.logging import get_logger, log_llm_call

logger = get_logger(__name__)


class LLMError(Exception):
    """Base exception for LLM-related errors."""
    pass


class LLMRateLimitError(LLMError):
    """Raised when rate limit is hit."""
    pass


class LLMTimeoutError(LLMError):
    """Raised when request times out."""
    pass


class LLMResponseError(LLMError):
    """Raised when response is malformed or empty."""
    pass


class MessageRole(Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class Message:
    role: MessageRole
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role.value, "content": self.content}


@dataclass
class LLMResponse:
    content: str
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0


class LLMProvider(ABC):
    """Abstract base class for generation providers.

    Implementations must provide:
    - provider_name: Registry name of the provider
    - _call_api: Make the actual API call

    A call is attempted once. Rate limits, timeouts and malformed responses
    surface to the caller as ``LLMError`` subclasses.
    """

    def __init__(self, config: LLMProviderConfig):
        self.config = config
        self._total_input_tokens = 0
        self._total_output_tokens = 0
        self._total_calls = 0

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of this provider."""
        pass

    @property
    def model(self) -> str:
        return self.config.model

    @abstractmethod
    def _call_api(
        self,
        messages: List[Message],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        """Make the actual API call.

        Raises:
            LLMRateLimitError: If rate limit is hit.
            LLMTimeoutError: If request times out.
            LLMResponseError: If response is invalid.
            LLMError: For other errors.
        """
        pass

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Generate one completion from a system and user prompt.

        Args:
            system_prompt: Instructions for the rewrite.
            user_prompt: The text to rewrite.
            temperature: Sampling temperature (config default if None).
            max_tokens: Maximum tokens in response (config default if None).

        Returns:
            Generated text, stripped of surrounding whitespace.

        Raises:
            LLMError: If the call fails or returns nothing.
        """
        messages = [
            Message(role=MessageRole.SYSTEM, content=system_prompt),
            Message(role=MessageRole.USER, content=user_prompt),
        ]
        start_time = time.time()
        try:
            response = self._call_api(messages, temperature, max_tokens)
            content = (response.content or "").strip()
            if not content:
                raise LLMResponseError(f"{self.provider_name} returned an empty completion")
        except LLMError as e:
            log_llm_call(
                logger=logger,
                provider=self.provider_name,
                model=self.model,
                input_tokens=0,
                output_tokens=0,
                duration_ms=int((time.time() - start_time) * 1000),
                success=False,
                error=str(e),
            )
            raise

        self._total_input_tokens += response.input_tokens
        self._total_output_tokens += response.output_tokens
        self._total_calls += 1

        log_llm_call(
            logger=logger,
            provider=self.provider_name,
            model=response.model or self.model,
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
            duration_ms=int((time.time() - start_time) * 1000),
            success=True,
        )
        return content

    def get_usage_stats(self) -> Dict[str, int]:
        """Get cumulative usage statistics."""
        return {
            "total_input_tokens": self._total_input_tokens,
            "total_output_tokens": self._total_output_tokens,
            "total_tokens": self._total_input_tokens + self._total_output_tokens,
            "total_calls": self._total_calls,
        }

    def reset_usage_stats(self) -> None:
        """Reset usage statistics."""
        self._total_input_tokens = 0
        self._total_output_tokens = 0
        self._total_calls = 0


# Provider registry for factory function
_provider_registry: Dict[str, Type[LLMProvider]] = {}


def register_provider(name: str):
    """Decorator to register an LLM provider class."""
    def decorator(cls: Type[LLMProvider]):
        _provider_registry[name] = cls
        return cls
    return decorator


def get_provider(name: str, config: LLMProviderConfig) -> LLMProvider:
    """Get an LLM provider instance by name.

    Raises:
        ValueError: If provider name is unknown.
    """
    if name not in _provider_registry:
        available = ", ".join(sorted(_provider_registry.keys()))
        raise ValueError(f"Unknown LLM provider: {name}. Available: {available}")

    return _provider_registry[name](config)


def create_generation_provider(llm_config: LLMConfig) -> LLMProvider:
    """Create the provider that writes refinement candidates."""
    provider_name = llm_config.get_generation_provider()
    provider_config = llm_config.get_provider_config(provider_name)
    logger.info(f"Using '{provider_name}' provider for generation")
    return get_provider(provider_name, provider_config)
