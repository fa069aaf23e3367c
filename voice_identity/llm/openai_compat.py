"""OpenAI-compatible chat completion providers."""

from typing import List, Optional

import requests

from .provider import (
    LLMError,
    LLMProvider,
    LLMRateLimitError,
    LLMResponse,
    LLMResponseError,
    LLMTimeoutError,
    Message,
    register_provider,
)


@register_provider("openai")
class OpenAICompatibleProvider(LLMProvider):
    """Provider for any ``/chat/completions`` endpoint."""

    default_base_url = "https://api.openai.com/v1"

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def api_url(self) -> str:
        base_url = (self.config.base_url or self.default_base_url).rstrip("/")
        return f"{base_url}/chat/completions"

    def _call_api(
        self,
        messages: List[Message],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        if not self.config.api_key:
            raise LLMError(f"{self.provider_name} API key not configured")

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
        }
        payload = {
            "model": self.config.model,
            "messages": [m.to_dict() for m in messages],
            "temperature": temperature if temperature is not None else self.config.temperature,
            "max_tokens": max_tokens if max_tokens is not None else self.config.max_tokens,
        }

        try:
            response = requests.post(self.api_url, headers=headers, json=payload, timeout=self.config.timeout)
            response.raise_for_status()
            result = response.json()
        except requests.exceptions.Timeout as e:
            raise LLMTimeoutError(f"{self.provider_name} request timed out: {e}")
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status == 429:
                raise LLMRateLimitError(f"{self.provider_name} rate limit hit")
            detail = e.response.text[:500] if e.response is not None else str(e)
            raise LLMError(f"{self.provider_name} API {status}: {detail}")
        except requests.exceptions.RequestException as e:
            raise LLMError(f"{self.provider_name} API request failed: {e}")
        except ValueError as e:
            raise LLMResponseError(f"{self.provider_name} returned invalid JSON: {e}")

        try:
            content = result["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise LLMResponseError(f"{self.provider_name} response format unexpected: {str(result)[:500]}")

        usage = result.get("usage") or {}
        return LLMResponse(
            content=content or "",
            model=result.get("model", self.config.model),
            input_tokens=usage.get("prompt_tokens", 0),
            output_tokens=usage.get("completion_tokens", 0),
        )


@register_provider("deepseek")
class DeepSeekProvider(OpenAICompatibleProvider):
    default_base_url = "https://api.deepseek.com"

    @property
    def provider_name(self) -> str:
        return "deepseek"
