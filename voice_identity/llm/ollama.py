"""Ollama local model provider."""

from typing import List, Optional

import requests

from .provider import (
    LLMError,
    LLMProvider,
    LLMResponse,
    LLMResponseError,
    LLMTimeoutError,
    Message,
    register_provider,
)


@register_provider("ollama")
class OllamaProvider(LLMProvider):
    """Provider for a local Ollama server's ``/api/chat`` endpoint."""

    @property
    def provider_name(self) -> str:
        return "ollama"

    @property
    def api_url(self) -> str:
        base_url = (self.config.base_url or "http://localhost:11434").rstrip("/")
        return f"{base_url}/api/chat"

    def _call_api(
        self,
        messages: List[Message],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> LLMResponse:
        data = {
            "model": self.config.model,
            "messages": [m.to_dict() for m in messages],
            "stream": False,
            "options": {
                "temperature": temperature if temperature is not None else self.config.temperature,
                "num_predict": max_tokens if max_tokens is not None else self.config.max_tokens,
            },
        }

        try:
            response = requests.post(self.api_url, json=data, timeout=self.config.timeout)
            response.raise_for_status()
            result = response.json()
        except requests.exceptions.Timeout as e:
            raise LLMTimeoutError(f"Ollama request timed out: {e}")
        except requests.exceptions.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                raise LLMError(f"Ollama API 404: Model '{self.config.model}' not found or endpoint incorrect.")
            raise LLMError(f"Ollama API request failed: {e}")
        except requests.exceptions.RequestException as e:
            raise LLMError(f"Ollama API request failed: {e}")
        except ValueError as e:
            raise LLMResponseError(f"Ollama returned invalid JSON: {e}")

        message = result.get("message") if isinstance(result, dict) else None
        if not isinstance(message, dict):
            raise LLMResponseError(f"Ollama response format unexpected: {str(result)[:500]}")

        return LLMResponse(
            content=message.get("content", ""),
            model=result.get("model", self.config.model),
            input_tokens=result.get("prompt_eval_count", 0),
            output_tokens=result.get("eval_count", 0),
        )
