"""LLM provider backends - one blocking completion call per request."""

import time
from typing import Protocol

import google.generativeai as genai
import httpx
import pybreaker
from pydantic import BaseModel, ConfigDict, Field

from uigen.core import get_logger
from .config import LLMConfig

logger = get_logger(__name__)


class LLMError(Exception):
    """Provider call failed (transport, status or breaker)."""

    pass


class LLMResponse(BaseModel):
    """Single completion result."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    content: str
    tokens_used: int = Field(default=0, alias="tokensUsed")
    duration_ms: int = Field(default=0, alias="durationMs")


class LLMBackend(Protocol):
    """Anything that can answer a single prompt."""

    def complete(self, prompt: str, *, temperature: float, max_tokens: int | None = None) -> LLMResponse:
        ...


class BreakerListener(pybreaker.CircuitBreakerListener):
    """Listener for circuit breaker state changes."""

    def state_change(self, cb, old_state, new_state):
        """Called when circuit breaker state changes."""
        logger.warning(
            "breaker_state_change",
            breaker=cb.name,
            from_state=str(old_state),
            to_state=str(new_state),
        )


class GroqBackend:
    """
    OpenAI-compatible chat-completions client with circuit breaker protection.
    Defaults target Groq; any compatible endpoint works through base_url.
    """

    def __init__(self, config: LLMConfig, client: httpx.Client | None = None) -> None:
        self.config = config
        self.base_url = config.base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=config.timeout)
        self._breaker = pybreaker.CircuitBreaker(
            fail_max=5,
            reset_timeout=30,
            name="llm-http",
            listeners=[BreakerListener()],
        )
        logger.info("client_init", provider="groq", url=self.base_url, model=config.model_name)

    def complete(self, prompt: str, *, temperature: float, max_tokens: int | None = None) -> LLMResponse:
        """
        Send one user message and return the first choice.

        Raises:
            LLMError: On transport faults, non-2xx statuses or an open breaker
        """
        start = time.monotonic()
        payload = {
            "model": self.config.model_name,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_tokens or self.config.max_tokens,
        }
        headers = {"Authorization": f"Bearer {self.config.api_key or ''}"}

        def _make_request() -> httpx.Response:
            response = self._client.post(
                f"{self.base_url}/chat/completions", json=payload, headers=headers
            )
            response.raise_for_status()
            return response

        try:
            response = self._breaker.call(_make_request)
            data = response.json()
        except pybreaker.CircuitBreakerError as e:
            logger.error("llm_breaker_open", breaker=self._breaker.name)
            raise LLMError(f"LLM Error: circuit open ({e})") from e
        except httpx.HTTPStatusError as e:
            logger.error("llm_http_status", status=e.response.status_code)
            raise LLMError(f"LLM Error: HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("llm_request_failed", error=str(e))
            raise LLMError(f"LLM Error: {e}") from e

        choices = data.get("choices") or [{}]
        content = (choices[0].get("message") or {}).get("content") or ""
        tokens = (data.get("usage") or {}).get("total_tokens") or 0

        return LLMResponse(
            content=content,
            tokens_used=tokens,
            duration_ms=int((time.monotonic() - start) * 1000),
        )

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> "GroqBackend":
        return self

    def __exit__(self, *args) -> None:
        self.close()


class GeminiBackend:
    """Gemini API wrapper; temperature is set per call."""

    def __init__(self, config: LLMConfig) -> None:
        self.config = config
        genai.configure(api_key=config.api_key)
        self.model = genai.GenerativeModel(model_name=config.model_name)
        logger.info("model_loaded", provider="gemini", model=config.model_name)

    def complete(self, prompt: str, *, temperature: float, max_tokens: int | None = None) -> LLMResponse:
        """Non-streaming generation."""
        start = time.monotonic()
        generation_config = genai.GenerationConfig(
            temperature=temperature,
            max_output_tokens=max_tokens or self.config.max_tokens,
        )
        try:
            response = self.model.generate_content(prompt, generation_config=generation_config)
            content = response.text
        except Exception as e:
            logger.error("invoke_error", error=str(e))
            raise LLMError(f"LLM Error: {e}") from e

        usage = getattr(response, "usage_metadata", None)
        return LLMResponse(
            content=content or "",
            tokens_used=getattr(usage, "total_token_count", 0) or 0,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
