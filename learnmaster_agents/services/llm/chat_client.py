"""Chat completions over any OpenAI-compatible endpoint.

``POST {base_url}/chat/completions`` through ``AsyncOpenAI``. Rate limits,
timeouts and server errors are retried with capped exponential backoff;
a 400 is returned to the caller at once. A circuit breaker around the
whole retry loop makes a dead provider fail fast.
"""

from __future__ import annotations

import asyncio
import random
from typing import Any

import structlog
from openai import APIError, APITimeoutError, AsyncOpenAI, RateLimitError

from ...core.circuit_breaker import CircuitBreaker
from .schemas import ChatResult, LLMClientError, TokenUsage

logger = structlog.get_logger(__name__)


def _retry_reason(error: Exception) -> str | None:
    """Log label for a retriable error, None when retrying cannot help."""
    if isinstance(error, RateLimitError):
        return "rate_limited"
    if isinstance(error, APITimeoutError):
        return "timeout"
    if isinstance(error, APIError):
        return None if getattr(error, "status_code", None) == 400 else "api_error"
    return None


def _to_result(response: Any) -> ChatResult:
    choice = response.choices[0]
    usage = response.usage
    return ChatResult(
        content=choice.message.content or "",
        role=choice.message.role,
        usage=TokenUsage(
            prompt_tokens=usage.prompt_tokens if usage else 0,
            completion_tokens=usage.completion_tokens if usage else 0,
            total_tokens=usage.total_tokens if usage else 0,
        ),
        model=response.model,
        finish_reason=choice.finish_reason,
    )


class ChatCompletionClient:
    """Async chat completion client.

    Args:
        api_key: Credential for the chat completions service
        base_url: OpenAI-compatible API root
        model: Model used when a call does not override it
        max_retries: Retries after the first attempt
        max_delay: Upper bound for one backoff delay (seconds)
        exponential_base: Backoff multiplier
        timeout: Request timeout (seconds)
        circuit_breaker: Breaker guarding the endpoint

    Raises:
        ValueError: If ``api_key`` is empty

    Example:
        >>> client = ChatCompletionClient(api_key="sk-...", model="gpt-4.1-mini")
        >>> result = await client.chat([{"role": "user", "content": "Hello"}])
        >>> result.content
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4.1-mini",
        max_retries: int = 3,
        max_delay: float = 30.0,
        exponential_base: float = 2.0,
        timeout: float = 60.0,
        circuit_breaker: CircuitBreaker | None = None,
    ):
        if not api_key:
            raise ValueError("API key is required. Set OPENAI_API_KEY or pass api_key.")

        self.base_url = base_url
        self.model = model
        self.max_retries = max_retries
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.timeout = timeout
        self.circuit_breaker = circuit_breaker or CircuitBreaker(name="llm")
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)

    async def chat(
        self,
        messages: list[dict[str, str]],
        temperature: float = 0.7,
        max_tokens: int | None = None,
        model: str | None = None,
        **kwargs: Any,
    ) -> ChatResult:
        """Run one non-streaming completion.

        Args:
            messages: Chat messages (``role`` and ``content``)
            temperature: Sampling temperature
            max_tokens: Completion token limit
            model: Per-call model override
            **kwargs: Extra request fields such as ``response_format``

        Raises:
            LLMClientError: On a rejected request, exhausted retries or an open circuit
        """
        request = {
            "model": model or self.model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "stream": False,
            **kwargs,
        }
        logger.info(
            "llm_request_start",
            model=request["model"],
            temperature=temperature,
            max_tokens=max_tokens,
            messages=len(messages),
        )
        try:
            result = await self.circuit_breaker.call(self._complete_with_retries, request)
        except LLMClientError:
            raise
        except Exception as e:
            raise LLMClientError(f"Chat completion failed: {e}") from e

        logger.info(
            "llm_response_success",
            model=result.model,
            total_tokens=result.usage.total_tokens,
            finish_reason=result.finish_reason,
        )
        return result

    async def _complete_with_retries(self, request: dict[str, Any]) -> ChatResult:
        delay = 1.0
        attempts = self.max_retries + 1
        last_error: Exception | None = None

        for attempt in range(1, attempts + 1):
            try:
                response = await self.client.chat.completions.create(**request)
                return _to_result(response)
            except APIError as e:
                reason = _retry_reason(e)
                if reason is None:
                    logger.error("llm_bad_request", model=request["model"], error=str(e))
                    raise LLMClientError(f"Bad request: {e}") from e
                last_error = e
                logger.warning(
                    "llm_retriable_error",
                    reason=reason,
                    model=request["model"],
                    attempt=attempt,
                    max_attempts=attempts,
                )

            if attempt < attempts:
                await self._sleep_with_backoff(delay)
                delay = min(delay * self.exponential_base, self.max_delay)

        raise LLMClientError(
            f"Maximum number of retries ({self.max_retries}) exceeded. Last error: {last_error}"
        ) from last_error

    async def _sleep_with_backoff(self, delay: float) -> None:
        seconds = min(delay, self.max_delay) * (1.0 + random.random())
        logger.debug("llm_backoff_sleep", seconds=round(seconds, 2))
        await asyncio.sleep(seconds)

    async def close(self) -> None:
        await self.client.close()
