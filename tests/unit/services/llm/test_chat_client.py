"""Unit tests for ChatCompletionClient retries and error mapping."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from openai import APITimeoutError, BadRequestError, RateLimitError

from learnmaster_agents.services.llm.chat_client import ChatCompletionClient
from learnmaster_agents.services.llm.schemas import LLMClientError

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def _completion(content: str = '{"ok": true}') -> SimpleNamespace:
    return SimpleNamespace(
        choices=[
            SimpleNamespace(
                message=SimpleNamespace(content=content, role="assistant"),
                finish_reason="stop",
            )
        ],
        usage=SimpleNamespace(prompt_tokens=12, completion_tokens=5, total_tokens=17),
        model="gpt-4.1-mini",
    )


def _rate_limited() -> RateLimitError:
    return RateLimitError(
        "rate limited", response=httpx.Response(429, request=_REQUEST), body=None
    )


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch) -> ChatCompletionClient:
    with patch("learnmaster_agents.services.llm.chat_client.AsyncOpenAI", return_value=MagicMock()):
        chat_client = ChatCompletionClient(api_key="test-key", max_retries=2)
    chat_client.client.chat.completions.create = AsyncMock(return_value=_completion())
    monkeypatch.setattr(chat_client, "_sleep_with_backoff", AsyncMock())
    return chat_client


@pytest.mark.unit
class TestChatCompletionClient:
    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            ChatCompletionClient(api_key="")

    @pytest.mark.asyncio
    async def test_chat_returns_normalized_result(self, client: ChatCompletionClient):
        result = await client.chat(
            messages=[{"role": "user", "content": "hi"}],
            temperature=0.3,
            max_tokens=500,
            response_format={"type": "json_object"},
        )

        assert result.content == '{"ok": true}'
        assert result.usage.total_tokens == 17
        assert result.finish_reason == "stop"
        kwargs = client.client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4.1-mini"
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 500
        assert kwargs["stream"] is False
        assert kwargs["response_format"] == {"type": "json_object"}

    @pytest.mark.asyncio
    async def test_model_override(self, client: ChatCompletionClient):
        await client.chat(messages=[{"role": "user", "content": "hi"}], model="gpt-4o")

        assert client.client.chat.completions.create.call_args.kwargs["model"] == "gpt-4o"

    @pytest.mark.asyncio
    async def test_rate_limit_is_retried(self, client: ChatCompletionClient):
        client.client.chat.completions.create.side_effect = [_rate_limited(), _completion("done")]

        result = await client.chat(messages=[{"role": "user", "content": "hi"}])

        assert result.content == "done"
        assert client._sleep_with_backoff.await_count == 1

    @pytest.mark.asyncio
    async def test_retries_exhausted_raises(self, client: ChatCompletionClient):
        client.client.chat.completions.create.side_effect = APITimeoutError(request=_REQUEST)

        with pytest.raises(LLMClientError, match="Maximum number of retries"):
            await client.chat(messages=[{"role": "user", "content": "hi"}])

        assert client.client.chat.completions.create.await_count == 3

    @pytest.mark.asyncio
    async def test_bad_request_is_not_retried(self, client: ChatCompletionClient):
        client.client.chat.completions.create.side_effect = BadRequestError(
            "bad", response=httpx.Response(400, request=_REQUEST), body=None
        )

        with pytest.raises(LLMClientError, match="Bad request"):
            await client.chat(messages=[{"role": "user", "content": "hi"}])

        assert client.client.chat.completions.create.await_count == 1

    @pytest.mark.asyncio
    async def test_unexpected_error_is_wrapped(self, client: ChatCompletionClient):
        client.client.chat.completions.create.side_effect = KeyError("choices")

        with pytest.raises(LLMClientError, match="Chat completion failed"):
            await client.chat(messages=[{"role": "user", "content": "hi"}])
