"""LLM service client and factory."""

from .chat_client import ChatCompletionClient
from .llm_factory import create_llm_client
from .schemas import ChatResult, LLMClientError

__all__ = [
    "ChatCompletionClient",
    "ChatResult",
    "LLMClientError",
    "create_llm_client",
]
