"""Chat completion result types and the client error."""

from pydantic import BaseModel, Field


class TokenUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class ChatResult(BaseModel):
    """First choice of a non-streaming chat completion."""

    content: str = Field(..., description="Message text (empty when the model returned none)")
    role: str = "assistant"
    usage: TokenUsage = Field(default_factory=TokenUsage)
    model: str = Field(..., description="Model that answered")
    finish_reason: str | None = None


class LLMClientError(Exception):
    """Chat completion failed after retries, was rejected, or the circuit is open.

    AI-backed components catch it and fall back to their deterministic path.
    """
