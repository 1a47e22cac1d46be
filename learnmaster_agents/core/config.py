"""Configuration management for the LearnMaster learning-path service."""

from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMConfig(BaseModel):
    """Configuration for a single kind of LLM call.

    Attributes:
        model: Model identifier (e.g., 'gpt-4.1-mini')
        temperature: Sampling temperature (0.0-2.0)
        max_tokens: Maximum tokens to generate (100-32000)
        timeout: Request timeout in seconds (5-600)
    """

    model: str = Field(..., description="Model identifier")
    temperature: float = Field(..., ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int = Field(..., ge=100, le=32000, description="Maximum tokens to generate")
    timeout: int = Field(default=60, ge=5, le=600, description="Request timeout (seconds)")

    model_config = {"frozen": True}  # Make immutable


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # OpenAI-compatible text generation
    OPENAI_API_KEY: str | None = Field(
        default=None,
        description="API key for the chat completions service. When unset, AI features fall back",
    )
    OPENAI_BASE_URL: str = Field(
        default="https://api.openai.com/v1", description="Chat completions base URL"
    )
    LLM_MODEL: str = Field(default="gpt-4.1-mini", description="Model used for all AI calls")
    LLM_TIMEOUT: int = Field(default=60, ge=5, le=600, description="LLM request timeout")
    LLM_MAX_RETRIES: int = Field(
        default=3, ge=0, le=10, description="Retries for rate limits, timeouts and API errors"
    )

    # Learning path structure design
    STRUCTURE_LLM_TEMPERATURE: float = Field(default=0.7, ge=0.0, le=2.0)
    STRUCTURE_LLM_MAX_TOKENS: int = Field(default=2000, ge=100, le=32000)

    # Objective matching
    MATCHING_LLM_TEMPERATURE: float = Field(default=0.3, ge=0.0, le=2.0)
    MATCHING_LLM_MAX_TOKENS: int = Field(default=1000, ge=100, le=32000)

    # Transcript analysis
    ANALYSIS_LLM_TEMPERATURE: float = Field(default=0.3, ge=0.0, le=2.0)
    ANALYSIS_LLM_MAX_TOKENS: int = Field(default=2000, ge=100, le=32000)

    # Circuit breaker shared by outbound clients
    CIRCUIT_BREAKER_THRESHOLD: int = Field(
        default=5, ge=1, le=20, description="Failures before circuit breaker opens"
    )
    CIRCUIT_BREAKER_TIMEOUT: int = Field(
        default=60, ge=1, le=3600, description="Seconds before circuit breaker retry"
    )

    # Content search
    SEARXNG_BASE_URL: str = Field(
        default="http://localhost:8080", description="SearxNG instance URL"
    )
    SEARXNG_TIMEOUT: float = Field(default=15.0, ge=1.0, le=120.0)
    STAGE_MAX_RESULTS: int = Field(
        default=5, ge=1, le=25, description="Search results requested per learning stage"
    )

    # Transcripts
    TRANSCRIPT_API_BASE_URL: str = Field(
        default="https://youtube-transcript-api.vercel.app",
        description="Public transcript proxy",
    )
    TRANSCRIPT_TIMEOUT: float = Field(default=20.0, ge=1.0, le=120.0)

    # Resource verification
    ENABLE_URL_PROBE: bool = Field(
        default=False,
        description="Issue real HEAD requests when verifying URLs (optimistic stub otherwise)",
    )
    URL_PROBE_TIMEOUT: float = Field(default=5.0, ge=0.5, le=60.0)
    ENABLE_CONTENT_CHECK: bool = Field(
        default=False, description="Check YouTube videos still exist via oEmbed"
    )
    MIN_QUALITY_SCORE: float = Field(default=0.5, ge=0.0, le=1.0)

    # API Configuration
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8001, description="API port")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(default="json", description="Log format (json/text)")

    # Development
    DEBUG: bool = Field(default=False, description="Debug mode")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @property
    def ai_enabled(self) -> bool:
        """True when a credential for the text-generation service is configured."""
        return bool(self.OPENAI_API_KEY)

    @property
    def structure_llm_config(self) -> LLMConfig:
        """LLM configuration for learning path structure design."""
        return LLMConfig(
            model=self.LLM_MODEL,
            temperature=self.STRUCTURE_LLM_TEMPERATURE,
            max_tokens=self.STRUCTURE_LLM_MAX_TOKENS,
            timeout=self.LLM_TIMEOUT,
        )

    @property
    def matching_llm_config(self) -> LLMConfig:
        """LLM configuration for content-to-objective matching."""
        return LLMConfig(
            model=self.LLM_MODEL,
            temperature=self.MATCHING_LLM_TEMPERATURE,
            max_tokens=self.MATCHING_LLM_MAX_TOKENS,
            timeout=self.LLM_TIMEOUT,
        )

    @property
    def analysis_llm_config(self) -> LLMConfig:
        """LLM configuration for transcript analysis."""
        return LLMConfig(
            model=self.LLM_MODEL,
            temperature=self.ANALYSIS_LLM_TEMPERATURE,
            max_tokens=self.ANALYSIS_LLM_MAX_TOKENS,
            timeout=self.LLM_TIMEOUT,
        )


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process.

    Only the composition root (API dependencies, app startup) reads this;
    components receive explicit configuration values.
    """
    return Settings()
