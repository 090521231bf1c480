"""Configuration models."""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMConfig(BaseModel):
    """Configuration for the generation API."""

    provider: str = Field("anthropic", description="LLM provider: anthropic or openai")
    model: str = Field("claude-sonnet-4-20250514", description="Model name")
    api_key: Optional[str] = Field(None, description="API key")
    max_tokens: int = Field(1500, description="Maximum tokens for completion")
    temperature: float = Field(0.3, description="Temperature for generation")
    timeout: float = Field(30.0, description="Seconds allowed for a single synthesis call")

    class Config:
        """Pydantic config."""
        json_schema_extra = {
            "example": {
                "provider": "anthropic",
                "model": "claude-sonnet-4-20250514",
                "max_tokens": 1500,
                "temperature": 0.3,
                "timeout": 30.0,
            }
        }


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Source hosting
    github_token: Optional[str] = None
    github_api_url: str = "https://api.github.com"
    user_agent: str = "Commit-Resume-Generator"
    request_timeout: float = 300.0

    # LLM Settings
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    llm_provider: str = "anthropic"
    llm_model: Optional[str] = None
    llm_max_tokens: int = 1500
    synthesis_timeout: float = 30.0

    # Processing Settings
    max_commits: int = 25

    # Logging
    log_level: str = "INFO"

    def llm_config(self) -> LLMConfig:
        """Build the LLM configuration for the selected provider."""
        provider = self.llm_provider.lower()
        if provider == "openai":
            api_key, default_model = self.openai_api_key, "gpt-4o"
        else:
            api_key, default_model = self.anthropic_api_key, "claude-sonnet-4-20250514"

        return LLMConfig(
            provider=provider,
            model=self.llm_model or default_model,
            api_key=api_key,
            max_tokens=self.llm_max_tokens,
            timeout=self.synthesis_timeout,
        )
