"""OpenAI LLM provider implementation."""

from typing import Any, Optional

import openai
import structlog
from openai import AsyncOpenAI

from commitresume.errors import AuthError, RateLimited, Timeout, TransportError
from commitresume.llm.base import BaseLLMProvider

logger = structlog.get_logger(__name__)


class OpenAIProvider(BaseLLMProvider):
    """OpenAI API provider for resume synthesis."""

    # Pricing per 1M tokens
    PRICING = {
        "gpt-4o": {"input": 2.50, "output": 10.00},
        "gpt-4o-mini": {"input": 0.15, "output": 0.60},
        "gpt-4-turbo-preview": {"input": 10.00, "output": 30.00},
        "gpt-4": {"input": 30.00, "output": 60.00},
        "gpt-3.5-turbo": {"input": 0.50, "output": 1.50},
    }
    DEFAULT_PRICING_MODEL = "gpt-4"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        timeout: float = 30.0,
        **kwargs: Any,
    ) -> None:
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            model: Model for completions
            timeout: Per-request timeout in seconds
            **kwargs: Additional parameters
        """
        super().__init__(api_key, model, timeout, **kwargs)
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    async def complete(
        self,
        prompt: str,
        max_tokens: int = 1000,
        temperature: Optional[float] = None,
        **kwargs: Any,
    ) -> str:
        """Generate a completion from OpenAI.

        Args:
            prompt: The prompt to send
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature, API default when None
            **kwargs: Additional OpenAI parameters

        Returns:
            Generated text
        """
        params = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": max_tokens,
            **kwargs,
        }
        if temperature is not None:
            params["temperature"] = temperature

        try:
            response = await self.client.chat.completions.create(**params)
        except openai.AuthenticationError as e:
            raise AuthError("Invalid OpenAI API key. Please check your OPENAI_API_KEY.") from e
        except openai.RateLimitError as e:
            raise RateLimited("OpenAI API rate limit exceeded. Please try again later.") from e
        except openai.APITimeoutError as e:
            raise Timeout("OpenAI API request timed out. Please try again.") from e
        except openai.APIError as e:
            logger.error("openai_api_error", error=str(e))
            raise TransportError(f"OpenAI API error: {e}") from e

        # Track usage
        usage = getattr(response, "usage", None)
        if usage is not None:
            self.record_usage(usage.prompt_tokens, usage.completion_tokens)

        return response.choices[0].message.content or ""
