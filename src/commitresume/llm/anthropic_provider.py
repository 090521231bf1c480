"""Anthropic Messages API provider."""

from typing import Any, Optional

import anthropic
import structlog
from anthropic import AsyncAnthropic

from commitresume.errors import AuthError, RateLimited, Timeout, TransportError
from commitresume.llm.base import BaseLLMProvider

logger = structlog.get_logger(__name__)


class AnthropicProvider(BaseLLMProvider):
    """Anthropic API provider for resume synthesis."""

    PRICING = {
        "claude-sonnet-4-20250514": {"input": 3.00, "output": 15.00},
        "claude-opus-4-20250514": {"input": 15.00, "output": 75.00},
        "claude-3-5-haiku-20241022": {"input": 0.80, "output": 4.00},
    }
    DEFAULT_PRICING_MODEL = "claude-sonnet-4-20250514"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        timeout: float = 30.0,
        **kwargs: Any,
    ) -> None:
        """Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key
            model: Model for completions
            timeout: Per-request timeout in seconds
            **kwargs: Additional parameters
        """
        super().__init__(api_key, model, timeout, **kwargs)
        # Retries are a caller concern, never the SDK's.
        self.client = AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)

    async def complete(
        self,
        prompt: str,
        max_tokens: int = 1000,
        temperature: Optional[float] = None,
        **kwargs: Any,
    ) -> str:
        """Generate a completion from the Messages API.

        Args:
            prompt: The prompt to send
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature, API default when None
            **kwargs: Additional Messages API parameters

        Returns:
            Text of the first content block
        """
        params = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
            **kwargs,
        }
        if temperature is not None:
            params["temperature"] = temperature

        try:
            response = await self.client.messages.create(**params)
        except anthropic.AuthenticationError as e:
            raise AuthError("Invalid Anthropic API key. Please check your ANTHROPIC_API_KEY.") from e
        except anthropic.RateLimitError as e:
            raise RateLimited("Anthropic API rate limit exceeded. Please try again later.") from e
        except anthropic.APITimeoutError as e:
            raise Timeout("Anthropic API request timed out. Please try again.") from e
        except anthropic.APIError as e:
            logger.error("anthropic_api_error", error=str(e))
            raise TransportError(f"Anthropic API error: {e}") from e

        usage = getattr(response, "usage", None)
        if usage is not None:
            self.record_usage(usage.input_tokens, usage.output_tokens)

        if not response.content:
            return ""
        return response.content[0].text or ""
