"""Base class for LLM providers."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class BaseLLMProvider(ABC):
    """Abstract base class for generation providers.

    Implementations make exactly one outbound call per :meth:`complete` and
    translate SDK failures into :mod:`commitresume.errors` types.
    """

    # Pricing per 1M tokens, keyed by model
    PRICING: Dict[str, Dict[str, float]] = {}
    DEFAULT_PRICING_MODEL: Optional[str] = None

    def __init__(self, api_key: str, model: str, timeout: float = 30.0, **kwargs: Any) -> None:
        """Initialize the LLM provider.

        Args:
            api_key: API key for the provider
            model: Model name to use
            timeout: Seconds before a request is abandoned
            **kwargs: Additional provider-specific parameters
        """
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.config = kwargs
        self.total_cost = 0.0
        self.total_tokens = {"input": 0, "output": 0}

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        max_tokens: int = 1000,
        temperature: Optional[float] = None,
        **kwargs: Any,
    ) -> str:
        """Generate a completion from the LLM.

        Args:
            prompt: The prompt to send as a single user message
            max_tokens: Maximum tokens in response
            temperature: Sampling temperature, provider default when None
            **kwargs: Additional provider-specific parameters

        Returns:
            The generated text

        Raises:
            AuthError: If the API key is rejected
            RateLimited: If the provider throttles the request
            Timeout: If the request times out
            TransportError: For any other API failure
        """

    def estimate_cost(
        self,
        input_tokens: int,
        output_tokens: int = 0,
        model: Optional[str] = None,
    ) -> float:
        """Estimate API call cost in USD."""
        pricing = self.PRICING.get(model or self.model)
        if pricing is None and self.DEFAULT_PRICING_MODEL:
            pricing = self.PRICING[self.DEFAULT_PRICING_MODEL]
        if pricing is None:
            return 0.0

        cost = (input_tokens / 1_000_000) * pricing["input"]
        cost += (output_tokens / 1_000_000) * pricing["output"]
        return cost

    def record_usage(self, input_tokens: int, output_tokens: int) -> None:
        self.total_tokens["input"] += input_tokens
        self.total_tokens["output"] += output_tokens
        self.total_cost += self.estimate_cost(input_tokens, output_tokens)

    def get_usage_stats(self) -> dict:
        """Get current usage statistics.

        Returns:
            Dictionary with token counts and costs
        """
        return {
            "total_tokens": dict(self.total_tokens),
            "total_cost": self.total_cost,
            "model": self.model,
        }

    def reset_usage_stats(self) -> None:
        """Reset usage statistics."""
        self.total_cost = 0.0
        self.total_tokens = {"input": 0, "output": 0}
