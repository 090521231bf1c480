"""LLM integration for resume synthesis."""

from typing import Dict, Type

from commitresume.errors import AuthError
from commitresume.llm.anthropic_provider import AnthropicProvider
from commitresume.llm.base import BaseLLMProvider
from commitresume.llm.openai_provider import OpenAIProvider
from commitresume.llm.parser import extract_json_object, parse_synthesis_response
from commitresume.llm.prompts import PromptTemplates
from commitresume.llm.synthesis import SynthesisClient
from commitresume.models.config import LLMConfig

LLM_PROVIDERS: Dict[str, Type[BaseLLMProvider]] = {
    "anthropic": AnthropicProvider,
    "openai": OpenAIProvider,
}


def create_llm_provider(config: LLMConfig) -> BaseLLMProvider:
    """Instantiate the provider named by ``config.provider``.

    Raises:
        ValueError: If the provider is unknown
        AuthError: If no API key is configured
    """
    provider_cls = LLM_PROVIDERS.get(config.provider.lower())
    if provider_cls is None:
        raise ValueError(
            f"Unsupported LLM provider: {config.provider}. "
            f"Available providers: {', '.join(LLM_PROVIDERS)}"
        )
    if not config.api_key:
        raise AuthError(f"An API key is required for the {config.provider} provider")

    return provider_cls(api_key=config.api_key, model=config.model, timeout=config.timeout)


__all__ = [
    "AnthropicProvider",
    "BaseLLMProvider",
    "LLM_PROVIDERS",
    "OpenAIProvider",
    "PromptTemplates",
    "SynthesisClient",
    "create_llm_provider",
    "extract_json_object",
    "parse_synthesis_response",
]
