"""Client adapter that turns digests into raw generation text."""

import asyncio

import structlog

from commitresume.errors import Timeout, TransportError, UpstreamError
from commitresume.llm.base import BaseLLMProvider
from commitresume.llm.prompts import PromptTemplates
from commitresume.models.analysis import Digest
from commitresume.models.commit import Commit

logger = structlog.get_logger(__name__)

SYNTHESIS_TIMEOUT = 30.0
CONTEXT_MAX_TOKENS = 1500
COMMIT_MAX_TOKENS = 1000


class SynthesisClient:
    """Sends one prompt per call to a generation provider.

    No retries happen here and no state survives between calls.
    """

    def __init__(
        self,
        provider: BaseLLMProvider,
        max_tokens: int = CONTEXT_MAX_TOKENS,
        timeout: float = SYNTHESIS_TIMEOUT,
    ) -> None:
        """Initialize the synthesis client.

        Args:
            provider: LLM provider used for completions
            max_tokens: Token budget for digest-level synthesis
            timeout: Seconds allowed for a single synthesis call
        """
        self.provider = provider
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.prompts = PromptTemplates()

    async def synthesize(self, digest: Digest) -> str:
        """Request resume bullet points for a digest of commits.

        Returns:
            Raw model text, expected to embed one JSON object

        Raises:
            AuthError, RateLimited, Timeout, TransportError
        """
        prompt = self.prompts.resume_bullet_points(digest)
        logger.info("synthesis_requested", commits=digest.count, prompt_chars=len(prompt))
        return await self._complete(prompt, self.max_tokens)

    async def synthesize_commit(self, commit: Commit) -> str:
        """Request resume bullet points for a single commit."""
        prompt = self.prompts.commit_bullet_points(commit)
        logger.info("commit_synthesis_requested", sha=commit.short_sha)
        return await self._complete(prompt, COMMIT_MAX_TOKENS)

    async def _complete(self, prompt: str, max_tokens: int) -> str:
        try:
            return await asyncio.wait_for(
                self.provider.complete(prompt, max_tokens=max_tokens),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise Timeout(f"Synthesis did not complete within {self.timeout:g} seconds") from e
        except UpstreamError:
            raise
        except Exception as e:
            raise TransportError(f"Failed to synthesize bullet points: {e}") from e
