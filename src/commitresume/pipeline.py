"""Analysis pipeline turning raw commits into grouped resume bullet points."""

from typing import Any, List, Optional, Sequence, Tuple

import structlog

from commitresume.analysis.categorize import group_bullet_points
from commitresume.analysis.digest import build_digest
from commitresume.analysis.triviality import explain_triviality, partition_commits
from commitresume.errors import ValidationError
from commitresume.llm.parser import parse_synthesis_response
from commitresume.llm.synthesis import SynthesisClient
from commitresume.models.analysis import AnalysisResult, AnalysisState, AnalysisSummary, SynthesisResult
from commitresume.models.commit import Commit, normalize_commit

logger = structlog.get_logger(__name__)

MAX_COMMITS = 25
NO_SIGNIFICANT_COMMITS_REASON = "No significant commits found for analysis"


class ResumePipeline:
    """Runs one analysis request from raw commits to a summarized result.

    States: RECEIVED -> FILTERED -> NO_SIGNIFICANT_COMMITS, or
    FILTERED -> SYNTHESIZING -> PARSED -> GROUPED -> SUMMARIZED, with any
    synthesis or parse error ending in FAILED. Nothing is retried.
    """

    def __init__(self, synthesis_client: SynthesisClient) -> None:
        """Initialize the pipeline.

        Args:
            synthesis_client: Adapter used for the single generation call
        """
        self.synthesis_client = synthesis_client

    @staticmethod
    def normalize(raw_commits: Sequence[Any]) -> Tuple[List[Commit], int]:
        """Normalize raw records, rejecting invalid ones individually.

        Returns:
            Tuple of (valid commits in input order, number rejected)
        """
        commits: List[Commit] = []
        rejected = 0
        for index, raw in enumerate(raw_commits):
            try:
                commits.append(normalize_commit(raw))
            except ValidationError as e:
                rejected += 1
                logger.warning("commit_rejected", index=index, field=e.field, error=e.message)
        return commits, rejected

    async def run(
        self,
        raw_commits: Sequence[Any],
        original_total: Optional[int] = None,
    ) -> AnalysisResult:
        """Analyze a batch of commits.

        Args:
            raw_commits: Raw commit records (or Commits), already capped by the caller
            original_total: Size of the batch before capping, for reporting

        Returns:
            AnalysisResult in a terminal state
        """
        states = [AnalysisState.RECEIVED]

        commits, rejected = self.normalize(raw_commits)
        significant, trivial = partition_commits(commits)
        states.append(AnalysisState.FILTERED)
        logger.info(
            "commits_filtered",
            received=len(raw_commits),
            significant=len(significant),
            trivial=len(trivial),
            rejected=rejected,
        )

        counts = {
            "total": len(raw_commits),
            "original_total": len(raw_commits) if original_total is None else original_total,
            "trivial": len(trivial),
            "rejected": rejected,
        }

        if not significant:
            states.append(AnalysisState.NO_SIGNIFICANT_COMMITS)
            return AnalysisResult(
                state=AnalysisState.NO_SIGNIFICANT_COMMITS,
                states=states,
                summary=AnalysisSummary(**counts),
                reasoning=NO_SIGNIFICANT_COMMITS_REASON,
            )

        digest = build_digest(significant)
        states.append(AnalysisState.SYNTHESIZING)

        try:
            raw_text = await self.synthesis_client.synthesize(digest)
            synthesis = parse_synthesis_response(raw_text)
        except Exception as e:
            states.append(AnalysisState.FAILED)
            logger.error("synthesis_failed", error=str(e), error_type=type(e).__name__)
            return AnalysisResult(
                state=AnalysisState.FAILED,
                states=states,
                digest=digest,
                summary=AnalysisSummary(**counts),
                error=str(e),
                error_type=type(e).__name__,
            )

        states.append(AnalysisState.PARSED)
        bullet_points = synthesis.bullet_points
        groups = group_bullet_points(bullet_points)
        states.append(AnalysisState.GROUPED)

        summary = AnalysisSummary(
            **counts,
            processed=len(significant),
            bullet_points_generated=len(bullet_points),
            categories=len(groups),
        )
        states.append(AnalysisState.SUMMARIZED)
        logger.info(
            "analysis_summarized",
            bullet_points=len(bullet_points),
            categories=len(groups),
            is_trivial=synthesis.is_trivial,
        )

        return AnalysisResult(
            bullet_points=bullet_points,
            groups=groups,
            summary=summary,
            state=AnalysisState.SUMMARIZED,
            states=states,
            digest=digest,
            reasoning=synthesis.reasoning,
        )

    async def describe_commit(self, raw_commit: Any) -> SynthesisResult:
        """Generate bullet points for one commit.

        Trivial commits are answered locally without a generation call.

        Raises:
            ValidationError: If the record does not normalize
            FormatError: If the reply fails validation
            AuthError, RateLimited, Timeout, TransportError
        """
        commit = normalize_commit(raw_commit)
        rule = explain_triviality(commit)
        if rule:
            logger.debug("commit_skipped", sha=commit.short_sha, rule=rule)
            return SynthesisResult(is_trivial=True, reasoning=f"Trivial commit ({rule})")

        raw_text = await self.synthesis_client.synthesize_commit(commit)
        return parse_synthesis_response(raw_text)


async def analyze_commits(
    pipeline: ResumePipeline,
    raw_commits: Sequence[Any],
    max_commits: int = MAX_COMMITS,
) -> AnalysisResult:
    """Caller-facing entry point: cap the batch, then run the pipeline.

    Commits beyond ``max_commits`` are dropped; the original count is
    reported as ``originalTotal``.

    Raises:
        ValidationError: If ``raw_commits`` is not a list
    """
    if not isinstance(raw_commits, (list, tuple)):
        raise ValidationError("commits", "Invalid request: commits array is required")

    original_total = len(raw_commits)
    limited = list(raw_commits[:max_commits])
    if original_total > max_commits:
        logger.info("commits_limited", original=original_total, limit=max_commits)

    return await pipeline.run(limited, original_total=original_total)
