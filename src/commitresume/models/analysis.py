"""Models describing a single analysis request."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from commitresume.models.resume import BulletGroup, BulletPoint


class Digest(BaseModel):
    """Bounded reduction of many commits, sized for one generation request."""

    model_config = ConfigDict(frozen=True)

    count: int = Field(0, description="Number of commits reduced")
    total_additions: int = Field(0, description="Sum of added lines")
    total_deletions: int = Field(0, description="Sum of deleted lines")
    technologies: List[str] = Field(default_factory=list, description="Distinct file extensions")
    directories: List[str] = Field(default_factory=list, description="Distinct top-level directories")
    sample_messages: List[str] = Field(default_factory=list, description="First commit messages")
    sample_changes: List[str] = Field(default_factory=list, description="Patch excerpts of larger edits")


class SynthesisResult(BaseModel):
    """Validated payload extracted from a generation reply."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    bullet_points: List[BulletPoint] = Field(default_factory=list, alias="bulletPoints")
    is_trivial: bool = Field(False, alias="isTrivial")
    reasoning: Optional[str] = None


class AnalysisState(str, Enum):
    """States an analysis request moves through."""

    RECEIVED = "received"
    FILTERED = "filtered"
    NO_SIGNIFICANT_COMMITS = "no_significant_commits"
    SYNTHESIZING = "synthesizing"
    PARSED = "parsed"
    GROUPED = "grouped"
    SUMMARIZED = "summarized"
    FAILED = "failed"


TERMINAL_STATES = frozenset(
    {AnalysisState.NO_SIGNIFICANT_COMMITS, AnalysisState.SUMMARIZED, AnalysisState.FAILED}
)


class AnalysisSummary(BaseModel):
    """Counters reported alongside generated bullet points."""

    model_config = ConfigDict(populate_by_name=True)

    total: int = 0
    original_total: int = Field(0, alias="originalTotal")
    processed: int = 0
    trivial: int = 0
    bullet_points_generated: int = Field(0, alias="bulletPointsGenerated")
    categories: int = 0
    rejected: int = 0


class AnalysisResult(BaseModel):
    """Outcome of one pass through the pipeline."""

    model_config = ConfigDict(populate_by_name=True)

    bullet_points: List[BulletPoint] = Field(default_factory=list, alias="bulletPoints")
    groups: List[BulletGroup] = Field(default_factory=list)
    summary: AnalysisSummary = Field(default_factory=AnalysisSummary)
    state: AnalysisState = AnalysisState.RECEIVED
    states: List[AnalysisState] = Field(default_factory=list)
    digest: Optional[Digest] = None
    reasoning: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = Field(None, alias="errorType")

    @property
    def failed(self) -> bool:
        return self.state is AnalysisState.FAILED

    def to_payload(self) -> Dict[str, Any]:
        """Render the caller-facing JSON payload."""
        payload = {
            "bulletPoints": [b.model_dump(mode="json", by_alias=True) for b in self.bullet_points],
            "groups": [g.model_dump(mode="json", by_alias=True) for g in self.groups],
            "summary": self.summary.model_dump(mode="json", by_alias=True),
        }
        if self.error is not None:
            payload["error"] = self.error
            payload["errorType"] = self.error_type
        return payload
