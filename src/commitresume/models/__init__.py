"""Data models for commit ingestion and resume synthesis."""

from commitresume.models.analysis import (
    AnalysisResult,
    AnalysisState,
    AnalysisSummary,
    Digest,
    SynthesisResult,
)
from commitresume.models.commit import (
    Commit,
    CommitFile,
    CommitIdentity,
    CommitParent,
    CommitStats,
    normalize_commit,
)
from commitresume.models.config import LLMConfig, Settings
from commitresume.models.contributor import Contributor
from commitresume.models.resume import BulletGroup, BulletPoint, Category

__all__ = [
    "Commit",
    "CommitFile",
    "CommitIdentity",
    "CommitParent",
    "CommitStats",
    "normalize_commit",
    "Contributor",
    "BulletPoint",
    "BulletGroup",
    "Category",
    "Digest",
    "SynthesisResult",
    "AnalysisState",
    "AnalysisSummary",
    "AnalysisResult",
    "LLMConfig",
    "Settings",
]
