"""Commit classification, aggregation and categorization."""

from commitresume.analysis.categorize import categorize, group_bullet_points
from commitresume.analysis.contributors import reconcile_contributors
from commitresume.analysis.digest import build_digest
from commitresume.analysis.stats import compute_commit_stats
from commitresume.analysis.triviality import explain_triviality, is_trivial, partition_commits

__all__ = [
    "build_digest",
    "categorize",
    "compute_commit_stats",
    "explain_triviality",
    "group_bullet_points",
    "is_trivial",
    "partition_commits",
    "reconcile_contributors",
]
