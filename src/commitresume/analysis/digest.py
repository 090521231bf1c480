"""Reduce significant commits to a digest for a single generation request."""

from typing import Dict, List, Sequence

from commitresume.models.analysis import Digest
from commitresume.models.commit import Commit, CommitFile

# Hard caps that bound the prompt size.
MAX_SAMPLE_MESSAGES = 10
MAX_SAMPLE_CHANGES = 8
PATCH_EXCERPT_CHARS = 150
SIGNIFICANT_LINE_THRESHOLD = 5
MAX_EXTENSION_LENGTH = 5


def technology_of(filename: str) -> str:
    """Extension of a file used as a technology marker, or "" when none."""
    basename = filename.rsplit("/", 1)[-1]
    if "." not in basename:
        return ""
    extension = basename.rsplit(".", 1)[-1]
    return extension if len(extension) < MAX_EXTENSION_LENGTH else ""


def directory_of(filename: str) -> str:
    """Top-level directory of a path, or "" for files at the root."""
    parts = filename.split("/")
    return parts[0] if len(parts) > 1 else ""


def is_significant_change(changed: CommitFile) -> bool:
    return bool(changed.patch) and (
        changed.additions > SIGNIFICANT_LINE_THRESHOLD or changed.deletions > SIGNIFICANT_LINE_THRESHOLD
    )


def build_digest(commits: Sequence[Commit]) -> Digest:
    """Build a bounded digest of commits.

    Args:
        commits: Significant commits, in the order they should be presented

    Returns:
        Digest with totals, ordered distinct technologies and directories,
        and capped samples of messages and patch excerpts
    """
    technologies: Dict[str, None] = {}
    directories: Dict[str, None] = {}
    sample_changes: List[str] = []
    total_additions = 0
    total_deletions = 0

    for commit in commits:
        total_additions += commit.stats.additions
        total_deletions += commit.stats.deletions

        for changed in commit.files:
            if not changed.filename:
                continue
            technology = technology_of(changed.filename)
            if technology:
                technologies.setdefault(technology, None)
            directory = directory_of(changed.filename)
            if directory:
                directories.setdefault(directory, None)

            if len(sample_changes) < MAX_SAMPLE_CHANGES and is_significant_change(changed):
                sample_changes.append(f"{changed.filename}: {changed.patch[:PATCH_EXCERPT_CHARS]}...")

    return Digest(
        count=len(commits),
        total_additions=total_additions,
        total_deletions=total_deletions,
        technologies=list(technologies),
        directories=list(directories),
        sample_messages=[commit.message for commit in commits[:MAX_SAMPLE_MESSAGES]],
        sample_changes=sample_changes,
    )
