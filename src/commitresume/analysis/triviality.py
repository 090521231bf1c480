"""Heuristics deciding whether a commit is worth a resume line."""

import re
from collections.abc import Mapping
from typing import Any, Callable, Iterable, List, Optional, Tuple

from commitresume.models.commit import Commit

TRIVIAL_MESSAGE_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r"^(fix|update|remove|delete)\s+(whitespace|spacing|indentation)"),
    re.compile(r"^(add|remove|update)\s+(comment|comments)"),
    re.compile(r"^(fix|update)\s+(typo|typos)"),
    re.compile(r"^(update|fix)\s+(formatting|format)"),
    re.compile(r"^merge\s+branch"),
    re.compile(r"^initial\s+commit$"),
    re.compile(r"^\.gitignore"),
    re.compile(r"^readme", re.IGNORECASE),
)

SOURCE_EXTENSIONS: Tuple[str, ...] = (
    ".js",
    ".jsx",
    ".ts",
    ".tsx",
    ".py",
    ".java",
    ".cpp",
    ".c",
    ".go",
    ".rs",
    ".php",
)

# Below these line counts a commit without code is considered noise.
MIN_LINES_WITHOUT_FILES = 3
MIN_LINES_WITHOUT_CODE = 10


def _field(commit: Any, name: str) -> Any:
    if isinstance(commit, Mapping):
        return commit.get(name)
    return getattr(commit, name, None)


def _message(commit: Any) -> str:
    message = _field(commit, "message")
    return message.strip().lower() if isinstance(message, str) else ""


def _changed_lines(commit: Any) -> int:
    stats = _field(commit, "stats")
    if stats is None:
        return 0
    additions = _field(stats, "additions") or 0
    deletions = _field(stats, "deletions") or 0
    try:
        return int(additions) + int(deletions)
    except (TypeError, ValueError):
        return 0


def _filenames(commit: Any) -> List[str]:
    files = _field(commit, "files")
    if not isinstance(files, (list, tuple)):
        return []
    names = (_field(entry, "filename") for entry in files)
    return [name for name in names if isinstance(name, str)]


def _has_file_data(commit: Any) -> bool:
    # An empty files array still counts as file-level data.
    if isinstance(commit, Commit):
        return commit.files_provided
    return isinstance(_field(commit, "files"), (list, tuple))


def matches_trivial_message(commit: Any) -> bool:
    message = _message(commit)
    return any(pattern.search(message) for pattern in TRIVIAL_MESSAGE_PATTERNS)


def is_tiny_without_files(commit: Any) -> bool:
    return not _has_file_data(commit) and _changed_lines(commit) < MIN_LINES_WITHOUT_FILES


def is_small_non_code_change(commit: Any) -> bool:
    if not _has_file_data(commit):
        return False
    has_code = any(name.endswith(SOURCE_EXTENSIONS) for name in _filenames(commit))
    return not has_code and _changed_lines(commit) < MIN_LINES_WITHOUT_CODE


TRIVIAL_RULES: Tuple[Tuple[str, Callable[[Any], bool]], ...] = (
    ("trivial_message", matches_trivial_message),
    ("tiny_without_files", is_tiny_without_files),
    ("small_non_code_change", is_small_non_code_change),
)


def explain_triviality(commit: Any) -> Optional[str]:
    """Return the name of the first trivial rule the commit matches.

    Args:
        commit: A normalized Commit or a raw commit mapping

    Returns:
        Rule name, or None when the commit is significant
    """
    for name, predicate in TRIVIAL_RULES:
        if predicate(commit):
            return name
    return None


def is_trivial(commit: Any) -> bool:
    """Whether a commit carries no resume-worthy substance."""
    return explain_triviality(commit) is not None


def partition_commits(commits: Iterable[Commit]) -> Tuple[List[Commit], List[Commit]]:
    """Split commits into (significant, trivial), preserving order."""
    significant: List[Commit] = []
    trivial: List[Commit] = []
    for commit in commits:
        (trivial if is_trivial(commit) else significant).append(commit)
    return significant, trivial
