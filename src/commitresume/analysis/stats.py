"""Aggregate statistics over a list of commits."""

from typing import Any, Dict, List, Sequence

from commitresume.models.commit import LANGUAGE_EXTENSIONS, Commit, file_extension

STATS_LANGUAGE_EXTENSIONS: Dict[str, str] = {
    **LANGUAGE_EXTENSIONS,
    ".scala": "Scala",
    ".html": "HTML",
    ".css": "CSS",
    ".scss": "SCSS",
    ".sass": "SASS",
    ".vue": "Vue",
    ".sql": "SQL",
    ".sh": "Shell",
    ".yml": "YAML",
    ".yaml": "YAML",
    ".json": "JSON",
    ".xml": "XML",
    ".md": "Markdown",
}

MAX_LANGUAGES = 10

# Keyword buckets for the message histogram, checked in order.
MESSAGE_TYPE_KEYWORDS = (
    ("feature", ("feat", "add", "implement")),
    ("fix", ("fix", "bug", "resolve")),
    ("refactor", ("refactor", "restructure", "cleanup")),
    ("docs", ("doc", "readme", "comment")),
    ("style", ("style", "format", "lint")),
    ("test", ("test", "spec")),
    ("chore", ("chore", "update", "bump")),
)


def languages_from_commits(commits: Sequence[Commit]) -> List[Dict[str, Any]]:
    """Top languages by changed lines across all commits."""
    changes: Dict[str, int] = {}
    for commit in commits:
        for changed in commit.files:
            language = STATS_LANGUAGE_EXTENSIONS.get(file_extension(changed.filename))
            if language:
                changes[language] = changes.get(language, 0) + changed.changes

    ranked = sorted(changes.items(), key=lambda item: item[1], reverse=True)
    return [{"language": language, "changes": count} for language, count in ranked[:MAX_LANGUAGES]]


def message_type_histogram(commits: Sequence[Commit]) -> Dict[str, int]:
    """Count commits per message type."""
    histogram = {name: 0 for name, _ in MESSAGE_TYPE_KEYWORDS}
    histogram["other"] = 0

    for commit in commits:
        message = commit.message.lower()
        for name, keywords in MESSAGE_TYPE_KEYWORDS:
            if any(keyword in message for keyword in keywords):
                histogram[name] += 1
                break
        else:
            histogram["other"] += 1

    return histogram


def compute_commit_stats(commits: Sequence[Commit]) -> Dict[str, Any]:
    """Summarize a listing of commits (newest first, as the API returns them).

    Returns:
        Dictionary with totals, distinct author count, date range,
        language breakdown and message-type histogram
    """
    return {
        "total_commits": len(commits),
        "total_additions": sum(commit.stats.additions for commit in commits),
        "total_deletions": sum(commit.stats.deletions for commit in commits),
        "total_files_changed": sum(len(commit.files) for commit in commits),
        "authors": len({commit.author.name for commit in commits}),
        "date_range": {
            "earliest": commits[-1].timestamp.isoformat() if commits else None,
            "latest": commits[0].timestamp.isoformat() if commits else None,
        },
        "languages": languages_from_commits(commits),
        "commit_types": message_type_histogram(commits),
    }
