"""Reconcile contributor lists from the contributors API and commit history."""

from collections.abc import Mapping
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

import structlog

from commitresume.models.commit import Commit, CommitIdentity, coerce_count
from commitresume.models.contributor import Contributor

logger = structlog.get_logger(__name__)

ANONYMOUS = "Anonymous"


class Observation(NamedTuple):
    """What one source says about a login."""

    name: Optional[str]
    avatar_url: Optional[str]
    contributions: int
    type: str = "User"


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def index_api_contributors(api_contributors: Iterable[Mapping]) -> Dict[str, Observation]:
    """Key contributors returned by the hosting API by login.

    Anonymous entries carry no login and are keyed by their name instead.
    A login listed twice keeps its first position and the larger count.
    """
    indexed: Dict[str, Observation] = {}
    for raw in api_contributors:
        if not isinstance(raw, Mapping):
            continue
        login = _text(raw.get("login")) or _text(raw.get("name")) or ANONYMOUS
        entry = Observation(
            name=_text(raw.get("name")),
            avatar_url=_text(raw.get("avatar_url")),
            contributions=coerce_count(raw.get("contributions")),
            type=_text(raw.get("type")) or "User",
        )
        previous = indexed.get(login)
        if previous is not None:
            entry = previous._replace(contributions=max(previous.contributions, entry.contributions))
        indexed[login] = entry
    return indexed


def count_commit_contributors(commits: Iterable[Commit]) -> Dict[str, Observation]:
    """Count commits per login from authors and distinct committers.

    Identities without a login are skipped; the most recently seen commit
    name is kept for each login.
    """
    counted: Dict[str, Observation] = {}

    def observe(identity: CommitIdentity) -> None:
        previous = counted.get(identity.login)
        counted[identity.login] = Observation(
            name=identity.name,
            avatar_url=identity.avatar_url or (previous.avatar_url if previous else None),
            contributions=(previous.contributions if previous else 0) + 1,
        )

    for commit in commits:
        if commit.author.login:
            observe(commit.author)
        if commit.committer.login and commit.committer.login != commit.author.login:
            observe(commit.committer)
    return counted


def _merge(login: str, api_entry: Optional[Observation], derived: Optional[Observation]) -> Contributor:
    primary = api_entry or derived
    contributions = max(
        api_entry.contributions if api_entry else 0,
        derived.contributions if derived else 0,
    )
    name = primary.name or (derived.name if derived else None)
    avatar_url = primary.avatar_url or (derived.avatar_url if derived else None)
    return Contributor(
        login=login,
        name=name or login,
        avatar_url=avatar_url,
        contributions=contributions,
        type=primary.type,
    )


def reconcile_contributors(
    api_contributors: Optional[Iterable[Mapping]],
    commits: Optional[Iterable[Commit]],
) -> List[Contributor]:
    """Merge API-reported contributors with those derived from commits.

    The API list wins for name and avatar; contribution counts take the
    maximum of both sources and are never summed. Either source may be None
    when its fetch failed.

    Args:
        api_contributors: Raw entries from the contributors endpoint, or None
        commits: Normalized commits to scan for authors/committers, or None

    Returns:
        Contributors sorted by contributions, descending (stable)
    """
    api_by_login = index_api_contributors(api_contributors or [])
    derived_by_login = count_commit_contributors(commits or [])

    merged = [_merge(login, entry, derived_by_login.get(login)) for login, entry in api_by_login.items()]
    merged.extend(
        _merge(login, None, derived)
        for login, derived in derived_by_login.items()
        if login not in api_by_login
    )

    logger.debug(
        "contributors_reconciled",
        from_api=len(api_by_login),
        from_commits=len(derived_by_login),
        merged=len(merged),
    )
    return sorted(merged, key=lambda contributor: contributor.contributions, reverse=True)
