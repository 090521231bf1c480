"""GitHub REST API provider."""

import asyncio
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

import httpx
import structlog

from commitresume.analysis.contributors import reconcile_contributors
from commitresume.errors import (
    AuthError,
    NotFound,
    RateLimited,
    Timeout,
    TransportError,
    UpstreamError,
    ValidationError,
)
from commitresume.models.commit import Commit, normalize_commit
from commitresume.models.contributor import Contributor
from commitresume.providers.base import CommitPage, DateLike, Pagination

logger = structlog.get_logger(__name__)

GITHUB_API_URL = "https://api.github.com"
USER_AGENT = "Commit-Resume-Generator"
MAX_PER_PAGE = 100


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, Mapping) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase


def error_for_response(response: httpx.Response) -> UpstreamError:
    """Map an error response onto the upstream error taxonomy."""
    message = f"GitHub API error {response.status_code}: {_error_message(response)}"
    status = response.status_code
    if status == 401:
        return AuthError(message)
    if status == 429 or (status == 403 and response.headers.get("X-RateLimit-Remaining") == "0"):
        return RateLimited(message)
    if status == 404:
        return NotFound(message)
    return TransportError(message, status_code=status)


def _iso(value: DateLike) -> str:
    return value.isoformat() if isinstance(value, datetime) else str(value)


def _repository(data: Mapping[str, Any]) -> Dict[str, Any]:
    owner = data.get("owner") or {}
    return {
        "id": data.get("id"),
        "name": data.get("name"),
        "full_name": data.get("full_name"),
        "description": data.get("description"),
        "private": data.get("private"),
        "default_branch": data.get("default_branch"),
        "updated_at": data.get("updated_at"),
        "created_at": data.get("created_at"),
        "language": data.get("language"),
        "url": data.get("html_url"),
        "size": data.get("size"),
        "stargazers_count": data.get("stargazers_count"),
        "forks_count": data.get("forks_count"),
        "owner": {"login": owner.get("login"), "avatar_url": owner.get("avatar_url")},
    }


def raw_commit_from_api(listing: Mapping[str, Any], detail: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Build a raw commit record from a listing entry and optional detail.

    Without detail the commit carries zero stats and no files.
    """
    git_commit = listing.get("commit") or {}
    git_author = git_commit.get("author") or {}
    git_committer = git_commit.get("committer") or {}
    account_author = listing.get("author") or {}
    account_committer = listing.get("committer") or {}

    return {
        "sha": listing.get("sha"),
        "message": git_commit.get("message"),
        "author": {
            "name": git_author.get("name"),
            "email": git_author.get("email"),
            "login": account_author.get("login"),
            "avatar_url": account_author.get("avatar_url"),
        },
        "committer": {
            "name": git_committer.get("name"),
            "email": git_committer.get("email"),
            "login": account_committer.get("login"),
            "avatar_url": account_committer.get("avatar_url"),
        },
        "timestamp": git_author.get("date"),
        "url": listing.get("html_url"),
        "stats": (detail or {}).get("stats") or {},
        "files": (detail or {}).get("files") or [],
        "parents": [
            {"sha": parent.get("sha"), "url": parent.get("url")}
            for parent in listing.get("parents") or []
            if isinstance(parent, Mapping)
        ],
    }


class GitHubProvider:
    """GitHub implementation of :class:`commitresume.providers.base.GitProvider`."""

    name = "github"

    def __init__(
        self,
        token: str,
        base_url: str = GITHUB_API_URL,
        user_agent: str = USER_AGENT,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize the provider.

        Args:
            token: Bearer token for the GitHub API
            base_url: API root
            user_agent: Fixed client identifier sent with every request
            timeout: Per-request timeout in seconds, or httpx's default when None
            client: Pre-configured client (tests, connection reuse)
        """
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.headers = {
            "Authorization": f"Bearer {token}",
            "User-Agent": user_agent,
            "Accept": "application/vnd.github.v3+json",
        }
        client_options: Dict[str, Any] = {"base_url": self.base_url, "headers": self.headers}
        if timeout is not None:
            client_options["timeout"] = timeout
        self._client = client or httpx.AsyncClient(**client_options)

    async def __aenter__(self) -> "GitHubProvider":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        try:
            response = await self._client.get(path, params=params, headers=self.headers)
        except httpx.TimeoutException as e:
            raise Timeout(f"GitHub API request timed out: {path}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"GitHub API request failed: {e}") from e

        if response.is_error:
            raise error_for_response(response)
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"GitHub API returned invalid JSON: {e}") from e

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._json(await self._get(path, params))

    async def authenticate(self) -> Dict[str, Any]:
        """Return the authenticated user's profile."""
        data = await self._get_json("/user")
        return {
            "id": data.get("id"),
            "login": data.get("login"),
            "name": data.get("name"),
            "avatar_url": data.get("avatar_url"),
            "email": data.get("email"),
        }

    async def list_repositories(
        self,
        sort: str = "updated",
        type: str = "all",
        per_page: int = MAX_PER_PAGE,
        direction: str = "desc",
    ) -> List[Dict[str, Any]]:
        """List repositories visible to the authenticated user."""
        data = await self._get_json(
            "/user/repos",
            params={
                "sort": sort,
                "type": type,
                "per_page": min(per_page, MAX_PER_PAGE),
                "direction": direction,
            },
        )
        return [_repository(repo) for repo in data or []]

    async def get_repository_details(self, owner: str, repo: str) -> Dict[str, Any]:
        data = await self._get_json(f"/repos/{owner}/{repo}")
        return _repository(data)

    async def validate_repository(self, owner: str, repo: str) -> bool:
        try:
            await self.get_repository_details(owner, repo)
        except UpstreamError:
            return False
        return True

    async def _list_commits(self, owner: str, repo: str, params: Dict[str, Any]) -> httpx.Response:
        return await self._get(f"/repos/{owner}/{repo}/commits", params=params)

    async def _commit_detail(self, owner: str, repo: str, sha: str) -> Dict[str, Any]:
        return await self._get_json(f"/repos/{owner}/{repo}/commits/{sha}") or {}

    def _normalize_all(self, records: List[Dict[str, Any]]) -> List[Commit]:
        commits = []
        for record in records:
            try:
                commits.append(normalize_commit(record))
            except ValidationError as e:
                logger.warning("commit_rejected", sha=record.get("sha"), field=e.field, error=e.message)
        return commits

    async def fetch_commits(
        self,
        owner: str,
        repo: str,
        since: Optional[DateLike] = None,
        until: Optional[DateLike] = None,
        author: Optional[str] = None,
        sha: Optional[str] = None,
        page: int = 1,
        per_page: int = MAX_PER_PAGE,
    ) -> CommitPage:
        """Fetch one page of commits with file-level detail.

        Detail requests run concurrently; commits keep the listing order. A
        commit whose detail request fails keeps zero stats and no files.

        Args:
            owner: Repository owner
            repo: Repository name
            since: Only commits after this instant
            until: Only commits before this instant
            author: Login or email to filter by
            sha: Branch name or commit SHA to start listing from
            page: 1-based page number
            per_page: Page size, capped at 100

        Returns:
            CommitPage with normalized commits and pagination info
        """
        per_page = min(per_page, MAX_PER_PAGE)
        params: Dict[str, Any] = {"per_page": per_page, "page": page}
        if since:
            params["since"] = _iso(since)
        if until:
            params["until"] = _iso(until)
        if author:
            params["author"] = author
        if sha:
            params["sha"] = sha

        response = await self._list_commits(owner, repo, params)
        listing = [entry for entry in self._json(response) or [] if isinstance(entry, Mapping)]

        details = await asyncio.gather(
            *(self._commit_detail(owner, repo, entry.get("sha")) for entry in listing),
            return_exceptions=True,
        )

        records = []
        for entry, detail in zip(listing, details):
            if isinstance(detail, Exception):
                logger.warning("commit_detail_failed", sha=entry.get("sha"), error=str(detail))
                detail = None
            records.append(raw_commit_from_api(entry, detail))

        commits = self._normalize_all(records)
        total = response.headers.get("x-total-count")
        logger.info("commits_fetched", repository=f"{owner}/{repo}", page=page, count=len(commits))

        return CommitPage(
            commits=commits,
            pagination=Pagination(
                page=page,
                per_page=per_page,
                # A full last page still reports has_next; GitHub's Link header is not consulted.
                has_next=len(listing) == per_page,
                total_count=int(total) if total and total.isdigit() else None,
            ),
        )

    async def get_repository_contributors(self, owner: str, repo: str) -> List[Contributor]:
        """Contributors from the API merged with authors of recent commits.

        Each source is optional: a failed fetch is logged and the other source
        is used alone. When both fail the result is empty.
        """
        api_contributors = None
        try:
            api_contributors = await self._get_json(
                f"/repos/{owner}/{repo}/contributors",
                params={"per_page": MAX_PER_PAGE, "anon": 1},
            ) or []
        except UpstreamError as e:
            logger.warning("contributors_fetch_failed", repository=f"{owner}/{repo}", error=str(e))

        commits = None
        try:
            response = await self._list_commits(owner, repo, {"per_page": MAX_PER_PAGE})
            listing = [entry for entry in self._json(response) or [] if isinstance(entry, Mapping)]
            commits = self._normalize_all([raw_commit_from_api(entry) for entry in listing])
        except UpstreamError as e:
            logger.warning("contributor_commits_fetch_failed", repository=f"{owner}/{repo}", error=str(e))

        return reconcile_contributors(api_contributors, commits)
