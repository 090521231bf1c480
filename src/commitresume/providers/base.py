"""Capability set shared by source-hosting providers."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel, Field

from commitresume.models.commit import Commit
from commitresume.models.contributor import Contributor

DateLike = Union[datetime, str]


class Pagination(BaseModel):
    """Paging information for a commit listing."""

    page: int = 1
    per_page: int = 100
    has_next: bool = False
    total_count: Optional[int] = None


class CommitPage(BaseModel):
    """One page of normalized commits."""

    commits: List[Commit] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)


@runtime_checkable
class GitProvider(Protocol):
    """What the pipeline needs from a source-hosting service."""

    name: str

    async def authenticate(self) -> Dict[str, Any]:
        ...

    async def list_repositories(
        self,
        sort: str = "updated",
        type: str = "all",
        per_page: int = 100,
        direction: str = "desc",
    ) -> List[Dict[str, Any]]:
        ...

    async def get_repository_details(self, owner: str, repo: str) -> Dict[str, Any]:
        ...

    async def validate_repository(self, owner: str, repo: str) -> bool:
        ...

    async def fetch_commits(
        self,
        owner: str,
        repo: str,
        since: Optional[DateLike] = None,
        until: Optional[DateLike] = None,
        author: Optional[str] = None,
        sha: Optional[str] = None,
        page: int = 1,
        per_page: int = 100,
    ) -> CommitPage:
        ...

    async def get_repository_contributors(self, owner: str, repo: str) -> List[Contributor]:
        ...

    async def aclose(self) -> None:
        ...
