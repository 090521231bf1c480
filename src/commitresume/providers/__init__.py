"""Source-hosting providers."""

from typing import Any, Callable, Dict

from commitresume.providers.base import CommitPage, GitProvider, Pagination
from commitresume.providers.github import GitHubProvider

GIT_PROVIDERS: Dict[str, Callable[..., GitProvider]] = {
    "github": GitHubProvider,
}


def create_git_provider(name: str, token: str, **kwargs: Any) -> GitProvider:
    """Instantiate the provider registered under ``name``.

    Raises:
        ValueError: If no provider is registered under that name
    """
    factory = GIT_PROVIDERS.get(name.lower())
    if factory is None:
        raise ValueError(f"Unsupported git provider: {name}")
    return factory(token, **kwargs)


__all__ = [
    "CommitPage",
    "GIT_PROVIDERS",
    "GitHubProvider",
    "GitProvider",
    "Pagination",
    "create_git_provider",
]
