"""Contracts for the repository and static hosting collaborators."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from localbrands.errors import GitHubError


@dataclass(slots=True)
class RepositoryInfo:
    """A repository created for a site."""

    name: str
    owner: str
    html_url: str


class RepositoryHost(Protocol):
    """Creates repositories and commits generated files into them."""

    async def create_repository(self, name: str, *, description: str = "") -> RepositoryInfo: ...

    async def push_file(self, repository: RepositoryInfo, path: str, content: str, *, message: str) -> None: ...


class SiteHost(Protocol):
    """Resolves the public URL serving a repository's content.

    Returns ``None`` when the URL cannot be resolved; the caller then derives
    one from the repository name.
    """

    async def resolve_url(self, repository: RepositoryInfo) -> str | None: ...


class UnconfiguredRepositoryHost:
    async def create_repository(self, name: str, *, description: str = "") -> RepositoryInfo:
        raise GitHubError("GitHub token is not configured")

    async def push_file(self, repository: RepositoryInfo, path: str, content: str, *, message: str) -> None:
        raise GitHubError("GitHub token is not configured")


class UnresolvedSiteHost:
    async def resolve_url(self, repository: RepositoryInfo) -> str | None:
        return None


_repositories: RepositoryHost = UnconfiguredRepositoryHost()
_site_host: SiteHost = UnresolvedSiteHost()


def configure_hosting(repositories: RepositoryHost, site_host: SiteHost) -> None:
    """Install the collaborators used by the publish pipeline."""

    global _repositories, _site_host
    _repositories = repositories
    _site_host = site_host


def get_repository_host() -> RepositoryHost:
    return _repositories


def get_site_host() -> SiteHost:
    return _site_host


__all__ = [
    "RepositoryHost",
    "RepositoryInfo",
    "SiteHost",
    "UnconfiguredRepositoryHost",
    "UnresolvedSiteHost",
    "configure_hosting",
    "get_repository_host",
    "get_site_host",
]
