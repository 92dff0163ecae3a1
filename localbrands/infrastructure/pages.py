"""GitHub Pages URL resolution for published repositories."""
from __future__ import annotations

import logging

from localbrands.errors import GitHubError

from .github import GitHubClient
from .hosting import RepositoryInfo

logger = logging.getLogger(__name__)


class GitHubPagesHost:
    """Resolves ``https://<owner>.github.io/<repo>/`` for a pushed repository."""

    def __init__(self, github: GitHubClient) -> None:
        self._github = github

    async def resolve_url(self, repository: RepositoryInfo) -> str | None:
        owner = repository.owner
        if not owner:
            try:
                owner = await self._github.get_login()
            except GitHubError as exc:
                logger.warning("could not resolve pages URL for %s: %s", repository.name, exc)
                return None
        return f"https://{owner.lower()}.github.io/{repository.name}/"


def fallback_site_url(slug: str, domain: str = "pages.dev") -> str:
    """Deterministic URL used when the site host cannot resolve one."""

    return f"https://{slug}.{domain}"


__all__ = ["GitHubPagesHost", "fallback_site_url"]
