"""Publish pipeline: generate the site, push it to a repository, deploy it.

Steps run strictly in order and each one marks the :class:`PublishRun` before
doing its work, so an observer sees ``generating -> pushing -> deploying ->
completed``. A collaborator failure in push or deploy ends the run as
``failed`` with the collaborator's message; nothing is retried and a
repository that was already created is left in place.
"""
from __future__ import annotations

import asyncio
import logging
import time
import uuid
from typing import Awaitable, Callable, TypeVar

from localbrands.core import digits_only, render, repo_slug
from localbrands.domain import Project, PublishOutcome, PublishRequest, PublishRun, PublishStatus
from localbrands.errors import CollaboratorError
from localbrands.infrastructure.hosting import (
    RepositoryHost,
    RepositoryInfo,
    SiteHost,
    get_repository_host,
    get_site_host,
)
from localbrands.infrastructure.pages import fallback_site_url

logger = logging.getLogger(__name__)

T = TypeVar("T")

ProgressCallback = Callable[[PublishRun], None]


class _StepFailed(Exception):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_project_id() -> str:
    return uuid.uuid4().hex


class PublishOrchestrator:
    def __init__(
        self,
        repositories: RepositoryHost | None = None,
        site_host: SiteHost | None = None,
        *,
        renderer: Callable[[PublishRequest], str] = render,
        timeout: float | None = 30.0,
        pages_domain: str = "pages.dev",
        clock: Callable[[], int] = _now_ms,
        id_factory: Callable[[], str] = _new_project_id,
    ) -> None:
        self._repositories = repositories or get_repository_host()
        self._site_host = site_host or get_site_host()
        self._renderer = renderer
        self._timeout = timeout
        self._pages_domain = pages_domain
        self._clock = clock
        self._id_factory = id_factory

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _enter(run: PublishRun, status: PublishStatus, on_progress: ProgressCallback | None) -> None:
        run.advance(status)
        logger.info("publish run entered %s", status)
        if on_progress is not None:
            on_progress(run)

    async def _call(self, step: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, self._timeout)
        except (asyncio.TimeoutError, TimeoutError) as exc:
            raise _StepFailed(f"Timed out while {step}") from exc
        except CollaboratorError as exc:
            raise _StepFailed(str(exc)) from exc

    async def _push(self, request: PublishRequest, html: str) -> RepositoryInfo:
        slug = repo_slug(request.business_name)
        repository = await self._call(
            "creating the repository",
            self._repositories.create_repository(slug, description=request.headline),
        )
        await self._call(
            "pushing files",
            self._repositories.push_file(
                repository, "index.html", html, message=f"Publish {request.business_name}"
            ),
        )
        return repository

    async def _deploy(self, repository: RepositoryInfo) -> str:
        url = await self._call("deploying", self._site_host.resolve_url(repository))
        if url:
            return url
        logger.info("site host could not resolve a URL for %s, using fallback", repository.name)
        return fallback_site_url(repository.name, self._pages_domain)

    def _assemble(
        self,
        request: PublishRequest,
        *,
        url: str,
        repo_url: str,
        existing: Project | None,
    ) -> Project:
        return Project(
            id=existing.id if existing else self._id_factory(),
            created_at=existing.created_at if existing else self._clock(),
            business_name=request.business_name,
            image_ref=request.image_url,
            headline=request.headline,
            story=request.story,
            phone=digits_only(request.phone),
            location=request.location or None,
            template_id=request.template_id,
            status="published",
            published_url=url,
            repo_url=repo_url,
        )

    # ------------------------------------------------------------------
    # public API
    # ------------------------------------------------------------------
    async def run(
        self,
        request: PublishRequest,
        *,
        existing: Project | None = None,
        on_progress: ProgressCallback | None = None,
        run: PublishRun | None = None,
    ) -> PublishOutcome:
        """Execute the pipeline once and return its terminal outcome.

        Rendering errors are programming errors and propagate. Collaborator
        faults are captured on the returned run instead of being raised.
        """

        run = run if run is not None else PublishRun()
        if run.active or run.history:
            raise ValueError("a publish run can only be started once")

        self._enter(run, "generating", on_progress)
        html = self._renderer(request)

        self._enter(run, "pushing", on_progress)
        try:
            repository = await self._push(request, html)
        except _StepFailed as exc:
            return self._fail(run, exc.message, on_progress)

        self._enter(run, "deploying", on_progress)
        try:
            url = await self._deploy(repository)
        except _StepFailed as exc:
            return self._fail(run, exc.message, on_progress)

        project = self._assemble(request, url=url, repo_url=repository.html_url, existing=existing)
        self._enter(run, "completed", on_progress)
        return PublishOutcome(run=run, project=project, repo_url=repository.html_url, url=url)

    def _fail(self, run: PublishRun, message: str, on_progress: ProgressCallback | None) -> PublishOutcome:
        logger.error("publish run failed during %s: %s", run.status, message)
        run.fail(message)
        if on_progress is not None:
            on_progress(run)
        return PublishOutcome(run=run)


_orchestrator: PublishOrchestrator | None = None


def configure_publish_orchestrator(orchestrator: PublishOrchestrator | None) -> None:
    global _orchestrator
    _orchestrator = orchestrator


def get_publish_orchestrator() -> PublishOrchestrator:
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = PublishOrchestrator()
    return _orchestrator


__all__ = [
    "ProgressCallback",
    "PublishOrchestrator",
    "configure_publish_orchestrator",
    "get_publish_orchestrator",
]
