from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from localbrands.application import reset_project_state
from localbrands.domain import PublishRequest
from localbrands.errors import GitHubError
from localbrands.infrastructure import configure_preferences_store
from localbrands.infrastructure.hosting import RepositoryInfo


class FakeRepositoryHost:
    """Records calls; fails on ``create`` or ``push`` when asked to."""

    def __init__(self, *, fail_on: str | None = None, message: str = "Failed to create repository: name already exists") -> None:
        self.fail_on = fail_on
        self.message = message
        self.calls: list[tuple[str, str]] = []
        self.files: dict[str, str] = {}
        self.release: asyncio.Event | None = None
        self.delay: float = 0.0

    async def create_repository(self, name: str, *, description: str = "") -> RepositoryInfo:
        self.calls.append(("create", name))
        if self.release is not None:
            await self.release.wait()
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_on == "create":
            raise GitHubError(self.message)
        return RepositoryInfo(name=name, owner="acme", html_url=f"https://github.com/acme/{name}")

    async def push_file(self, repository: RepositoryInfo, path: str, content: str, *, message: str) -> None:
        self.calls.append(("push", repository.name))
        if self.fail_on == "push":
            raise GitHubError(self.message)
        self.files[path] = content


class FakeSiteHost:
    def __init__(self, url: str | None = "https://acme.github.io/site/", error: Exception | None = None) -> None:
        self.url = url
        self.error = error
        self.calls: list[str] = []

    async def resolve_url(self, repository: RepositoryInfo) -> str | None:
        self.calls.append(repository.name)
        if self.error is not None:
            raise self.error
        return self.url


@pytest.fixture(autouse=True)
def reset_state():
    reset_project_state()
    configure_preferences_store(None)
    yield
    reset_project_state()
    configure_preferences_store(None)


@pytest.fixture()
def repositories() -> FakeRepositoryHost:
    return FakeRepositoryHost()


@pytest.fixture()
def site_host() -> FakeSiteHost:
    return FakeSiteHost()


@pytest.fixture()
def publish_request() -> PublishRequest:
    return PublishRequest(
        business_name="Oase Coffee Lab!",
        headline="Slow coffee, fast friends",
        story="Roasted in small batches every morning.",
        phone="62 812-3456-789",
        image_url="https://example.com/cup.jpg",
        template_id="culinary",
    )
