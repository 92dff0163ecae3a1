"""Domain entities for a single publish pipeline execution."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from .projects import Project, TemplateId

PublishStatus = Literal["idle", "generating", "pushing", "deploying", "completed", "failed"]

PUBLISH_STEPS: tuple[PublishStatus, ...] = ("generating", "pushing", "deploying", "completed")


@dataclass(slots=True)
class PublishRequest:
    """Finalized content handed to the publish pipeline."""

    business_name: str
    headline: str
    story: str
    phone: str
    image_url: str
    template_id: TemplateId
    location: str | None = None


@dataclass(slots=True)
class PublishRun:
    """Progress of one publish attempt.

    ``history`` records every status the run entered, in order, so observers
    and tests can check that steps advance monotonically.
    """

    status: PublishStatus = "idle"
    error: str | None = None
    history: list[PublishStatus] = field(default_factory=list)

    @property
    def active(self) -> bool:
        return self.status not in ("idle", "completed", "failed")

    def advance(self, status: PublishStatus) -> None:
        if status != "failed":
            done = tuple(step for step in self.history if step != "failed")
            if self.status == "failed" or PUBLISH_STEPS[: len(done) + 1] != (*done, status):
                raise ValueError(f"publish step {status!r} is out of order")
        self.status = status
        self.history.append(status)

    def fail(self, message: str) -> None:
        self.error = message
        self.advance("failed")


@dataclass(slots=True)
class PublishOutcome:
    """Terminal result of a publish run."""

    run: PublishRun
    project: Project | None = None
    repo_url: str | None = None
    url: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.run.status == "completed"
