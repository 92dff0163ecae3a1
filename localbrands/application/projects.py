"""Application service layer for persisted projects."""
from __future__ import annotations

from localbrands.domain import Project
from localbrands.infrastructure import InMemoryProjectRepository, ProjectRepository


class ProjectService:
    """Coordinates project persistence use cases."""

    def __init__(self, repository: ProjectRepository) -> None:
        self._repository = repository

    def list_projects(self) -> list[Project]:
        return sorted(self._repository.list_projects(), key=lambda item: item.created_at, reverse=True)

    def get_project(self, project_id: str) -> Project | None:
        return self._repository.get_project(project_id)

    def save_project(self, project: Project) -> None:
        self._repository.save_project(project)

    def delete_project(self, project_id: str) -> bool:
        return self._repository.delete_project(project_id)

    # ------------------------------------------------------------------
    # testing helpers
    # ------------------------------------------------------------------
    def reset(self) -> None:
        self._repository.reset()


_service = ProjectService(InMemoryProjectRepository())


def configure_project_repository(repository: ProjectRepository) -> None:
    """Point the process-wide service at ``repository``."""

    global _service
    _service = ProjectService(repository)


def get_project_service() -> ProjectService:
    """Return the singleton project service for the process."""

    return _service


def reset_project_state() -> None:
    """Reset the configured store (used in tests)."""

    _service.reset()
