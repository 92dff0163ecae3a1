"""Infrastructure layer for project persistence."""
from __future__ import annotations

import logging
from typing import Protocol

from pydantic import ValidationError

from localbrands.domain import Project

from .storage import PROJECTS_KEY, JsonStore

logger = logging.getLogger(__name__)


class ProjectRepository(Protocol):
    """Persistence contract for the project list."""

    def list_projects(self) -> list[Project]: ...

    def get_project(self, project_id: str) -> Project | None: ...

    def save_project(self, project: Project) -> None: ...

    def delete_project(self, project_id: str) -> bool: ...

    def reset(self) -> None: ...


def _upsert(projects: list[Project], project: Project) -> list[Project]:
    updated = [item for item in projects if item.id != project.id]
    if len(updated) == len(projects):
        return [project, *projects]
    return [project if item.id == project.id else item for item in projects]


class InMemoryProjectRepository:
    """Simple in-memory repository for fast iteration and tests."""

    def __init__(self) -> None:
        self._projects: list[Project] = []

    def list_projects(self) -> list[Project]:
        return list(self._projects)

    def get_project(self, project_id: str) -> Project | None:
        return next((item for item in self._projects if item.id == project_id), None)

    def save_project(self, project: Project) -> None:
        self._projects = _upsert(self._projects, project)

    def delete_project(self, project_id: str) -> bool:
        remaining = [item for item in self._projects if item.id != project_id]
        removed = len(remaining) != len(self._projects)
        self._projects = remaining
        return removed

    def reset(self) -> None:
        self._projects = []


class JsonProjectRepository:
    """Project list persisted through :class:`JsonStore` under a fixed key.

    Rows that no longer validate are hidden from readers but written back
    untouched, so saving one project never drops another.
    """

    def __init__(self, store: JsonStore, key: str = PROJECTS_KEY) -> None:
        self._store = store
        self._key = key

    def _rows(self) -> list:
        rows = self._store.get(self._key, [])
        return rows if isinstance(rows, list) else []

    def _load(self) -> list[Project]:
        projects: list[Project] = []
        for row in self._rows():
            try:
                projects.append(Project.model_validate(row))
            except ValidationError as exc:
                logger.warning("skipping unreadable stored project: %s", exc)
        return projects

    def list_projects(self) -> list[Project]:
        return self._load()

    def get_project(self, project_id: str) -> Project | None:
        return next((item for item in self._load() if item.id == project_id), None)

    def save_project(self, project: Project) -> None:
        rows = self._rows()
        wire = project.to_wire()
        if any(_row_id(row) == project.id for row in rows):
            rows = [wire if _row_id(row) == project.id else row for row in rows]
        else:
            rows = [wire, *rows]
        self._store.set(self._key, rows)

    def delete_project(self, project_id: str) -> bool:
        rows = self._rows()
        remaining = [row for row in rows if _row_id(row) != project_id]
        if len(remaining) == len(rows):
            return False
        self._store.set(self._key, remaining)
        return True

    def reset(self) -> None:
        self._store.remove(self._key)


def _row_id(row: object) -> object:
    return row.get("id") if isinstance(row, dict) else None


__all__ = ["InMemoryProjectRepository", "JsonProjectRepository", "ProjectRepository"]
