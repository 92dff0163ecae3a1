"""Pure building blocks of the site workflow."""

from .history import HistoryManager
from .slug import REPO_NAME_MAX_LENGTH, digits_only, repo_slug
from .template import render

__all__ = ["HistoryManager", "REPO_NAME_MAX_LENGTH", "digits_only", "render", "repo_slug"]
