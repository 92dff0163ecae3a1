"""Infrastructure layer exports."""

from .analysis import AnalysisAdapter, VisionClient, configure_analysis_adapter, get_analysis_adapter
from .hosting import RepositoryHost, RepositoryInfo, SiteHost, configure_hosting, get_repository_host, get_site_host
from .preferences import (
    Preferences,
    configure_preferences_store,
    get_preferences_store,
    load_preferences,
    save_preferences,
)
from .projects import InMemoryProjectRepository, JsonProjectRepository, ProjectRepository
from .storage import JsonStore

__all__ = [
    "AnalysisAdapter",
    "InMemoryProjectRepository",
    "JsonProjectRepository",
    "JsonStore",
    "Preferences",
    "ProjectRepository",
    "RepositoryHost",
    "RepositoryInfo",
    "SiteHost",
    "VisionClient",
    "configure_analysis_adapter",
    "configure_hosting",
    "configure_preferences_store",
    "get_analysis_adapter",
    "get_preferences_store",
    "get_repository_host",
    "get_site_host",
    "load_preferences",
    "save_preferences",
]
