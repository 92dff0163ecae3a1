"""Application services."""

from .projects import ProjectService, configure_project_repository, get_project_service, reset_project_state
from .wizard import WizardState, WizardStateMachine, start_wizard

__all__ = [
    "ProjectService",
    "WizardState",
    "WizardStateMachine",
    "configure_project_repository",
    "get_project_service",
    "reset_project_state",
    "start_wizard",
]
