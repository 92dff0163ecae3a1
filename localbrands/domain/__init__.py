"""Domain layer definitions."""

from .projects import TEMPLATE_IDS, AnalysisResult, Project, ProjectStatus, TemplateId
from .publishing import PUBLISH_STEPS, PublishOutcome, PublishRequest, PublishRun, PublishStatus

__all__ = [
    "AnalysisResult",
    "PUBLISH_STEPS",
    "Project",
    "ProjectStatus",
    "PublishOutcome",
    "PublishRequest",
    "PublishRun",
    "PublishStatus",
    "TEMPLATE_IDS",
    "TemplateId",
]
