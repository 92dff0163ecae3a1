"""Exception types shared across the application layers."""
from __future__ import annotations


class LocalBrandsError(RuntimeError):
    """Base class for errors raised by this package."""


class CollaboratorError(LocalBrandsError):
    """Raised when an external service call does not succeed.

    The message is the collaborator's own description of the failure and is
    surfaced to callers unchanged.
    """


class GitHubError(CollaboratorError):
    """Raised when the repository hosting API returns an error."""


class GeminiError(CollaboratorError):
    """Raised when the vision model API returns an error or unusable output."""


class WizardActionRejected(LocalBrandsError):
    """Raised when a wizard action is not allowed in the current state."""


class PublishFailed(LocalBrandsError):
    """Raised when a publish run terminates in the ``failed`` state."""


__all__ = [
    "CollaboratorError",
    "GeminiError",
    "GitHubError",
    "LocalBrandsError",
    "PublishFailed",
    "WizardActionRejected",
]
