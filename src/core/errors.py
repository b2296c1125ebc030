"""
Error hierarchy for the build pipeline.

Every failure the orchestrator can record against a job derives from
BuildError, which carries a stable error code and a serializable form that
ends up in job records and status snapshots.
"""

from datetime import datetime
from typing import Any, Dict, Optional


class BuildError(Exception):
    """Base exception for all build-related errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.original_exception = original_exception
        self.timestamp = datetime.utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary format."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
            "original_exception": str(self.original_exception) if self.original_exception else None,
        }


class TemplateUnavailable(BuildError):
    """No template directory could be resolved."""


class AssetSelectionDegraded(BuildError):
    """Asset selection failed and fell back to the default list. Never leaves the selector."""


class CompilerInvocationFailed(BuildError):
    """The external compiler did not produce an artifact."""


class FallbackSynthesisFailed(BuildError):
    """Placeholder artifacts could not be written."""


class JobNotFound(BuildError):
    """No build job exists for the given handle."""

    def __init__(self, job_id: str):
        super().__init__(f"Build job not found: {job_id}", details={"job_id": job_id})
        self.job_id = job_id


class ProjectNotFound(BuildError):
    """No project exists for the given id."""

    def __init__(self, project_id: str):
        super().__init__(f"Project not found: {project_id}", details={"project_id": project_id})
        self.project_id = project_id


class BuildAlreadyInProgress(BuildError):
    """A build was requested for a project that is already processing or building."""

    def __init__(self, project_id: str, status: str):
        super().__init__(
            f"Project {project_id} already has a build in progress (status: {status})",
            details={"project_id": project_id, "status": status},
        )


class InvalidStatusTransition(BuildError):
    """A status change that the project lifecycle does not allow."""

    def __init__(self, current: str, requested: str):
        super().__init__(
            f"Cannot move project from '{current}' to '{requested}'",
            details={"current": current, "requested": requested},
        )
