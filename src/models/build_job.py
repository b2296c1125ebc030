"""
Build job records and the status snapshots served to polling clients.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.models.asset_model import AssetDescriptor
from src.models.design_document import DesignDocument
from src.models.project_model import GameCategory


class BuildJobStatus(str, Enum):
    """Status of one build attempt."""
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (BuildJobStatus.COMPLETED, BuildJobStatus.FAILED)


class CompilerOutcome(str, Enum):
    """How the compile step ended."""
    SUCCEEDED = "succeeded"
    UNAVAILABLE = "unavailable"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    SKIPPED = "skipped"


class BuildConfig(BaseModel):
    """Everything a build needs, snapshotted when the job is created."""

    project_id: str
    category: GameCategory = GameCategory.OTHER
    design: DesignDocument = Field(default_factory=DesignDocument)
    assets: List[AssetDescriptor] = Field(default_factory=list)


class BuildJob(BaseModel):
    """One build attempt for a project."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    project_id: str
    status: BuildJobStatus = BuildJobStatus.QUEUED
    # Stored only at 0 or 100; live progress comes from the status reporter
    progress: int = Field(0, ge=0, le=100)
    config: BuildConfig
    build_directory: str
    public_url: str
    build_url: Optional[str] = None
    estimated_time: int = Field(0, ge=0)
    logs: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error: Optional[str] = None
    compiler_outcome: Optional[CompilerOutcome] = None
    version: int = 0


class BuildStatusSnapshot(BaseModel):
    """Point-in-time view of a job for polling clients."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    status: BuildJobStatus
    progress: int = Field(ge=0, le=100)
    estimated_time: int = Field(alias="estimatedTime")
    created_at: datetime = Field(alias="createdAt")
    started_at: Optional[datetime] = Field(default=None, alias="startedAt")
    completed_at: Optional[datetime] = Field(default=None, alias="completedAt")
    build_url: Optional[str] = Field(default=None, alias="buildUrl")
    error: Optional[str] = None
    logs: List[str] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
