"""
Project records and their build-relevant lifecycle.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field, field_validator

from src.models.design_document import DesignDocument


class GameCategory(str, Enum):
    """Game categories driving template, asset and script selection."""
    FPS = "fps"
    ADVENTURE = "adventure"
    PUZZLE = "puzzle"
    RACING = "racing"
    PLATFORMER = "platformer"
    OTHER = "other"

    @classmethod
    def _missing_(cls, value: object) -> Optional["GameCategory"]:
        if isinstance(value, str):
            normalized = value.strip().lower().replace("_", "-").replace(" ", "-")
            if normalized in ("first-person-shooter", "shooter"):
                return cls.FPS
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @classmethod
    def coerce(cls, value: Any) -> "GameCategory":
        """Parse a category, mapping anything unrecognized to OTHER."""
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


class ProjectStatus(str, Enum):
    """Project lifecycle status."""
    DRAFT = "draft"
    PROCESSING = "processing"
    BUILDING = "building"
    PREVIEW = "preview"
    COMPLETE = "complete"
    FAILED = "failed"

    def can_transition_to(self, target: "ProjectStatus") -> bool:
        return target == self or target in _ALLOWED_TRANSITIONS[self]

    @property
    def is_build_active(self) -> bool:
        return self in (ProjectStatus.PROCESSING, ProjectStatus.BUILDING)


# Nothing leads back to DRAFT; finished projects may only be rebuilt.
_ALLOWED_TRANSITIONS = {
    ProjectStatus.DRAFT: {ProjectStatus.PROCESSING, ProjectStatus.FAILED},
    ProjectStatus.PROCESSING: {ProjectStatus.BUILDING, ProjectStatus.FAILED},
    ProjectStatus.BUILDING: {ProjectStatus.PREVIEW, ProjectStatus.COMPLETE, ProjectStatus.FAILED},
    ProjectStatus.PREVIEW: {ProjectStatus.COMPLETE, ProjectStatus.PROCESSING, ProjectStatus.FAILED},
    ProjectStatus.COMPLETE: {ProjectStatus.PROCESSING},
    ProjectStatus.FAILED: {ProjectStatus.PROCESSING},
}


class BuildInfo(BaseModel):
    """Pointer from a project to its latest build."""

    build_id: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    logs: List[str] = Field(default_factory=list)
    build_url: Optional[str] = None
    preview_url: Optional[str] = None


class Project(BaseModel):
    """A user's game project."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    name: str
    description: Optional[str] = None
    original_prompt: str
    category: GameCategory = GameCategory.OTHER
    status: ProjectStatus = ProjectStatus.DRAFT
    design_document: DesignDocument = Field(default_factory=DesignDocument)
    build_info: BuildInfo = Field(default_factory=BuildInfo)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    version: int = 0

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value: Any) -> GameCategory:
        return GameCategory.coerce(value)

    @field_validator("design_document", mode="before")
    @classmethod
    def _coerce_design(cls, value: Any) -> DesignDocument:
        return DesignDocument.coerce(value)

    @property
    def display_name(self) -> str:
        return self.design_document.game_name or self.name

    @property
    def display_description(self) -> str:
        return self.design_document.description or self.original_prompt

    @property
    def display_genre(self) -> str:
        return self.design_document.genre or self.category.value
