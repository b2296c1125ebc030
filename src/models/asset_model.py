"""
Asset descriptors staged into a build.

A descriptor names one file that ends up under the staged Unity project's
Assets/ tree. Its content comes either from a file on disk (source_path) or
from bytes carried inline; a descriptor with neither is skipped at staging.
"""

import base64
from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_serializer, field_validator, model_validator


class AssetKind(str, Enum):
    """Kinds of assets the selector hands to the build."""
    MODEL = "model"
    TEXTURE = "texture"
    AUDIO = "audio"
    PREFAB = "prefab"
    ANIMATION = "animation"


class AssetDescriptor(BaseModel):
    """A single asset destined for the staged project."""

    name: str
    category: str
    filename: str
    kind: AssetKind = AssetKind.MODEL
    source_path: Optional[str] = None
    inline_content: Optional[bytes] = None
    project_path: str = ""

    @field_validator("inline_content", mode="before")
    @classmethod
    def _decode_inline_content(cls, value):
        # Persisted descriptors carry inline bytes as base64 text
        if isinstance(value, str):
            return base64.b64decode(value)
        return value

    @field_serializer("inline_content")
    def _encode_inline_content(self, value: Optional[bytes]) -> Optional[str]:
        if value is None:
            return None
        return base64.b64encode(value).decode("ascii")

    @model_validator(mode="after")
    def _check_content_origin(self) -> "AssetDescriptor":
        if self.source_path and self.inline_content is not None:
            raise ValueError(f"Asset '{self.name}' has both a source path and inline content")
        if not self.project_path:
            self.project_path = f"Assets/{self.category}/{self.filename}"
        return self

    @property
    def has_content(self) -> bool:
        return bool(self.source_path) or self.inline_content is not None
