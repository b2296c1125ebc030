"""
Canonical game design document.

Design documents arrive from an external text generator whose output shape is
not guaranteed. DesignDocument.coerce() is the single boundary where that
output is validated: every field has an explicit default and malformed values
are reshaped or dropped, so the rest of the pipeline never has to guess.
"""

from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = structlog.get_logger(__name__)


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _as_text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value).strip()


class Setting(BaseModel):
    type: str = "generic"
    description: str = ""

    @field_validator("type", mode="before")
    @classmethod
    def _type_text(cls, value: Any) -> str:
        return _as_text(value) or "generic"

    @field_validator("description", mode="before")
    @classmethod
    def _description_text(cls, value: Any) -> str:
        return _as_text(value)


class Character(BaseModel):
    type: str = "npc"
    description: str = ""

    @field_validator("type", mode="before")
    @classmethod
    def _type_text(cls, value: Any) -> str:
        return _as_text(value) or "npc"

    @field_validator("description", mode="before")
    @classmethod
    def _description_text(cls, value: Any) -> str:
        return _as_text(value)


class Level(BaseModel):
    name: str
    description: str = ""
    difficulty: str = "Medium"

    @field_validator("name", "description", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("difficulty", mode="before")
    @classmethod
    def _difficulty_text(cls, value: Any) -> str:
        return _as_text(value) or "Medium"


class DesignDocument(BaseModel):
    """Structured description of a game derived from a free-text prompt."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    game_name: str | None = Field(default=None, alias="gameName")
    description: str | None = None
    genre: str | None = None
    setting: Setting | None = None
    characters: list[Character] = Field(default_factory=list)
    mechanics: list[str] = Field(default_factory=list)
    levels: list[Level] = Field(default_factory=list)
    assets: dict[str, list[str]] = Field(default_factory=dict)
    user_interface: list[str] = Field(default_factory=list, alias="userInterface")

    @field_validator("game_name", "description", "genre", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> str | None:
        text = _as_text(value)
        return text or None

    @field_validator("setting", mode="before")
    @classmethod
    def _coerce_setting(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"type": value} if value.strip() else None
        if isinstance(value, (dict, Setting)):
            return value
        return None

    @field_validator("characters", mode="before")
    @classmethod
    def _coerce_characters(cls, value: Any) -> list:
        characters = []
        for item in _as_list(value):
            if isinstance(item, str) and item.strip():
                characters.append({"type": "npc", "description": item})
            elif isinstance(item, (dict, Character)):
                characters.append(item)
        return characters

    @field_validator("mechanics", "user_interface", mode="before")
    @classmethod
    def _coerce_strings(cls, value: Any) -> list[str]:
        return [_as_text(item) for item in _as_list(value) if _as_text(item)]

    @field_validator("levels", mode="before")
    @classmethod
    def _coerce_levels(cls, value: Any) -> list:
        levels = []
        for index, item in enumerate(_as_list(value)):
            if isinstance(item, str) and item.strip():
                levels.append({"name": item})
            elif isinstance(item, dict):
                level = dict(item)
                if not _as_text(level.get("name")):
                    level["name"] = f"Level {index + 1}"
                levels.append(level)
            elif isinstance(item, Level):
                levels.append(item)
        return levels

    @field_validator("assets", mode="before")
    @classmethod
    def _coerce_assets(cls, value: Any) -> dict[str, list[str]]:
        if isinstance(value, dict):
            return {
                str(category): [_as_text(name) for name in _as_list(names) if _as_text(name)]
                for category, names in value.items()
            }
        if isinstance(value, (list, tuple)):
            return {"misc": [_as_text(name) for name in value if _as_text(name)]}
        return {}

    @classmethod
    def coerce(cls, raw: Any) -> "DesignDocument":
        """Validate producer output into the canonical schema, never raising."""
        if isinstance(raw, DesignDocument):
            return raw
        if not isinstance(raw, dict):
            if raw is not None:
                logger.warning("Design document is not a mapping, using empty document", type=type(raw).__name__)
            return cls()

        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            logger.warning("Design document failed validation, salvaging fields", errors=e.error_count())

        # Keep every field that validates on its own
        salvaged: dict[str, Any] = {}
        for name, field in cls.model_fields.items():
            key = field.alias or name
            if key not in raw and name not in raw:
                continue
            value = raw.get(key, raw.get(name))
            try:
                partial = cls.model_validate({key: value})
            except ValidationError:
                continue
            salvaged[name] = getattr(partial, name)
        return cls(**salvaged)

    def asset_names(self) -> set[str]:
        """Every asset name mentioned anywhere in the document, lowercased."""
        return {name.lower() for names in self.assets.values() for name in names}
