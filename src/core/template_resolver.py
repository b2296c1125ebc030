"""
Maps a game category to the Unity template project it is built from.
"""

from pathlib import Path
from typing import Dict, Optional

import structlog

from src.core.errors import TemplateUnavailable
from src.models.project_model import GameCategory
from src.utils.env_config import BuilderConfig

logger = structlog.get_logger(__name__)

TEMPLATE_DIRECTORIES: Dict[GameCategory, str] = {
    GameCategory.FPS: "fps",
    GameCategory.ADVENTURE: "3d_game_kit",
    GameCategory.PUZZLE: "puzzle",
    GameCategory.RACING: "racing",
    GameCategory.PLATFORMER: "platformer",
}


class TemplateResolver:
    """Resolves template directories under the configured templates root."""

    def __init__(self, config: BuilderConfig):
        self.templates_dir = Path(config.templates_dir)

    def resolve(self, category: GameCategory) -> Path:
        """
        Find the template directory for a category.

        Falls back to the first entry (sorted by name) of the templates root
        when the category has no template of its own.

        Raises:
            TemplateUnavailable: If the templates root is missing, unreadable or empty
        """
        category = GameCategory.coerce(category)
        mapped = TEMPLATE_DIRECTORIES.get(category)
        if mapped:
            candidate = self.templates_dir / mapped
            if candidate.is_dir():
                return candidate

        fallback = self._first_entry()
        logger.warning(
            "No template for category, using fallback",
            category=category.value,
            fallback=fallback.name,
        )
        return fallback

    def _first_entry(self) -> Path:
        try:
            entries = sorted(self.templates_dir.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise TemplateUnavailable(
                f"Templates directory is not readable: {self.templates_dir}",
                details={"templates_dir": str(self.templates_dir)},
                original_exception=e,
            )

        first: Optional[Path] = entries[0] if entries else None
        if first is None:
            raise TemplateUnavailable(
                f"No templates available in {self.templates_dir}",
                details={"templates_dir": str(self.templates_dir)},
            )
        return first
