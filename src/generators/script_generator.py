"""
Generates the C# gameplay scripts injected into a staged Unity project.

Generation is pure: the same project always produces byte-identical sources,
and nothing is written to disk here.
"""

from typing import Callable, Dict, Iterable, List

from src.generators import csharp_templates as templates
from src.models.project_model import GameCategory, Project

_SIMPLE_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def escape_csharp(value: str) -> str:
    """Escape text for embedding inside a C# double-quoted string literal."""
    escaped: List[str] = []
    for char in value:
        if char in _SIMPLE_ESCAPES:
            escaped.append(_SIMPLE_ESCAPES[char])
        elif ord(char) < 0x20 or ord(char) == 0x7F:
            escaped.append(f"\\u{ord(char):04x}")
        else:
            escaped.append(char)
    return "".join(escaped)


def csharp_string_array(values: Iterable[str]) -> str:
    """Comma-separated C# string literals, for use inside an array initializer."""
    return ", ".join(f'"{escape_csharp(value)}"' for value in values)


def _level_names(project: Project) -> List[str]:
    return [level.name for level in project.design_document.levels]


def _fps_scripts(project: Project) -> Dict[str, str]:
    return {
        "PlayerController.cs": templates.PLAYER_CONTROLLER,
        "EnemyController.cs": templates.ENEMY_CONTROLLER,
        "PlayerHealth.cs": templates.PLAYER_HEALTH,
    }


def _adventure_scripts(project: Project) -> Dict[str, str]:
    return {
        "ThirdPersonController.cs": templates.THIRD_PERSON_CONTROLLER,
        "InteractionSystem.cs": templates.INTERACTION_SYSTEM,
        "InventorySystem.cs": templates.INVENTORY_SYSTEM,
    }


def _puzzle_scripts(project: Project) -> Dict[str, str]:
    levels = csharp_string_array(_level_names(project))
    return {
        "PuzzleManager.cs": templates.PUZZLE_MANAGER.substitute(level_names=levels),
        "InteractablePuzzle.cs": templates.INTERACTABLE_PUZZLE,
    }


def _racing_scripts(project: Project) -> Dict[str, str]:
    levels = csharp_string_array(_level_names(project))
    return {
        "VehicleController.cs": templates.VEHICLE_CONTROLLER,
        "RaceManager.cs": templates.RACE_MANAGER.substitute(level_names=levels),
    }


def _platformer_scripts(project: Project) -> Dict[str, str]:
    levels = csharp_string_array(_level_names(project))
    return {
        "PlatformerController.cs": templates.PLATFORMER_CONTROLLER.substitute(level_names=levels),
        "Enemy.cs": templates.ENEMY,
        "Collectible.cs": templates.COLLECTIBLE,
    }


def _generic_scripts(project: Project) -> Dict[str, str]:
    return {"GenericController.cs": templates.GENERIC_CONTROLLER}


CATEGORY_SCRIPTS: Dict[GameCategory, Callable[[Project], Dict[str, str]]] = {
    GameCategory.FPS: _fps_scripts,
    GameCategory.ADVENTURE: _adventure_scripts,
    GameCategory.PUZZLE: _puzzle_scripts,
    GameCategory.RACING: _racing_scripts,
    GameCategory.PLATFORMER: _platformer_scripts,
}


class ScriptGenerator:
    """Produces C# sources for a project."""

    def game_manager(self, project: Project) -> str:
        return templates.GAME_MANAGER.substitute(
            game_name=escape_csharp(project.display_name),
            game_description=escape_csharp(project.display_description),
            game_genre=escape_csharp(project.display_genre),
            category_init=templates.CATEGORY_INIT.get(project.category.value, templates.DEFAULT_CATEGORY_INIT),
        )

    def generate(self, project: Project) -> Dict[str, str]:
        """
        Generate every script for a project.

        Args:
            project: Project whose category and design drive the output

        Returns:
            Mapping of filename to C# source, in a stable order
        """
        scripts = {
            "GameManager.cs": self.game_manager(project),
            "UIManager.cs": templates.UI_MANAGER,
        }
        category_scripts = CATEGORY_SCRIPTS.get(project.category, _generic_scripts)
        scripts.update(category_scripts(project))
        return scripts

    def editor_build_script(self) -> str:
        """Editor script exposing BuildScript.BuildWebGL to batch mode."""
        return templates.EDITOR_BUILD_SCRIPT
