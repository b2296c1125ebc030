import pytest

from src.generators.script_generator import ScriptGenerator, csharp_string_array, escape_csharp
from src.models.design_document import DesignDocument
from src.models.project_model import GameCategory, Project


def make_project(category: GameCategory, **design) -> Project:
    return Project(
        user_id="u",
        name="Project Name",
        original_prompt="the original prompt",
        category=category,
        design_document=DesignDocument.coerce(design),
    )


@pytest.mark.parametrize("category, expected", [
    (GameCategory.FPS, ["PlayerController.cs", "EnemyController.cs", "PlayerHealth.cs"]),
    (GameCategory.ADVENTURE, ["ThirdPersonController.cs", "InteractionSystem.cs", "InventorySystem.cs"]),
    (GameCategory.PUZZLE, ["PuzzleManager.cs", "InteractablePuzzle.cs"]),
    (GameCategory.RACING, ["VehicleController.cs", "RaceManager.cs"]),
    (GameCategory.PLATFORMER, ["PlatformerController.cs", "Enemy.cs", "Collectible.cs"]),
    (GameCategory.OTHER, ["GenericController.cs"]),
])
def test_category_scripts(category: GameCategory, expected: list) -> None:
    scripts = ScriptGenerator().generate(make_project(category))

    assert list(scripts) == ["GameManager.cs", "UIManager.cs"] + expected
    assert all(source.strip() for source in scripts.values())


def test_generation_is_deterministic() -> None:
    project = make_project(GameCategory.PUZZLE, gameName="Mind Maze", levels=["One", "Two"])
    generator = ScriptGenerator()

    assert generator.generate(project) == generator.generate(project)


def test_game_manager_uses_design_fields() -> None:
    project = make_project(GameCategory.RACING, gameName="Neon Drift", description="Race at night", genre="Arcade")

    source = ScriptGenerator().game_manager(project)

    assert '"Neon Drift"' in source
    assert '"Race at night"' in source
    assert '"Arcade"' in source


def test_game_manager_falls_back_to_project_fields() -> None:
    source = ScriptGenerator().game_manager(make_project(GameCategory.PLATFORMER))

    assert '"Project Name"' in source
    assert '"the original prompt"' in source
    assert '"platformer"' in source


def test_level_names_are_embedded_and_escaped() -> None:
    project = make_project(GameCategory.PLATFORMER, levels=['The "Big" Jump', "Back\\slash"])

    source = ScriptGenerator().generate(project)["PlatformerController.cs"]

    assert '"The \\"Big\\" Jump", "Back\\\\slash"' in source


def test_hostile_name_cannot_break_out_of_string_literal() -> None:
    project = make_project(GameCategory.FPS, gameName='Evil"; System.IO.File.Delete("x"); //')

    source = ScriptGenerator().game_manager(project)

    assert '"Evil\\"; System.IO.File.Delete(\\"x\\"); //' in source


def test_escape_csharp() -> None:
    assert escape_csharp('a"b') == 'a\\"b'
    assert escape_csharp("a\\b") == "a\\\\b"
    assert escape_csharp("line1\nline2\r\tend") == "line1\\nline2\\r\\tend"
    assert escape_csharp("bell\x07") == "bell\\u0007"
    assert escape_csharp("del\x7f") == "del\\u007f"
    assert escape_csharp("héllo ✓") == "héllo ✓"


def test_csharp_string_array() -> None:
    assert csharp_string_array([]) == ""
    assert csharp_string_array(["a", 'b"c']) == '"a", "b\\"c"'


def test_editor_build_script() -> None:
    source = ScriptGenerator().editor_build_script()

    assert "public static void BuildWebGL()" in source
    assert "BuildTarget.WebGL" in source
