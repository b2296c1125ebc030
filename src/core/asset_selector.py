"""
Chooses the assets staged into a build.

Selection tries, in order: the curated asset library shipped under the
assets root, metadata files describing extra assets, and a plain scan of
per-category asset directories. Whatever goes wrong, the caller still gets
a usable list: the per-category default assets carry inline placeholder
content and need nothing on disk.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

import structlog

from src.core.errors import AssetSelectionDegraded
from src.models.asset_model import AssetDescriptor, AssetKind
from src.models.design_document import DesignDocument
from src.models.project_model import GameCategory
from src.storage.file_utils import FileUtils, get_file_utils
from src.utils.env_config import BuilderConfig

logger = structlog.get_logger(__name__)


REQUIRED_ASSET_CATEGORIES: Dict[GameCategory, List[str]] = {
    GameCategory.FPS: ["characters", "weapons", "fx", "environment", "ui", "audio"],
    GameCategory.ADVENTURE: ["characters", "environment", "props", "ui", "audio"],
    GameCategory.PUZZLE: ["props", "interactive", "environment", "ui", "audio"],
    GameCategory.RACING: ["vehicles", "environment", "ui", "audio"],
    GameCategory.PLATFORMER: ["characters", "environment", "interactive", "ui", "audio"],
    GameCategory.OTHER: ["characters", "environment", "ui", "audio"],
}


@dataclass(frozen=True)
class CuratedAsset:
    """An entry of the curated asset library, relative to the assets root."""
    name: str
    category: str
    relative_path: str
    kind: AssetKind
    tags: tuple = field(default_factory=tuple)


COMMON_CURATED_ASSETS = [
    CuratedAsset("Simple UI Kit", "ui", "ui/simple_ui_kit.prefab", AssetKind.PREFAB, ("ui", "menu", "interface")),
    CuratedAsset("General Audio Pack", "audio", "audio", AssetKind.AUDIO, ("audio", "sound", "sfx")),
]

CURATED_ASSETS: Dict[GameCategory, List[CuratedAsset]] = {
    GameCategory.FPS: [
        CuratedAsset("Zombie Character", "characters", "characters/zombies/zombie.fbx", AssetKind.MODEL,
                     ("zombie", "enemy", "character")),
        CuratedAsset("Zombie Attack Animation", "animations", "animations/Zombie Attack.fbx", AssetKind.ANIMATION,
                     ("zombie", "attack", "animation")),
        CuratedAsset("FPS Gun", "weapons", "weapons/guns/gun.fbx", AssetKind.MODEL, ("gun", "weapon", "fps")),
        CuratedAsset("Gun Sound FX", "audio", "audio/weapons/fog_of_war_gun_sound.wav", AssetKind.AUDIO,
                     ("gun", "sound", "weapon")),
        CuratedAsset("First Person Controller", "characters", "characters/modular_first_person_controller.prefab",
                     AssetKind.PREFAB, ("player", "controller", "fps")),
        CuratedAsset("Forest Environment", "environment", "environments/forest/fantasy_forest_environment.prefab",
                     AssetKind.PREFAB, ("forest", "nature", "environment")),
    ],
    GameCategory.ADVENTURE: [
        CuratedAsset("3D Game Kit Environment", "environment", "environments/3d_game_kit.prefab", AssetKind.PREFAB,
                     ("environment", "kit", "adventure")),
        CuratedAsset("Third Person Controller", "characters", "characters/modular_first_person_controller.prefab",
                     AssetKind.PREFAB, ("player", "controller", "character")),
    ],
}


def _inline(name: str, category: str, filename: str, kind: AssetKind, marker: str) -> AssetDescriptor:
    return AssetDescriptor(
        name=name,
        category=category,
        filename=filename,
        kind=kind,
        inline_content=marker.encode("utf-8"),
    )


def default_assets(category: GameCategory) -> List[AssetDescriptor]:
    """Placeholder assets for a category. Needs nothing on disk."""
    common = [
        _inline("Skybox", "Environment", "skybox.jpg", AssetKind.TEXTURE, "MOCK_SKYBOX_DATA"),
        _inline("Ground Texture", "Environment", "ground.jpg", AssetKind.TEXTURE, "MOCK_GROUND_TEXTURE_DATA"),
    ]
    specific = {
        GameCategory.FPS: [
            _inline("Gun Model", "Weapons", "pistol.fbx", AssetKind.MODEL, "MOCK_GUN_MODEL_DATA"),
            _inline("Enemy Model", "Characters", "enemy.fbx", AssetKind.MODEL, "MOCK_ENEMY_MODEL_DATA"),
        ],
        GameCategory.ADVENTURE: [
            _inline("Character Model", "Characters", "player.fbx", AssetKind.MODEL, "MOCK_CHARACTER_MODEL_DATA"),
            _inline("Tree Model", "Environment", "tree.fbx", AssetKind.MODEL, "MOCK_TREE_MODEL_DATA"),
        ],
        GameCategory.PUZZLE: [
            _inline("Puzzle Box", "Props", "puzzle_box.fbx", AssetKind.MODEL, "MOCK_PUZZLE_BOX_DATA"),
            _inline("Button", "Interactive", "button.fbx", AssetKind.MODEL, "MOCK_BUTTON_MODEL_DATA"),
        ],
        GameCategory.RACING: [
            _inline("Car Model", "Vehicles", "car.fbx", AssetKind.MODEL, "MOCK_CAR_MODEL_DATA"),
            _inline("Track", "Environment", "track.fbx", AssetKind.MODEL, "MOCK_TRACK_MODEL_DATA"),
        ],
        GameCategory.PLATFORMER: [
            _inline("Platform", "Environment", "platform.fbx", AssetKind.MODEL, "MOCK_PLATFORM_MODEL_DATA"),
            _inline("Collectible", "Interactive", "collectible.fbx", AssetKind.MODEL, "MOCK_COLLECTIBLE_MODEL_DATA"),
        ],
    }
    return common + specific.get(GameCategory.coerce(category), [])


_MODEL_SUFFIXES = {".fbx", ".obj", ".gltf", ".glb", ".blend", ".dae"}
_AUDIO_SUFFIXES = {".wav", ".mp3", ".ogg", ".aiff"}
_TEXTURE_SUFFIXES = {".png", ".jpg", ".jpeg", ".tga", ".psd", ".exr"}


def kind_for(path: Path, category: str) -> AssetKind:
    """Guess an asset kind from its file suffix and category."""
    suffix = path.suffix.lower()
    if category == "animations":
        return AssetKind.ANIMATION
    if suffix in _AUDIO_SUFFIXES or (not suffix and category == "audio"):
        return AssetKind.AUDIO
    if suffix in _TEXTURE_SUFFIXES:
        return AssetKind.TEXTURE
    if suffix in _MODEL_SUFFIXES:
        return AssetKind.MODEL
    return AssetKind.PREFAB


class AssetSelector:
    """Resolves a category and design document into staged assets."""

    def __init__(self, config: BuilderConfig, file_utils: Optional[FileUtils] = None):
        self.assets_dir = Path(config.assets_dir)
        self.file_utils = file_utils or get_file_utils()

    def select(self, category: GameCategory, design: Optional[DesignDocument] = None) -> List[AssetDescriptor]:
        """
        Select assets for a build. Never raises.

        Args:
            category: Game category of the project
            design: Design document whose asset names are preferred when present

        Returns:
            Non-empty list of asset descriptors
        """
        category = GameCategory.coerce(category)
        design = design or DesignDocument()
        try:
            assets = self._select(category, design)
        except Exception as e:
            logger.warning("Asset selection failed, using default assets", category=category.value, error=str(e))
            return default_assets(category)

        if not assets:
            logger.info("No library assets found, using default assets", category=category.value)
            return default_assets(category)

        logger.info("Selected assets", category=category.value, count=len(assets))
        return assets

    def _select(self, category: GameCategory, design: DesignDocument) -> List[AssetDescriptor]:
        if not self.assets_dir.is_dir():
            raise AssetSelectionDegraded(
                f"Assets directory not found: {self.assets_dir}",
                details={"assets_dir": str(self.assets_dir)},
            )

        preferred = design.asset_names()
        selected: List[AssetDescriptor] = []
        satisfied: Set[str] = set()

        curated = COMMON_CURATED_ASSETS + CURATED_ASSETS.get(category, [])
        for entry in sorted(curated, key=lambda e: not self._is_preferred(e.name, e.tags, preferred)):
            source = self.assets_dir / entry.relative_path
            if not source.exists():
                logger.debug("Curated asset missing", asset=entry.name, path=str(source))
                continue
            selected.append(self._descriptor(entry.name, entry.category, source, entry.kind))
            satisfied.add(entry.category)

        missing = [c for c in REQUIRED_ASSET_CATEGORIES[category] if c not in satisfied]
        if missing:
            metadata = self._load_metadata(category)
            for asset_category in missing:
                found = self._from_metadata(asset_category, metadata, preferred)
                if found is None:
                    found = self._from_directory(asset_category, preferred)
                if found is None:
                    logger.warning("No asset found for category", category=category.value, asset_category=asset_category)
                    continue
                selected.append(found)

        return selected

    @staticmethod
    def _is_preferred(name: str, tags: Iterable[str], preferred: Set[str]) -> bool:
        if not preferred:
            return False
        lowered = name.lower()
        if lowered in preferred:
            return True
        return any(tag in name_ for name_ in preferred for tag in tags)

    def _descriptor(self, name: str, asset_category: str, source: Path, kind: AssetKind) -> AssetDescriptor:
        return AssetDescriptor(
            name=name,
            category=asset_category,
            filename=self.file_utils.sanitize_filename(source.name),
            kind=kind,
            source_path=str(source),
        )

    def _load_metadata(self, category: GameCategory) -> List[dict]:
        """Metadata entries under <assets>/metadata usable for this game category."""
        metadata_dir = self.assets_dir / "metadata"
        if not metadata_dir.is_dir():
            return []

        entries = []
        for metadata_file in sorted(metadata_dir.glob("*.json")):
            try:
                entry = json.loads(metadata_file.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                logger.warning("Unreadable asset metadata", file=metadata_file.name, error=str(e))
                continue
            if not isinstance(entry, dict):
                continue
            game_types = entry.get("gameTypes") or []
            if category.value in game_types or "all" in game_types:
                entries.append(entry)
        return entries

    def _from_metadata(self, asset_category: str, metadata: List[dict], preferred: Set[str]) -> Optional[AssetDescriptor]:
        candidates = [m for m in metadata if str(m.get("type", "")).lower() == asset_category]
        candidates.sort(key=lambda m: not self._is_preferred(str(m.get("name", "")), m.get("tags") or (), preferred))
        for entry in candidates:
            local_path = entry.get("localPath")
            if not local_path:
                continue
            source = Path(local_path)
            if not source.is_absolute():
                source = self.assets_dir / source
            if source.exists():
                name = str(entry.get("name") or source.stem)
                return self._descriptor(name, asset_category, source, kind_for(source, asset_category))
        return None

    def _from_directory(self, asset_category: str, preferred: Set[str]) -> Optional[AssetDescriptor]:
        directory = self.assets_dir / asset_category
        if not directory.is_dir():
            return None
        files = [path for path, _ in self.file_utils.iter_files(directory)]
        if not files:
            return None
        files.sort(key=lambda p: p.stem.lower() not in preferred)
        source = files[0]
        return self._descriptor(source.stem, asset_category, source, kind_for(source, asset_category))
