from datetime import datetime

import pytest
from pydantic import ValidationError

from src.models.asset_model import AssetDescriptor, AssetKind
from src.models.build_job import BuildConfig, BuildJob, BuildJobStatus, BuildStatusSnapshot
from src.models.design_document import DesignDocument
from src.models.project_model import GameCategory, Project, ProjectStatus


class TestGameCategory:
    """Test suite for GameCategory enum."""

    def test_game_category_values(self) -> None:
        expected = {"fps", "adventure", "puzzle", "racing", "platformer", "other"}
        assert {member.value for member in GameCategory} == expected

    def test_long_alias(self) -> None:
        assert GameCategory("first-person-shooter") == GameCategory.FPS
        assert GameCategory("Racing") == GameCategory.RACING

    def test_coerce_unknown(self) -> None:
        assert GameCategory.coerce("strategy") == GameCategory.OTHER
        assert GameCategory.coerce(None) == GameCategory.OTHER


class TestProjectStatus:
    """Test suite for the project lifecycle."""

    def test_happy_path(self) -> None:
        assert ProjectStatus.DRAFT.can_transition_to(ProjectStatus.PROCESSING)
        assert ProjectStatus.PROCESSING.can_transition_to(ProjectStatus.BUILDING)
        assert ProjectStatus.BUILDING.can_transition_to(ProjectStatus.PREVIEW)
        assert ProjectStatus.PREVIEW.can_transition_to(ProjectStatus.COMPLETE)

    def test_rebuild_allowed_from_finished_states(self) -> None:
        for status in (ProjectStatus.PREVIEW, ProjectStatus.COMPLETE, ProjectStatus.FAILED):
            assert status.can_transition_to(ProjectStatus.PROCESSING)

    def test_never_back_to_draft(self) -> None:
        for status in ProjectStatus:
            if status != ProjectStatus.DRAFT:
                assert not status.can_transition_to(ProjectStatus.DRAFT)

    def test_illegal_transitions(self) -> None:
        assert not ProjectStatus.DRAFT.can_transition_to(ProjectStatus.PREVIEW)
        assert not ProjectStatus.COMPLETE.can_transition_to(ProjectStatus.FAILED)

    def test_is_build_active(self) -> None:
        active = {s for s in ProjectStatus if s.is_build_active}
        assert active == {ProjectStatus.PROCESSING, ProjectStatus.BUILDING}


class TestDesignDocument:
    """Test suite for design document coercion."""

    def test_coerce_full_document(self) -> None:
        design = DesignDocument.coerce({
            "gameName": "Neon Drift",
            "setting": {"type": "urban", "description": "Rainy streets"},
            "characters": [{"type": "player", "description": "A courier"}],
            "levels": [{"name": "Downtown", "difficulty": "Hard"}],
            "userInterface": ["Speedometer"],
        })

        assert design.game_name == "Neon Drift"
        assert design.setting.type == "urban"
        assert design.levels[0].difficulty == "Hard"
        assert design.user_interface == ["Speedometer"]

    def test_coerce_reshapes_bad_values(self) -> None:
        design = DesignDocument.coerce({
            "mechanics": "Jumping",
            "characters": ["A friendly ghost"],
            "levels": ["Cave"],
            "setting": "space",
        })

        assert design.mechanics == ["Jumping"]
        assert design.characters[0].type == "npc"
        assert design.characters[0].description == "A friendly ghost"
        assert design.levels[0].name == "Cave"
        assert design.setting.type == "space"

    def test_coerce_non_mapping(self) -> None:
        assert DesignDocument.coerce("not a document") == DesignDocument()
        assert DesignDocument.coerce(None) == DesignDocument()

    def test_coerce_drops_unusable_values(self) -> None:
        design = DesignDocument.coerce({"gameName": "Kept", "levels": 42})

        assert design.game_name == "Kept"
        assert design.levels == []

    def test_asset_names(self) -> None:
        design = DesignDocument.coerce({"assets": {"characters": ["Zombie Character"], "props": ["Crate"]}})
        assert design.asset_names() == {"zombie character", "crate"}

    def test_round_trips_through_project_storage_shape(self) -> None:
        design = DesignDocument.coerce({"gameName": "Stored"})
        project = Project(user_id="u", name="n", original_prompt="p", design_document=design)

        restored = Project.model_validate(project.model_dump(mode="json"))

        assert restored.design_document.game_name == "Stored"


class TestAssetDescriptor:
    def test_default_project_path(self) -> None:
        asset = AssetDescriptor(name="Car", category="Vehicles", filename="car.fbx", inline_content=b"CAR")
        assert asset.project_path == "Assets/Vehicles/car.fbx"
        assert asset.kind == AssetKind.MODEL
        assert asset.has_content

    def test_both_origins_rejected(self) -> None:
        with pytest.raises(ValidationError):
            AssetDescriptor(name="x", category="c", filename="f", source_path="/tmp/f", inline_content=b"x")

    def test_no_origin_is_legal(self) -> None:
        assert not AssetDescriptor(name="x", category="c", filename="f").has_content

    def test_inline_bytes_survive_json(self) -> None:
        asset = AssetDescriptor(name="x", category="c", filename="f", inline_content=b"\x00\xffdata")
        restored = AssetDescriptor.model_validate(asset.model_dump(mode="json"))
        assert restored.inline_content == b"\x00\xffdata"


class TestBuildJob:
    def test_defaults(self) -> None:
        job = BuildJob(
            project_id="p",
            config=BuildConfig(project_id="p"),
            build_directory="/tmp/builds/x",
            public_url="http://localhost/builds/x",
        )
        assert job.status == BuildJobStatus.QUEUED
        assert job.progress == 0
        assert job.id

    def test_terminal_statuses(self) -> None:
        assert BuildJobStatus.COMPLETED.is_terminal
        assert BuildJobStatus.FAILED.is_terminal
        assert not BuildJobStatus.PROCESSING.is_terminal

    def test_snapshot_uses_camel_case_keys(self) -> None:
        snapshot = BuildStatusSnapshot(
            id="job",
            status=BuildJobStatus.QUEUED,
            progress=0,
            estimated_time=45,
            created_at=datetime(2024, 1, 1),
        )
        data = snapshot.to_dict()
        assert data["estimatedTime"] == 45
        assert data["startedAt"] is None
        assert data["buildUrl"] is None
        assert data["createdAt"] == "2024-01-01T00:00:00"
