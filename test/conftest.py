import tempfile
from collections.abc import AsyncGenerator, Generator
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

from src.core.build_orchestrator import BuildOrchestrator
from src.core.compiler import CompilerResult
from src.core.task_manager import BuildTaskManager
from src.models.build_job import CompilerOutcome
from src.models.design_document import DesignDocument
from src.models.project_model import GameCategory, Project
from src.storage.build_job_store import BuildJobStore
from src.storage.document_store import InMemoryDocumentStore
from src.storage.project_store import ProjectStore
from src.utils.env_config import AppSettings, BuilderConfig


@pytest.fixture
def temp_dir() -> Generator[Path]:
    with tempfile.TemporaryDirectory() as tmpdirname:
        yield Path(tmpdirname)


@pytest.fixture
def templates_dir(temp_dir: Path) -> Path:
    root = temp_dir / "templates"
    for name in ("3d_game_kit", "fps"):
        (root / name / "Assets").mkdir(parents=True)
        (root / name / "ProjectSettings").mkdir()
        (root / name / "ProjectSettings" / "ProjectVersion.txt").write_text("m_EditorVersion: 2022.3.0f1\n")
    return root


@pytest.fixture
def builder_config(temp_dir: Path, templates_dir: Path) -> BuilderConfig:
    return BuilderConfig(
        templates_dir=templates_dir,
        builds_dir=temp_dir / "builds",
        builds_url="http://localhost:5000/builds/",
        assets_dir=temp_dir / "assets",
        unity_path="/opt/unity/Editor/Unity",
        offline_mode=False,
        simulated_build_delay=0,
        build_timeout_seconds=5,
        max_concurrent_builds=2,
    )


@pytest.fixture
def offline_config(builder_config: BuilderConfig) -> BuilderConfig:
    return BuilderConfig(
        templates_dir=builder_config.templates_dir,
        builds_dir=builder_config.builds_dir,
        builds_url=builder_config.builds_url,
        assets_dir=builder_config.assets_dir,
        unity_path="",
        offline_mode=True,
        simulated_build_delay=0,
    )


@pytest.fixture
def project_store() -> ProjectStore:
    return ProjectStore(InMemoryDocumentStore())


@pytest.fixture
def job_store() -> BuildJobStore:
    return BuildJobStore(InMemoryDocumentStore())


@pytest.fixture
def fake_compiler() -> MagicMock:
    """Compiler that reports Unity as unavailable unless a test says otherwise."""
    compiler = MagicMock()
    compiler.compile = AsyncMock(
        return_value=CompilerResult(CompilerOutcome.UNAVAILABLE, reason="Unity executable not found")
    )
    return compiler


@pytest.fixture
def orchestrator(builder_config: BuilderConfig, job_store: BuildJobStore, project_store: ProjectStore,
                 fake_compiler: MagicMock) -> BuildOrchestrator:
    return BuildOrchestrator(builder_config, job_store, project_store, compiler=fake_compiler)


@pytest.fixture
def design() -> DesignDocument:
    return DesignDocument.coerce({
        "gameName": "Zombie Siege",
        "description": "Hold the mall against the undead",
        "genre": "First-Person Shooter",
        "setting": {"type": "urban", "description": "An abandoned shopping mall"},
        "characters": [{"type": "player", "description": "A survivor"}],
        "mechanics": ["Shooting", "Reloading"],
        "levels": [{"name": "Food Court", "description": "Opening wave", "difficulty": "Easy"}],
        "assets": {"characters": ["Zombie Character"]},
        "userInterface": ["Health Bar"],
    })


@pytest.fixture
async def project(project_store: ProjectStore, design: DesignDocument) -> Project:
    return await project_store.save(Project(
        user_id="user-1",
        name="Zombie Siege",
        original_prompt="a zombie shooter in a mall",
        category=GameCategory.FPS,
        design_document=design,
    ))


@pytest.fixture
def task_manager() -> BuildTaskManager:
    return BuildTaskManager(max_concurrent=2)


@pytest.fixture
def mock_settings(mocker: Any) -> MagicMock:
    settings = MagicMock(spec=AppSettings)
    settings.llm_api_key = None
    settings.data_dir = None
    settings.get_llm_config.return_value = {
        "api_key": None,
        "model": "gpt-4o-mini",
        "base_url": None,
        "max_tokens": 2048,
        "temperature": 0.7,
        "timeout": 60,
        "max_retries": 3,
    }
    settings.get_storage_config.return_value = {
        "access_key_id": None,
        "secret_access_key": None,
        "bucket_name": "test-bucket",
        "endpoint_url": None,
        "region": "us-east-1",
        "public_url": None,
    }
    return settings


@pytest.fixture(autouse=True)
def mock_logger(mocker: Any) -> MagicMock:
    return mocker.patch.object(structlog, "get_logger", return_value=MagicMock())


# Ensure async cleanup for task manager
@pytest.fixture(autouse=True)
async def cleanup_tasks(task_manager: BuildTaskManager) -> AsyncGenerator[None]:
    yield
    await task_manager.shutdown()
