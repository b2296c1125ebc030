import asyncio
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, Optional

import structlog

from src.core.asset_selector import AssetSelector
from src.core.build_orchestrator import BuildOrchestrator
from src.core.compiler import UnityCompiler
from src.core.errors import BuildAlreadyInProgress, InvalidStatusTransition, ProjectNotFound
from src.core.task_manager import BuildTaskManager
from src.factories.design_factory import create_design_generator
from src.factories.storage_factory import create_artifact_publisher, create_document_store
from src.generators.base import DesignGenerator
from src.models.build_job import BuildConfig
from src.models.project_model import BuildInfo, Project, ProjectStatus
from src.storage.build_job_store import BuildJobStore
from src.storage.file_utils import FileUtils, get_file_utils
from src.storage.project_store import ProjectStore
from src.storage.s3_storage import ArtifactPublisher, PublishError
from src.utils.env_config import AppSettings, BuilderConfig, get_settings
from src.utils.validators import CategoryValidator, TextValidator

logger = structlog.get_logger(__name__)


class GameBuilderApp:
    """Main application class for the game builder.

    Wires settings, stores, the design generator and the build orchestrator,
    and runs builds in the background through the task manager.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        builder_config: Optional[BuilderConfig] = None,
        design_generator: Optional[DesignGenerator] = None,
        compiler: Optional[UnityCompiler] = None,
        publisher: Optional[ArtifactPublisher] = None,
        file_utils: Optional[FileUtils] = None,
    ) -> None:
        """Initialize the application."""
        self.settings: AppSettings = settings or get_settings()
        self.builder_config = builder_config or self.settings.get_builder_config()
        self.file_utils = file_utils or get_file_utils()

        # Initialize stores
        self.projects = ProjectStore(create_document_store(self.settings, "projects"))
        self.jobs = BuildJobStore(create_document_store(self.settings, "build_jobs"))

        # Initialize managers
        self.task_manager = BuildTaskManager(max_concurrent=self.builder_config.max_concurrent_builds)
        self._project_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

        # Initialize generators, selector and orchestrator
        self.design_generator = design_generator
        self.publisher = publisher
        self.asset_selector = AssetSelector(self.builder_config, self.file_utils)
        self._compiler = compiler
        self.orchestrator: Optional[BuildOrchestrator] = None

        # Application state
        self.is_initialized = False

    async def initialize(self) -> None:
        """Initialize all components asynchronously."""
        if self.is_initialized:
            return

        logger.info("Initializing Game Builder App", offline_mode=self.builder_config.offline_mode)

        if self.design_generator is None:
            self.design_generator = create_design_generator(self.settings)
            logger.info("Design generator initialized", generator=self.design_generator.name)

        if self.publisher is None:
            self.publisher = create_artifact_publisher(self.settings)
            if self.publisher:
                try:
                    await self.publisher.connect()
                    logger.info("Artifact publisher connected")
                except PublishError as e:
                    logger.warning("Failed to connect artifact publisher, builds stay local", error=e.message)
                    self.publisher = None
            else:
                logger.warning("No storage credentials provided, builds will be served locally only")

        await self.file_utils.ensure_directory(self.builder_config.builds_dir)

        self.orchestrator = BuildOrchestrator(
            self.builder_config,
            self.jobs,
            self.projects,
            compiler=self._compiler,
            publisher=self.publisher,
            file_utils=self.file_utils,
        )

        # Start background tasks
        self.task_manager.start_cleanup()

        self.is_initialized = True
        logger.info("App initialization completed successfully")

    def _require_orchestrator(self) -> BuildOrchestrator:
        if self.orchestrator is None:
            raise RuntimeError("Application not initialized")
        return self.orchestrator

    async def create_project_from_prompt(
        self,
        prompt: str,
        user_id: str = "local",
        name: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Project:
        """
        Create a draft project whose design document is generated from a prompt.

        Args:
            prompt: Free-text game description
            user_id: Owner of the project
            name: Project name; defaults to the generated game name
            category: Game category; defaults to the one derived from the prompt

        Raises:
            ValidationException: If any of the inputs is invalid
        """
        self._require_orchestrator()
        prompt = TextValidator.validate_prompt(prompt)
        user_id = TextValidator.validate_user_id(user_id)
        if name is not None:
            name = TextValidator.validate_project_name(name)
        chosen_category = CategoryValidator.validate_category(category) if category is not None else None

        draft = await self.design_generator.generate(prompt)
        project = Project(
            user_id=user_id,
            name=name or draft.name or draft.design.game_name or "Untitled Game",
            description=draft.design.description,
            original_prompt=prompt,
            category=chosen_category or draft.category,
            design_document=draft.design,
        )
        project = await self.projects.save(project)
        logger.info(
            "Project created",
            project_id=project.id,
            category=project.category.value,
            design_source=draft.source,
        )
        return project

    async def get_project(self, project_id: str) -> Project:
        project = await self.projects.find_by_id(project_id)
        if project is None:
            raise ProjectNotFound(project_id)
        return project

    async def start_build(self, project_id: str) -> Dict[str, Any]:
        """
        Start a build for a project and return without waiting for it.

        Returns:
            {"id": build job id, "estimatedTime": seconds}

        Raises:
            ProjectNotFound: If the project does not exist
            BuildAlreadyInProgress: If the project is already processing or building
        """
        orchestrator = self._require_orchestrator()

        async with self._project_locks[project_id]:
            project = await self.get_project(project_id)
            if project.status.is_build_active:
                raise BuildAlreadyInProgress(project_id, project.status.value)
            if not project.status.can_transition_to(ProjectStatus.PROCESSING):
                raise InvalidStatusTransition(project.status.value, ProjectStatus.PROCESSING.value)

            project = await self.projects.update(
                project_id, {"status": ProjectStatus.PROCESSING}, expected_version=project.version
            )

            try:
                assets = await asyncio.to_thread(
                    self.asset_selector.select, project.category, project.design_document
                )
                build_config = BuildConfig(
                    project_id=project.id,
                    category=project.category,
                    design=project.design_document,
                    assets=assets,
                )
                created = await orchestrator.create_job(build_config)
            except Exception as e:
                await self.projects.update(
                    project_id,
                    {"status": ProjectStatus.FAILED},
                    append_logs=[f"Build failed: {e}"],
                )
                raise

            build_info = BuildInfo(build_id=created["id"], start_time=datetime.utcnow(), logs=["Build job created"])
            await self.projects.update(
                project_id,
                {"status": ProjectStatus.BUILDING, "build_info": build_info.model_dump(mode="json")},
            )

        self.task_manager.submit(orchestrator.run_build(created["id"]), task_id=created["id"])
        logger.info("Build started", project_id=project_id, build_id=created["id"], assets=len(assets))
        return created

    async def get_build_status(self, build_id: str) -> Dict[str, Any]:
        """Get the status snapshot of a build."""
        return await self._require_orchestrator().get_status(build_id)

    async def delete_build(self, build_id: str) -> None:
        """Cancel a build if it is still running, then delete its files and record."""
        orchestrator = self._require_orchestrator()
        job = await self.jobs.find_by_id(build_id)
        if self.task_manager.cancel_task(build_id):
            await self.task_manager.wait(build_id)
        await orchestrator.delete_job(build_id)

        # A build cancelled before it started never marked its project failed
        project = await self.projects.find_by_id(job.project_id) if job else None
        if project and project.status.is_build_active and project.build_info.build_id == build_id:
            await self.projects.update(
                project.id,
                {"status": ProjectStatus.FAILED, "build_info.end_time": datetime.utcnow()},
                append_logs=["Build failed: Build cancelled"],
            )

    async def delete_project(self, project_id: str) -> None:
        """Delete a project together with its latest build."""
        project = await self.get_project(project_id)
        build_id = project.build_info.build_id
        if build_id and await self.jobs.find_by_id(build_id) is not None:
            await self.delete_build(build_id)
        await self.projects.delete(project_id)
        self._project_locks.pop(project_id, None)
        logger.info("Project deleted", project_id=project_id)

    async def wait_for_build(self, build_id: str) -> Dict[str, Any]:
        """Wait for a background build to finish and return its final status."""
        await self.task_manager.wait(build_id)
        return await self.get_build_status(build_id)

    async def shutdown(self) -> None:
        """Shutdown the application and clean up resources."""
        logger.info("Shutting down Game Builder App")

        # Shutdown task manager
        await self.task_manager.shutdown()

        # Clean up generators and storage
        if self.design_generator:
            await self.design_generator.close()
        if self.publisher:
            await self.publisher.disconnect()

        self.is_initialized = False
        logger.info("Application shutdown completed")
