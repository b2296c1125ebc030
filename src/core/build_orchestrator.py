"""
Build job lifecycle.

A build job stages a Unity project for one project snapshot, compiles it to
WebGL (or writes a placeholder build when Unity is unavailable), and keeps
the job record and the owning project's status in step. Jobs move
queued -> processing -> completed | failed; every failure is mirrored onto
the project with exactly one "Build failed" log line.
"""

import asyncio
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import structlog

from src.core import status_reporter
from src.core.compiler import CompilerResult, UnityCompiler
from src.core.errors import BuildError, CompilerInvocationFailed, InvalidStatusTransition, JobNotFound, ProjectNotFound
from src.core.template_resolver import TemplateResolver
from src.generators.placeholder_build import PlaceholderBuildWriter
from src.generators.script_generator import ScriptGenerator
from src.models.asset_model import AssetDescriptor
from src.models.build_job import BuildConfig, BuildJob, BuildJobStatus, CompilerOutcome
from src.models.project_model import GameCategory, Project, ProjectStatus
from src.storage.build_job_store import BuildJobStore
from src.storage.document_store import ConcurrentModification, StorageError
from src.storage.file_utils import FileUtils, get_file_utils
from src.storage.project_store import ProjectStore
from src.storage.s3_storage import ArtifactPublisher, PublishError
from src.utils.env_config import BuilderConfig

logger = structlog.get_logger(__name__)

BASE_BUILD_SECONDS = 30

CATEGORY_BUILD_SECONDS: Dict[GameCategory, int] = {
    GameCategory.FPS: 20,
    GameCategory.ADVENTURE: 25,
    GameCategory.PUZZLE: 15,
    GameCategory.RACING: 20,
    GameCategory.PLATFORMER: 15,
}

DEFAULT_CATEGORY_BUILD_SECONDS = 10

UNITY_LOG_TAIL_LINES = 20

STATUS_UPDATE_ATTEMPTS = 5


def estimate_build_time(config: BuildConfig) -> int:
    """Estimated build duration in seconds."""
    return (
        BASE_BUILD_SECONDS
        + 2 * len(config.assets)
        + 3 * len(config.design.mechanics)
        + 5 * len(config.design.levels)
        + CATEGORY_BUILD_SECONDS.get(config.category, DEFAULT_CATEGORY_BUILD_SECONDS)
    )


class BuildOrchestrator:
    """Creates, runs, reports on and deletes build jobs."""

    def __init__(
        self,
        config: BuilderConfig,
        jobs: BuildJobStore,
        projects: ProjectStore,
        template_resolver: Optional[TemplateResolver] = None,
        script_generator: Optional[ScriptGenerator] = None,
        compiler: Optional[UnityCompiler] = None,
        placeholder_writer: Optional[PlaceholderBuildWriter] = None,
        publisher: Optional[ArtifactPublisher] = None,
        file_utils: Optional[FileUtils] = None,
    ):
        self.config = config
        self.jobs = jobs
        self.projects = projects
        self.file_utils = file_utils or get_file_utils()
        self.template_resolver = template_resolver or TemplateResolver(config)
        self.script_generator = script_generator or ScriptGenerator()
        self.compiler = compiler or UnityCompiler(config)
        self.placeholder_writer = placeholder_writer or PlaceholderBuildWriter(self.file_utils)
        self.publisher = publisher

    async def create_job(self, build_config: BuildConfig) -> Dict[str, Any]:
        """
        Create and persist a queued build job.

        Args:
            build_config: Snapshot of everything the build needs

        Returns:
            {"id": job id, "estimatedTime": seconds}
        """
        job_id = str(uuid.uuid4())
        staging_dir = Path(self.config.builds_dir) / job_id

        await self.file_utils.ensure_directory(staging_dir)
        await self.file_utils.write_json(staging_dir / "build-config.json", build_config.model_dump(mode="json"))

        job = BuildJob(
            id=job_id,
            project_id=build_config.project_id,
            config=build_config,
            build_directory=str(staging_dir),
            public_url=f"{self.config.public_builds_url}/{job_id}",
            estimated_time=estimate_build_time(build_config),
            logs=["Build job created"],
        )
        await self.jobs.save(job)

        logger.info(
            "Build job created",
            job_id=job_id,
            project_id=build_config.project_id,
            estimated_time=job.estimated_time,
        )
        return {"id": job.id, "estimatedTime": job.estimated_time}

    async def run_build(self, job_id: str) -> BuildJob:
        """
        Run a queued build to completion.

        Raises:
            JobNotFound: If the job does not exist
            Exception: Whatever failed the build, after job and project are marked failed
        """
        job = await self.jobs.find_by_id(job_id)
        if job is None:
            raise JobNotFound(job_id)

        job = await self.jobs.update(job_id, status=BuildJobStatus.PROCESSING, started_at=datetime.utcnow(), progress=0)
        await self._log(job_id, "Build started")

        try:
            project = await self._ensure_building(job.project_id)
            # Scripts and config come from the snapshot taken when the job was created
            snapshot = project.model_copy(update={
                "design_document": job.config.design,
                "category": job.config.category,
            })

            staging_dir = Path(job.build_directory)
            unity_project = staging_dir / "unity_project"
            webgl_dir = staging_dir / "webgl"

            template = self.template_resolver.resolve(job.config.category)
            await self.file_utils.copy_tree(template, unity_project)
            await self._log(job_id, f"Copied template '{template.name}'")

            staged = await self._stage_assets(job_id, job.config.assets, unity_project)
            await self._log(job_id, f"Staged {staged} of {len(job.config.assets)} assets")

            script_names = await self._write_scripts(snapshot, unity_project)
            await self._log(job_id, f"Generated scripts: {', '.join(script_names)}")

            await self._write_game_config(snapshot, job.config.assets, unity_project)

            outcome = await self._produce_artifacts(job, snapshot, unity_project, webgl_dir)

            build_url = f"{job.public_url}/webgl"
            await self._publish(job_id, webgl_dir)

            completed_at = datetime.utcnow()
            job = await self.jobs.update(
                job_id,
                status=BuildJobStatus.COMPLETED,
                progress=100,
                completed_at=completed_at,
                build_url=build_url,
                compiler_outcome=outcome,
            )
            await self._log(job_id, "Build completed successfully")

            await self._transition_project(
                job.project_id,
                ProjectStatus.PREVIEW,
                {
                    "build_info.build_url": build_url,
                    "build_info.preview_url": build_url,
                    "build_info.end_time": completed_at,
                },
                logs=["Build completed successfully"],
            )

            logger.info("Build completed", job_id=job_id, build_url=build_url, compiler_outcome=outcome.value)
            return await self.jobs.find_by_id(job_id) or job

        except asyncio.CancelledError:
            await self._fail(job_id, job.project_id, "Build cancelled")
            raise
        except Exception as e:
            message = e.message if isinstance(e, BuildError) else str(e)
            await self._fail(job_id, job.project_id, message or type(e).__name__)
            raise

    async def get_status(self, job_id: str) -> Dict[str, Any]:
        """Status snapshot of a job. Reading it changes nothing."""
        job = await self.jobs.find_by_id(job_id)
        if job is None:
            raise JobNotFound(job_id)
        return status_reporter.snapshot(job).to_dict()

    async def delete_job(self, job_id: str) -> None:
        """Remove a job's staging directory (best effort) and its record."""
        job = await self.jobs.find_by_id(job_id)
        if job is None:
            raise JobNotFound(job_id)

        removed = await self.file_utils.remove_tree(job.build_directory)
        await self.jobs.delete(job_id)
        logger.info("Build job deleted", job_id=job_id, directory_removed=removed)

    # Private helper methods

    async def _log(self, job_id: str, message: str) -> None:
        await self.jobs.append_logs(job_id, message)
        logger.info(message, job_id=job_id)

    async def _ensure_building(self, project_id: str) -> Project:
        """Bring the project to BUILDING through the legal intermediate states."""
        project = await self.projects.find_by_id(project_id)
        if project is None:
            raise ProjectNotFound(project_id)
        if project.status == ProjectStatus.BUILDING:
            return project
        if project.status != ProjectStatus.PROCESSING:
            project = await self._transition_project(project_id, ProjectStatus.PROCESSING)
        return await self._transition_project(project_id, ProjectStatus.BUILDING)

    async def _transition_project(
        self,
        project_id: str,
        target: ProjectStatus,
        fields: Optional[Dict[str, Any]] = None,
        logs: Optional[List[str]] = None,
    ) -> Project:
        update = {"status": target}
        update.update(fields or {})

        # Unrelated edits bump the version too; re-read and check the status again
        for attempt in range(1, STATUS_UPDATE_ATTEMPTS + 1):
            project = await self.projects.find_by_id(project_id)
            if project is None:
                raise ProjectNotFound(project_id)
            if not project.status.can_transition_to(target):
                raise InvalidStatusTransition(project.status.value, target.value)
            try:
                return await self.projects.update(
                    project_id, update, append_logs=logs, expected_version=project.version
                )
            except ConcurrentModification:
                if attempt == STATUS_UPDATE_ATTEMPTS:
                    raise
                logger.info("Project changed during status update, retrying",
                            project_id=project_id, target=target.value, attempt=attempt)
        raise InvalidStatusTransition(project.status.value, target.value)

    async def _stage_assets(self, job_id: str, assets: List[AssetDescriptor], unity_project: Path) -> int:
        staged = 0
        root = unity_project.resolve()
        for asset in assets:
            if not asset.has_content:
                logger.warning("Skipping asset without content", job_id=job_id, asset=asset.name)
                await self.jobs.append_logs(job_id, f"Skipped asset '{asset.name}': no content")
                continue

            target = unity_project / asset.project_path
            if not target.resolve().is_relative_to(root):
                logger.warning("Skipping asset outside project", job_id=job_id, asset=asset.name, path=asset.project_path)
                await self.jobs.append_logs(job_id, f"Skipped asset '{asset.name}': invalid path")
                continue

            if asset.source_path:
                source = Path(asset.source_path)
                if not source.exists():
                    logger.warning("Asset source missing", job_id=job_id, asset=asset.name, source=str(source))
                    await self.jobs.append_logs(job_id, f"Skipped asset '{asset.name}': source missing")
                    continue
                await self.file_utils.copy_path(source, target)
            else:
                await self.file_utils.write_bytes(target, asset.inline_content)
            staged += 1
        return staged

    async def _write_scripts(self, project: Project, unity_project: Path) -> List[str]:
        scripts_dir = unity_project / "Assets" / "Scripts"
        scripts = self.script_generator.generate(project)
        for filename, source in scripts.items():
            await self.file_utils.write_text(scripts_dir / filename, source)

        build_script = unity_project / "Assets" / "Editor" / "BuildScript.cs"
        if not build_script.exists():
            await self.file_utils.write_text(build_script, self.script_generator.editor_build_script())
        return list(scripts.keys())

    async def _write_game_config(self, project: Project, assets: List[AssetDescriptor], unity_project: Path) -> None:
        design = project.design_document
        game_config = {
            "gameId": project.id,
            "name": project.display_name,
            "type": project.category.value,
            "description": project.display_description,
            "genre": project.display_genre,
            "setting": design.setting.model_dump() if design.setting else None,
            "characters": [character.model_dump() for character in design.characters],
            "mechanics": list(design.mechanics),
            "levels": [level.model_dump() for level in design.levels],
            "assets": [
                {
                    "name": asset.name,
                    "category": asset.category,
                    "filename": asset.filename,
                    "type": asset.kind.value,
                    "projectPath": asset.project_path,
                }
                for asset in assets
            ],
        }
        await self.file_utils.write_json(unity_project / "Assets" / "Resources" / "GameConfig.json", game_config)

    async def _produce_artifacts(
        self,
        job: BuildJob,
        project: Project,
        unity_project: Path,
        webgl_dir: Path,
    ) -> CompilerOutcome:
        """Compile with Unity, or write the placeholder build; returns how compilation went."""
        if self.config.offline_mode:
            await self._log(job.id, "Offline mode: simulating Unity build")
            await asyncio.sleep(self.config.simulated_build_delay)
            await self._write_placeholder(job.id, project, webgl_dir)
            return CompilerOutcome.SKIPPED

        log_file = Path(job.build_directory) / "unity_build.log"
        await self._log(job.id, "Running Unity build")
        try:
            result = await self.compiler.compile(unity_project, webgl_dir, log_file)
        except Exception as e:
            result = CompilerResult(CompilerOutcome.FAILED, reason=f"Compiler raised {type(e).__name__}: {e}")

        if result.succeeded:
            await self._log(job.id, "Unity build succeeded")
            return CompilerOutcome.SUCCEEDED

        error = CompilerInvocationFailed(result.reason or "Unity build failed", details={"outcome": result.outcome.value})
        logger.warning("Unity build produced no artifacts", job_id=job.id, **error.details, reason=error.message)
        tail = await self.file_utils.read_tail(log_file, UNITY_LOG_TAIL_LINES)
        await self.jobs.append_logs(
            job.id,
            f"Unity build {result.outcome.value}: {error.message}",
            *(f"unity: {line}" for line in tail),
        )
        await self._write_placeholder(job.id, project, webgl_dir)
        return result.outcome

    async def _write_placeholder(self, job_id: str, project: Project, webgl_dir: Path) -> None:
        await self.placeholder_writer.write(
            webgl_dir,
            project.display_name,
            project.display_description,
            project.category,
        )
        await self._log(job_id, "Created placeholder WebGL build")

    async def _publish(self, job_id: str, webgl_dir: Path) -> None:
        if self.publisher is None:
            return
        try:
            url = await self.publisher.publish_build(job_id, webgl_dir)
        except PublishError as e:
            logger.warning("Artifact publishing failed", job_id=job_id, error=e.message, error_code=e.error_code)
            await self.jobs.append_logs(job_id, f"Artifact publishing failed: {e.message}")
            return
        await self._log(job_id, f"Published artifacts to {url}")

    async def _fail(self, job_id: str, project_id: str, message: str) -> None:
        """Mark the job and its project failed. Never raises."""
        now = datetime.utcnow()
        try:
            job = await self.jobs.find_by_id(job_id)
            if job is not None and job.status == BuildJobStatus.COMPLETED:
                # Completed is terminal; only the project mirror went wrong
                logger.error("Project update failed after build completed", job_id=job_id,
                             project_id=project_id, error=message)
                await self.jobs.append_logs(job_id, f"Project status update failed: {message}")
                return
        except StorageError as e:
            logger.error("Failed to read job before recording failure", job_id=job_id, error=str(e))

        try:
            await self.jobs.update(job_id, status=BuildJobStatus.FAILED, progress=0, error=message, completed_at=now)
            await self.jobs.append_logs(job_id, f"Build failed: {message}")
        except StorageError as e:
            logger.error("Failed to record build failure on job", job_id=job_id, error=str(e))

        try:
            project = await self.projects.find_by_id(project_id)
            if project is None:
                return
            fields: Dict[str, Any] = {"build_info.end_time": now}
            if project.status.can_transition_to(ProjectStatus.FAILED):
                fields["status"] = ProjectStatus.FAILED
            await self.projects.update(project_id, fields, append_logs=[f"Build failed: {message}"])
        except StorageError as e:
            logger.error("Failed to record build failure on project", project_id=project_id, error=str(e))

        logger.error("Build failed", job_id=job_id, project_id=project_id, error=message)
