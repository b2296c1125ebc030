"""
Adapter around the Unity command-line build.

The Unity editor is an opaque, long-running executable. The adapter starts it
as a subprocess, enforces a wall-clock timeout and reports what happened as a
CompilerResult instead of raising, so the orchestrator can decide whether to
fall back to placeholder artifacts.
"""

import asyncio
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import structlog

from src.models.build_job import CompilerOutcome
from src.utils.env_config import BuilderConfig

logger = structlog.get_logger(__name__)

BUILD_METHOD = "BuildScript.BuildWebGL"


@dataclass
class CompilerResult:
    """Outcome of one compiler invocation."""
    outcome: CompilerOutcome
    artifact_path: Optional[Path] = None
    reason: Optional[str] = None
    return_code: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == CompilerOutcome.SUCCEEDED


class UnityCompiler:
    """Runs Unity in batch mode to produce a WebGL build."""

    def __init__(self, config: BuilderConfig):
        self.unity_path = config.unity_path
        self.timeout = config.build_timeout_seconds

    def is_available(self) -> bool:
        if not self.unity_path:
            return False
        if os.path.isfile(self.unity_path) and os.access(self.unity_path, os.X_OK):
            return True
        return shutil.which(self.unity_path) is not None

    def build_command(self, project_dir: Path, output_dir: Path, log_file: Path) -> List[str]:
        return [
            self.unity_path,
            "-batchmode",
            "-nographics",
            "-quit",
            "-projectPath", str(project_dir),
            "-executeMethod", BUILD_METHOD,
            "-buildDir", str(output_dir),
            "-logFile", str(log_file),
        ]

    async def compile(self, project_dir: Path, output_dir: Path, log_file: Path) -> CompilerResult:
        """
        Build the staged project into output_dir.

        Args:
            project_dir: Staged Unity project
            output_dir: Directory the WebGL build is written to
            log_file: Where Unity writes its build log

        Returns:
            CompilerResult; success means exit code 0 and output_dir/index.html exists
        """
        if not self.is_available():
            return CompilerResult(CompilerOutcome.UNAVAILABLE, reason=f"Unity executable not found: {self.unity_path!r}")

        command = self.build_command(project_dir, output_dir, log_file)
        logger.info("Starting Unity build", project_dir=str(project_dir), timeout=self.timeout)

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            return CompilerResult(CompilerOutcome.UNAVAILABLE, reason=f"Failed to start Unity: {e}")

        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            logger.warning("Unity build timed out", timeout=self.timeout)
            return CompilerResult(CompilerOutcome.TIMED_OUT, reason=f"Unity build exceeded {self.timeout}s")
        except asyncio.CancelledError:
            if process.returncode is None:
                process.kill()
                await process.wait()
            logger.warning("Unity build cancelled", pid=process.pid)
            raise

        index_file = output_dir / "index.html"
        if process.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()[-500:] if stderr else ""
            return CompilerResult(
                CompilerOutcome.FAILED,
                reason=f"Unity exited with code {process.returncode}" + (f": {message}" if message else ""),
                return_code=process.returncode,
            )
        if not index_file.exists():
            return CompilerResult(
                CompilerOutcome.FAILED,
                reason="Unity finished but produced no index.html",
                return_code=process.returncode,
            )

        logger.info("Unity build succeeded", output_dir=str(output_dir))
        return CompilerResult(CompilerOutcome.SUCCEEDED, artifact_path=output_dir, return_code=0)
