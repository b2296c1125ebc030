"""
Task management for background builds.

Builds run as tracked asyncio tasks. A semaphore bounds how many run at
once; finished tasks are reaped periodically so their exceptions are
logged rather than lost.
"""

import asyncio
import uuid
from datetime import datetime
from typing import Any, Coroutine, Dict, Optional

import structlog

logger = structlog.get_logger(__name__)


class BuildTaskManager:
    """Manages background build tasks and their lifecycle."""

    def __init__(self, max_concurrent: int = 2, cleanup_interval: int = 300):
        self.tasks: Dict[str, asyncio.Task] = {}
        self.task_status: Dict[str, Dict[str, Any]] = {}
        self.max_concurrent = max(1, max_concurrent)
        self.cleanup_interval = cleanup_interval
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._cleanup_task: Optional[asyncio.Task] = None

    @property
    def semaphore(self) -> asyncio.Semaphore:
        # Created lazily so it binds to the running loop
        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.max_concurrent)
        return self._semaphore

    def start_cleanup(self) -> None:
        """Start the cleanup task."""
        if self._cleanup_task is None or self._cleanup_task.done():
            self._cleanup_task = asyncio.create_task(self._periodic_cleanup())

    async def _periodic_cleanup(self) -> None:
        """Periodically clean up completed tasks."""
        while True:
            try:
                await asyncio.sleep(self.cleanup_interval)
                await self.cleanup_completed_tasks()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Error in task cleanup", error=str(e))

    async def cleanup_completed_tasks(self) -> int:
        """Remove completed tasks from memory; returns how many were removed."""
        completed_tasks = [task_id for task_id, task in self.tasks.items() if task.done()]

        for task_id in completed_tasks:
            self.tasks.pop(task_id)
            if task_id in self.task_status:
                self.task_status[task_id]["cleaned"] = True

        if completed_tasks:
            logger.info("Cleaned up completed build tasks", count=len(completed_tasks))
        return len(completed_tasks)

    def submit(self, coro: Coroutine[Any, Any, Any], task_id: Optional[str] = None) -> str:
        """Schedule a build coroutine; it waits for a free slot before running."""
        if task_id is None:
            task_id = str(uuid.uuid4())

        self.task_status[task_id] = {
            "created_at": datetime.utcnow(),
            "status": "queued",
            "error": None,
        }
        self.tasks[task_id] = asyncio.create_task(self._run(task_id, coro))
        return task_id

    async def _run(self, task_id: str, coro: Coroutine[Any, Any, Any]) -> Any:
        try:
            async with self.semaphore:
                self.update_task_status(task_id, status="running")
                result = await coro
        except asyncio.CancelledError:
            # No-op unless cancelled while still queued
            coro.close()
            self.update_task_status(task_id, status="cancelled")
            raise
        except Exception as e:
            # Failures are already recorded on the job; the task only logs them
            self.update_task_status(task_id, status="failed", error=str(e))
            logger.error("Build task failed", task_id=task_id, error=str(e), error_type=type(e).__name__)
            return None
        self.update_task_status(task_id, status="completed")
        return result

    def get_task_status(self, task_id: str) -> Dict[str, Any]:
        """Get the current status of a task."""
        return self.task_status.get(task_id, {"status": "not_found"})

    def update_task_status(self, task_id: str, **kwargs) -> None:
        """Update the status of a task."""
        if task_id in self.task_status:
            self.task_status[task_id].update(kwargs)
            self.task_status[task_id]["updated_at"] = datetime.utcnow()

    def cancel_task(self, task_id: str) -> bool:
        """Cancel a running task."""
        task = self.tasks.get(task_id)
        if task is not None and not task.done():
            task.cancel()
            self.update_task_status(task_id, status="cancelled")
            return True
        return False

    async def wait(self, task_id: str) -> None:
        """Wait for a task to finish, whatever its outcome."""
        task = self.tasks.get(task_id)
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    @property
    def active_count(self) -> int:
        return sum(1 for task in self.tasks.values() if not task.done())

    async def shutdown(self) -> None:
        """Shutdown the task manager and clean up all tasks."""
        if self._cleanup_task:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass

        for task in self.tasks.values():
            if not task.done():
                task.cancel()

        if self.tasks:
            await asyncio.gather(*self.tasks.values(), return_exceptions=True)

        self.tasks.clear()
        self.task_status.clear()
