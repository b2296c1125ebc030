import asyncio

import pytest

from src.core.task_manager import BuildTaskManager


@pytest.mark.asyncio
async def test_submit_task(task_manager: BuildTaskManager) -> None:
    async def test_task() -> int:
        await asyncio.sleep(0.1)
        return 42

    task_id = task_manager.submit(test_task(), task_id="build-1")
    assert task_id == "build-1"
    assert task_id in task_manager.tasks, "Task should be created"
    assert task_manager.get_task_status(task_id)["status"] == "queued", "Task status should be queued"

    await task_manager.wait(task_id)
    assert task_manager.get_task_status(task_id)["status"] == "completed"


@pytest.mark.asyncio
async def test_failed_task_is_recorded(task_manager: BuildTaskManager) -> None:
    async def failing() -> None:
        raise RuntimeError("boom")

    task_id = task_manager.submit(failing())
    await task_manager.wait(task_id)

    status = task_manager.get_task_status(task_id)
    assert status["status"] == "failed"
    assert status["error"] == "boom"


@pytest.mark.asyncio
async def test_task_cleanup(task_manager: BuildTaskManager) -> None:
    async def test_task() -> int:
        await asyncio.sleep(0.1)
        return 42

    task_id = task_manager.submit(test_task())
    await asyncio.sleep(0.2)  # Wait for task completion
    removed = await task_manager.cleanup_completed_tasks()
    status = task_manager.get_task_status(task_id)
    assert removed == 1
    assert "cleaned" in status, "Completed task should be marked as cleaned"
    assert task_id not in task_manager.tasks, "Completed task should be removed"


@pytest.mark.asyncio
async def test_cancel_task(task_manager: BuildTaskManager) -> None:
    async def test_task() -> int:
        await asyncio.sleep(1)
        return 42

    task_id = task_manager.submit(test_task())
    success = task_manager.cancel_task(task_id)
    assert success, "Task cancellation should succeed"
    assert task_manager.get_task_status(task_id)["status"] == "cancelled", "Task status should be cancelled"
    assert not task_manager.cancel_task("unknown")


@pytest.mark.asyncio
async def test_concurrency_is_bounded() -> None:
    manager = BuildTaskManager(max_concurrent=1)
    running = 0
    peak = 0

    async def build() -> None:
        nonlocal running, peak
        running += 1
        peak = max(peak, running)
        await asyncio.sleep(0.05)
        running -= 1

    task_ids = [manager.submit(build()) for _ in range(3)]
    for task_id in task_ids:
        await manager.wait(task_id)

    assert peak == 1
    assert all(manager.get_task_status(t)["status"] == "completed" for t in task_ids)
    await manager.shutdown()


@pytest.mark.asyncio
async def test_shutdown_cancels_running_tasks(task_manager: BuildTaskManager) -> None:
    async def forever() -> None:
        await asyncio.sleep(60)

    task_manager.submit(forever())
    task_manager.start_cleanup()
    await asyncio.sleep(0)

    await task_manager.shutdown()

    assert task_manager.active_count == 0
    assert task_manager.tasks == {}
