from pathlib import Path

import pytest

from src.models.build_job import BuildConfig, BuildJob, BuildJobStatus
from src.models.project_model import Project, ProjectStatus
from src.storage.build_job_store import BuildJobStore
from src.storage.document_store import (
    ConcurrentModification,
    DocumentExists,
    DocumentNotFound,
    InMemoryDocumentStore,
    JsonFileDocumentStore,
    StorageError,
    apply_update,
)
from src.storage.project_store import ProjectStore


@pytest.fixture(params=["memory", "json"])
def documents(request: pytest.FixtureRequest, temp_dir: Path):
    if request.param == "memory":
        return InMemoryDocumentStore()
    return JsonFileDocumentStore(temp_dir / "documents")


class TestApplyUpdate:
    def test_dotted_keys_and_append(self) -> None:
        document = {"status": "draft", "build_info": {"logs": ["a"]}, "version": 3}

        updated = apply_update(
            document,
            fields={"status": "building", "build_info.build_id": "job-1"},
            append={"build_info.logs": ["b", "c"]},
        )

        assert updated["status"] == "building"
        assert updated["build_info"] == {"logs": ["a", "b", "c"], "build_id": "job-1"}
        assert updated["version"] == 4
        assert document["build_info"]["logs"] == ["a"], "Original document must not change"

    def test_append_creates_missing_list(self) -> None:
        assert apply_update({}, append={"logs": ["x"]})["logs"] == ["x"]

    def test_append_to_non_list_fails(self) -> None:
        with pytest.raises(StorageError):
            apply_update({"logs": "oops"}, append={"logs": ["x"]})


class TestDocumentStores:
    async def test_insert_get_update_delete(self, documents) -> None:
        stored = await documents.insert("doc-1", {"name": "first"})
        assert stored["version"] == 0

        updated = await documents.update("doc-1", fields={"name": "second"}, append={"logs": ["one"]})
        assert updated["name"] == "second"
        assert updated["logs"] == ["one"]
        assert updated["version"] == 1

        assert (await documents.get("doc-1"))["name"] == "second"
        assert await documents.list_ids() == ["doc-1"]

        assert await documents.delete("doc-1") is True
        assert await documents.get("doc-1") is None
        assert await documents.delete("doc-1") is False

    async def test_duplicate_insert(self, documents) -> None:
        await documents.insert("doc-1", {})
        with pytest.raises(DocumentExists):
            await documents.insert("doc-1", {})

    async def test_update_missing(self, documents) -> None:
        with pytest.raises(DocumentNotFound):
            await documents.update("missing", fields={"a": 1})

    async def test_expected_version(self, documents) -> None:
        await documents.insert("doc-1", {"n": 0})
        await documents.update("doc-1", fields={"n": 1}, expected_version=0)

        with pytest.raises(ConcurrentModification):
            await documents.update("doc-1", fields={"n": 2}, expected_version=0)

    async def test_returned_documents_are_copies(self, documents) -> None:
        await documents.insert("doc-1", {"logs": ["a"]})
        fetched = await documents.get("doc-1")
        fetched["logs"].append("b")

        assert (await documents.get("doc-1"))["logs"] == ["a"]


async def test_json_store_rejects_path_like_ids(temp_dir: Path) -> None:
    store = JsonFileDocumentStore(temp_dir / "documents")
    with pytest.raises(StorageError):
        await store.insert("../escape", {})


async def test_json_store_persists_across_instances(temp_dir: Path) -> None:
    await JsonFileDocumentStore(temp_dir / "documents").insert("doc-1", {"name": "kept"})

    reopened = JsonFileDocumentStore(temp_dir / "documents")

    assert (await reopened.get("doc-1"))["name"] == "kept"


class TestTypedStores:
    async def test_build_job_store(self, job_store: BuildJobStore) -> None:
        job = BuildJob(
            project_id="p",
            config=BuildConfig(project_id="p"),
            build_directory="/tmp/builds/x",
            public_url="http://localhost/builds/x",
            logs=["Build job created"],
        )
        await job_store.save(job)

        updated = await job_store.update(job.id, status=BuildJobStatus.PROCESSING)
        assert updated.status == BuildJobStatus.PROCESSING

        logged = await job_store.append_logs(job.id, "Step one", "Step two")
        assert logged.logs == ["Build job created", "Step one", "Step two"]

        assert await job_store.find_by_id("missing") is None
        assert await job_store.delete(job.id) is True

    async def test_project_store_appends_build_logs(self, project_store: ProjectStore, project: Project) -> None:
        await project_store.update(project.id, {"status": ProjectStatus.PROCESSING}, append_logs=["first"])
        updated = await project_store.append_logs(project.id, "second")

        assert updated.status == ProjectStatus.PROCESSING
        assert updated.build_info.logs == ["first", "second"]
        assert updated.version == 2
        assert updated.updated_at >= project.updated_at

    async def test_project_store_version_check(self, project_store: ProjectStore, project: Project) -> None:
        await project_store.update(project.id, {"name": "Renamed"})

        with pytest.raises(ConcurrentModification):
            await project_store.update(project.id, {"name": "Stale"}, expected_version=project.version)
