"""
Persistence for build jobs.
"""

from typing import Any, Optional

import structlog
from pydantic_core import to_jsonable_python

from src.models.build_job import BuildJob
from src.storage.document_store import DocumentStore

logger = structlog.get_logger(__name__)


class BuildJobStore:
    """Typed access to build job documents. Holds no business rules."""

    def __init__(self, documents: DocumentStore):
        self.documents = documents

    async def save(self, job: BuildJob) -> BuildJob:
        stored = await self.documents.insert(job.id, job.model_dump(mode="json"))
        return BuildJob.model_validate(stored)

    async def find_by_id(self, job_id: str) -> Optional[BuildJob]:
        document = await self.documents.get(job_id)
        if document is None:
            return None
        return BuildJob.model_validate(document)

    async def update(self, job_id: str, **fields: Any) -> BuildJob:
        """Set top-level fields; raises DocumentNotFound for unknown ids."""
        stored = await self.documents.update(job_id, fields=to_jsonable_python(fields))
        return BuildJob.model_validate(stored)

    async def append_logs(self, job_id: str, *lines: str) -> BuildJob:
        stored = await self.documents.update(job_id, append={"logs": list(lines)})
        return BuildJob.model_validate(stored)

    async def delete(self, job_id: str) -> bool:
        return await self.documents.delete(job_id)
