"""
Persistence for projects.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic_core import to_jsonable_python

from src.models.project_model import Project
from src.storage.document_store import DocumentStore


class ProjectStore:
    """Typed access to project documents.

    Updates take dotted keys so the build-info sub-record can be changed
    field by field; build logs are only ever appended to.
    """

    def __init__(self, documents: DocumentStore):
        self.documents = documents

    async def save(self, project: Project) -> Project:
        stored = await self.documents.insert(project.id, project.model_dump(mode="json"))
        return Project.model_validate(stored)

    async def find_by_id(self, project_id: str) -> Optional[Project]:
        document = await self.documents.get(project_id)
        if document is None:
            return None
        return Project.model_validate(document)

    async def update(
        self,
        project_id: str,
        fields: Dict[str, Any],
        append_logs: Optional[list[str]] = None,
        expected_version: Optional[int] = None,
    ) -> Project:
        payload = dict(fields)
        payload["updated_at"] = datetime.utcnow()
        stored = await self.documents.update(
            project_id,
            fields=to_jsonable_python(payload),
            append={"build_info.logs": append_logs} if append_logs else None,
            expected_version=expected_version,
        )
        return Project.model_validate(stored)

    async def append_logs(self, project_id: str, *lines: str) -> Project:
        return await self.update(project_id, {}, append_logs=list(lines))

    async def delete(self, project_id: str) -> bool:
        return await self.documents.delete(project_id)
