"""
Key-value document storage for project and build job records.

Documents are plain JSON-compatible dicts keyed by id. Updates are partial:
dotted keys address nested fields ("build_info.build_url"), and list fields
can be appended to without rewriting them. Every write bumps the document's
"version" so callers can ask for optimistic concurrency checks.
"""

import asyncio
import copy
import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import aiofiles
import structlog

logger = structlog.get_logger(__name__)


class StorageError(Exception):
    """Base exception for document storage operations."""

    def __init__(self, message: str, error_code: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


class DocumentNotFound(StorageError):
    """No document stored under the given id."""

    def __init__(self, doc_id: str):
        super().__init__(f"Document not found: {doc_id}", details={"doc_id": doc_id})
        self.doc_id = doc_id


class DocumentExists(StorageError):
    """A document with the given id is already stored."""


class ConcurrentModification(StorageError):
    """The document changed since the caller read it."""

    def __init__(self, doc_id: str, expected: int, actual: int):
        super().__init__(
            f"Document {doc_id} is at version {actual}, expected {expected}",
            details={"doc_id": doc_id, "expected": expected, "actual": actual},
        )


def apply_update(
    document: Dict[str, Any],
    fields: Optional[Dict[str, Any]] = None,
    append: Optional[Dict[str, Iterable[Any]]] = None,
) -> Dict[str, Any]:
    """Return a copy of document with dotted-key fields set and list fields extended."""
    updated = copy.deepcopy(document)

    for key, value in (fields or {}).items():
        parent, leaf = _walk(updated, key)
        parent[leaf] = copy.deepcopy(value)

    for key, items in (append or {}).items():
        parent, leaf = _walk(updated, key)
        current = parent.get(leaf)
        if current is None:
            current = []
        elif not isinstance(current, list):
            raise StorageError(f"Cannot append to non-list field '{key}'", error_code="NOT_A_LIST")
        parent[leaf] = current + copy.deepcopy(list(items))

    updated["version"] = int(document.get("version", 0)) + 1
    return updated


def _walk(document: Dict[str, Any], dotted_key: str) -> tuple[Dict[str, Any], str]:
    parts = dotted_key.split(".")
    node = document
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    return node, parts[-1]


class DocumentStore(ABC):
    """Abstract document store."""

    @abstractmethod
    async def insert(self, doc_id: str, document: Dict[str, Any]) -> Dict[str, Any]:
        """Store a new document; fails if the id is taken."""

    @abstractmethod
    async def get(self, doc_id: str) -> Optional[Dict[str, Any]]:
        """Fetch a document, or None."""

    @abstractmethod
    async def update(
        self,
        doc_id: str,
        fields: Optional[Dict[str, Any]] = None,
        append: Optional[Dict[str, Iterable[Any]]] = None,
        expected_version: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Apply a partial update and return the stored result."""

    @abstractmethod
    async def delete(self, doc_id: str) -> bool:
        """Remove a document; returns False if it did not exist."""

    @abstractmethod
    async def list_ids(self) -> List[str]:
        """All stored ids."""


class InMemoryDocumentStore(DocumentStore):
    """Process-local store; writes are serialized by a single lock."""

    def __init__(self) -> None:
        self._documents: Dict[str, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    async def insert(self, doc_id: str, document: Dict[str, Any]) -> Dict[str, Any]:
        async with self._lock:
            if doc_id in self._documents:
                raise DocumentExists(f"Document already exists: {doc_id}", details={"doc_id": doc_id})
            stored = copy.deepcopy(document)
            stored.setdefault("version", 0)
            self._documents[doc_id] = stored
            return copy.deepcopy(stored)

    async def get(self, doc_id: str) -> Optional[Dict[str, Any]]:
        document = self._documents.get(doc_id)
        return copy.deepcopy(document) if document is not None else None

    async def update(
        self,
        doc_id: str,
        fields: Optional[Dict[str, Any]] = None,
        append: Optional[Dict[str, Iterable[Any]]] = None,
        expected_version: Optional[int] = None,
    ) -> Dict[str, Any]:
        async with self._lock:
            current = self._documents.get(doc_id)
            if current is None:
                raise DocumentNotFound(doc_id)
            if expected_version is not None and current.get("version", 0) != expected_version:
                raise ConcurrentModification(doc_id, expected_version, current.get("version", 0))
            updated = apply_update(current, fields, append)
            self._documents[doc_id] = updated
            return copy.deepcopy(updated)

    async def delete(self, doc_id: str) -> bool:
        async with self._lock:
            return self._documents.pop(doc_id, None) is not None

    async def list_ids(self) -> List[str]:
        return list(self._documents.keys())


class JsonFileDocumentStore(DocumentStore):
    """One JSON file per document under a directory."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self._lock = asyncio.Lock()

    def _path(self, doc_id: str) -> Path:
        if not doc_id or "/" in doc_id or "\\" in doc_id or doc_id.startswith("."):
            raise StorageError(f"Invalid document id: {doc_id!r}", error_code="INVALID_ID")
        return self.root / f"{doc_id}.json"

    async def _read(self, path: Path) -> Optional[Dict[str, Any]]:
        if not path.exists():
            return None
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            return json.loads(await f.read())

    async def _write(self, path: Path, document: Dict[str, Any]) -> None:
        tmp_path = path.with_suffix(".json.tmp")
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(document, indent=2, default=str))
        os.replace(tmp_path, path)

    async def insert(self, doc_id: str, document: Dict[str, Any]) -> Dict[str, Any]:
        path = self._path(doc_id)
        async with self._lock:
            if path.exists():
                raise DocumentExists(f"Document already exists: {doc_id}", details={"doc_id": doc_id})
            stored = copy.deepcopy(document)
            stored.setdefault("version", 0)
            await self._write(path, stored)
            return stored

    async def get(self, doc_id: str) -> Optional[Dict[str, Any]]:
        return await self._read(self._path(doc_id))

    async def update(
        self,
        doc_id: str,
        fields: Optional[Dict[str, Any]] = None,
        append: Optional[Dict[str, Iterable[Any]]] = None,
        expected_version: Optional[int] = None,
    ) -> Dict[str, Any]:
        path = self._path(doc_id)
        async with self._lock:
            current = await self._read(path)
            if current is None:
                raise DocumentNotFound(doc_id)
            if expected_version is not None and current.get("version", 0) != expected_version:
                raise ConcurrentModification(doc_id, expected_version, current.get("version", 0))
            updated = apply_update(current, fields, append)
            await self._write(path, updated)
            return updated

    async def delete(self, doc_id: str) -> bool:
        path = self._path(doc_id)
        async with self._lock:
            if not path.exists():
                return False
            path.unlink()
            logger.debug("Deleted document", doc_id=doc_id)
            return True

    async def list_ids(self) -> List[str]:
        return sorted(p.stem for p in self.root.glob("*.json"))
