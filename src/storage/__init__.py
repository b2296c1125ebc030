"""
Persistence and filesystem helpers for the build pipeline.

Project and build job records live in a document store; build staging
happens on the local filesystem; finished builds can optionally be mirrored
to any S3-compatible bucket.
"""

from .build_job_store import BuildJobStore
from .document_store import (
    ConcurrentModification,
    DocumentExists,
    DocumentNotFound,
    DocumentStore,
    InMemoryDocumentStore,
    JsonFileDocumentStore,
    StorageError,
)
from .file_utils import FileUtils, get_file_utils
from .project_store import ProjectStore
from .s3_storage import ArtifactPublisher, PublishError, PublisherConfig


__all__ = [
    # Document storage
    "DocumentStore",
    "InMemoryDocumentStore",
    "JsonFileDocumentStore",
    # Typed stores
    "BuildJobStore",
    "ProjectStore",
    # Artifact publishing
    "ArtifactPublisher",
    "PublisherConfig",
    # Exceptions
    "StorageError",
    "DocumentNotFound",
    "DocumentExists",
    "ConcurrentModification",
    "PublishError",
    # Utilities
    "FileUtils",
    "get_file_utils",
]
