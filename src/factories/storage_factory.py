"""
Factory for creating storage instances.
"""

from pathlib import Path

from src.storage.document_store import DocumentStore, InMemoryDocumentStore, JsonFileDocumentStore
from src.storage.s3_storage import ArtifactPublisher, PublisherConfig
from src.utils.env_config import AppSettings


def create_document_store(settings: AppSettings, collection: str) -> DocumentStore:
    """JSON files under DATA_DIR/<collection> when DATA_DIR is set, otherwise in-memory."""
    if settings.data_dir and settings.data_dir.strip():
        return JsonFileDocumentStore(Path(settings.data_dir) / collection)
    return InMemoryDocumentStore()


def create_artifact_publisher(settings: AppSettings) -> ArtifactPublisher | None:
    """Create the artifact publisher based on configuration."""
    config_dict = settings.get_storage_config()

    # Check if all required fields are present and not empty/whitespace
    access_key = config_dict["access_key_id"]
    secret_key = config_dict["secret_access_key"]
    bucket_name = config_dict["bucket_name"]

    if access_key and access_key.strip() and secret_key and secret_key.strip() and bucket_name and bucket_name.strip():
        config = PublisherConfig(**config_dict)
        return ArtifactPublisher(config)
    return None
