"""
S3-compatible publishing of finished WebGL builds.

Works with any service that implements the S3 API (AWS S3, MinIO,
CloudFlare R2, DigitalOcean Spaces and others). Publishing is optional: the
orchestrator only calls it when storage credentials are configured, and a
failed upload is logged against the job without failing the build.
"""

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import boto3
import structlog
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError
from pydantic import BaseModel, Field

from .file_utils import FileUtils, get_file_utils

logger = structlog.get_logger(__name__)


class PublisherConfig(BaseModel):
    """Configuration for an S3-compatible artifact bucket."""

    bucket_name: str
    region: str | None = None
    endpoint_url: str | None = None  # Required for non-AWS S3 services
    access_key_id: str | None = None
    secret_access_key: str | None = None
    public_url: str | None = None  # CDN or website root serving the bucket
    key_prefix: str = "builds"
    max_concurrency: int = Field(default=10, ge=1, le=50)
    use_ssl: bool = True


class PublishError(Exception):
    """Raised when artifacts cannot be uploaded."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "PUBLISH_FAILED"
        self.status_code = status_code
        self.details = details or {}


class ArtifactPublisher:
    """Uploads a build's webgl/ tree and reports where it can be fetched."""

    def __init__(self, config: PublisherConfig, file_utils: Optional[FileUtils] = None):
        self.config = config
        self.file_utils = file_utils or get_file_utils()
        self._s3_client = None

    async def connect(self) -> None:
        """Create the S3 client and check the bucket is reachable."""
        try:
            session = boto3.Session(
                aws_access_key_id=self.config.access_key_id,
                aws_secret_access_key=self.config.secret_access_key,
                region_name=self.config.region,
            )
            boto_config = Config(
                max_pool_connections=self.config.max_concurrency,
                retries={'max_attempts': 3, 'mode': 'adaptive'},
            )
            client_kwargs: Dict[str, Any] = {
                'config': boto_config,
                'region_name': self.config.region,
                'use_ssl': self.config.use_ssl,
            }
            if self.config.endpoint_url:
                client_kwargs['endpoint_url'] = self.config.endpoint_url

            self._s3_client = session.client('s3', **client_kwargs)
            await asyncio.to_thread(self._s3_client.head_bucket, Bucket=self.config.bucket_name)
            logger.info("Connected to artifact bucket", bucket=self.config.bucket_name)

        except NoCredentialsError as e:
            self._s3_client = None
            raise PublishError("Storage credentials not found", error_code="NO_CREDENTIALS", details={"error": str(e)})
        except ClientError as e:
            self._s3_client = None
            self._raise_client_error(e, f"connect to bucket '{self.config.bucket_name}'")
        except BotoCoreError as e:
            self._s3_client = None
            raise PublishError(f"Failed to connect to artifact bucket: {e}", error_code="NETWORK_ERROR")

    async def disconnect(self) -> None:
        if self._s3_client is not None:
            await asyncio.to_thread(self._s3_client.close)
            self._s3_client = None
            logger.info("Disconnected from artifact bucket")

    @property
    def is_connected(self) -> bool:
        return self._s3_client is not None

    def object_key(self, build_id: str, relative_path: str = "") -> str:
        parts = [self.config.key_prefix.strip('/'), build_id, relative_path.lstrip('/')]
        return '/'.join(part for part in parts if part)

    def public_url_for(self, key: str) -> str:
        """Public URL of an object key."""
        if self.config.public_url:
            return f"{self.config.public_url.rstrip('/')}/{key}"
        if self.config.endpoint_url:
            return f"{self.config.endpoint_url.rstrip('/')}/{self.config.bucket_name}/{key}"
        if self.config.region:
            return f"https://{self.config.bucket_name}.s3.{self.config.region}.amazonaws.com/{key}"
        return f"https://{self.config.bucket_name}.s3.amazonaws.com/{key}"

    async def publish_build(self, build_id: str, webgl_dir: Union[str, Path]) -> str:
        """
        Upload every file under a build's webgl directory.

        Args:
            build_id: Build job id, used as the key namespace
            webgl_dir: Local directory holding index.html and Build/

        Returns:
            Public URL of the uploaded webgl root

        Raises:
            PublishError: If the directory is missing or any upload fails
        """
        source = Path(webgl_dir)
        if not source.is_dir():
            raise PublishError(f"Build output not found: {source}", error_code="MISSING_OUTPUT")

        if not self.is_connected:
            await self.connect()

        uploaded: List[str] = []
        for file_path, relative in self.file_utils.iter_files(source):
            key = self.object_key(build_id, f"webgl/{relative}")
            await self._upload_file(file_path, key)
            uploaded.append(key)

        logger.info("Published build artifacts", build_id=build_id, files=len(uploaded))
        return self.public_url_for(self.object_key(build_id, "webgl"))

    async def _upload_file(self, file_path: Path, key: str) -> None:
        extra_args = {'ContentType': self.file_utils.get_content_type(file_path)}
        try:
            await asyncio.to_thread(
                self._s3_client.upload_file,
                str(file_path),
                self.config.bucket_name,
                key,
                ExtraArgs=extra_args,
            )
        except ClientError as e:
            self._raise_client_error(e, f"upload {key}")
        except BotoCoreError as e:
            raise PublishError(f"Failed to upload {key}: {e}", error_code="NETWORK_ERROR")

    def _raise_client_error(self, error: ClientError, operation: str) -> None:
        """Convert an S3 client error into a PublishError."""
        error_code = error.response.get('Error', {}).get('Code', 'UNKNOWN')
        status_code = error.response.get('ResponseMetadata', {}).get('HTTPStatusCode')
        message = error.response.get('Error', {}).get('Message', str(error))

        if error_code in ['NoSuchBucket', '404']:
            text = f"Bucket '{self.config.bucket_name}' does not exist during {operation}"
        elif error_code in ['AccessDenied', 'Forbidden', '403']:
            text = f"Access denied during {operation}"
        elif error_code in ['RequestTimeout', 'ServiceUnavailable']:
            text = f"Network error during {operation}: {message}"
        else:
            text = f"S3 error during {operation}: {message}"
        raise PublishError(text, error_code=error_code, status_code=status_code)
