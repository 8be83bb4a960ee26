"""
NoteBridge Backend - Object Storage Service
=============================================

What:  Writes uploaded attachment bytes to object storage and returns the
       public URL of the stored object.
How:   Two drivers behind one interface, chosen by Settings.storage_driver:
       - S3ObjectStorage:    boto3 put_object with a public-read ACL on any
                             S3-compatible endpoint
       - LocalObjectStorage: aiofiles write under STORAGE_ROOT, served back
                             by GET /storage/{path}
Who:   Called by AttachmentService during the upload pipeline.

URL contract:
    key  = "notes/<filename>"
    url  = "<STORAGE_URL>/notes/<filename>"
    The URL is built from configuration, not returned by the store, so it is
    the same whichever driver wrote the bytes.

There is no delete operation: a failed upload pipeline leaves the
object where it is.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import aiofiles
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool

from notebridge.config import Settings, settings as default_settings
from notebridge.exceptions import ObjectStorageError

logger = logging.getLogger(__name__)


class ObjectStorage(ABC):
    """Interface for attachment object stores."""

    def __init__(self, public_base_url: str):
        self.public_base_url = public_base_url.rstrip("/")

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key.lstrip('/')}"

    @abstractmethod
    async def put(self, key: str, content: bytes, content_type: str) -> str:
        """
        Store `content` under `key`, publicly readable.

        Returns:
            The public URL of the object.

        Raises:
            ObjectStorageError: the store rejected or failed the write.
        """


class S3ObjectStorage(ObjectStorage):
    """
    S3-compatible object storage via boto3.

    boto3 is synchronous, so the put runs in Starlette's threadpool to keep
    the event loop free while the bytes travel.

    Args:
        bucket:          Target bucket name
        public_base_url: Base URL the object key is appended to
        client:          Optional pre-built boto3 S3 client (tests pass a mock)
        region, endpoint_url, access_key_id, secret_access_key:
                         Passed to boto3.client("s3", ...) when `client` is None
    """

    def __init__(
        self,
        bucket: str,
        public_base_url: str,
        client=None,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
    ):
        super().__init__(public_base_url)
        self.bucket = bucket
        self.client = client or boto3.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
        )

    async def put(self, key: str, content: bytes, content_type: str) -> str:
        try:
            await run_in_threadpool(
                self.client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type,
                ACL="public-read",
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 put failed for s3://%s/%s: %s", self.bucket, key, e)
            raise ObjectStorageError(
                message="Failed to store the uploaded file.",
                context={"bucket": self.bucket, "key": key, "error": str(e)},
            ) from e

        logger.info("Stored s3://%s/%s (%d bytes)", self.bucket, key, len(content))
        return self.public_url(key)


class LocalObjectStorage(ObjectStorage):
    """
    Filesystem object storage for development.

    Objects live at <storage_root>/<key>; GET /storage/{key} serves them.
    """

    def __init__(self, storage_root: str, public_base_url: str):
        super().__init__(public_base_url)
        self.storage_root = Path(storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("LocalObjectStorage initialized with storage_root=%s", self.storage_root)

    def resolve(self, key: str) -> Path:
        """
        Map an object key to a path inside storage_root.

        Raises:
            ObjectStorageError: the key escapes storage_root (e.g. "../x")
        """
        path = (self.storage_root / key).resolve()
        if not path.is_relative_to(self.storage_root):
            raise ObjectStorageError(
                message="Invalid storage key",
                context={"key": key},
            )
        return path

    async def put(self, key: str, content: bytes, content_type: str) -> str:
        path = self.resolve(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", path, e)
            raise ObjectStorageError(
                message="Failed to store the uploaded file.",
                context={"path": str(path), "os_error": str(e)},
            ) from e

        logger.info("File stored: %s (%d bytes)", key, len(content))
        return self.public_url(key)


def build_object_storage(config: Optional[Settings] = None) -> ObjectStorage:
    """Create the storage driver named by Settings.storage_driver."""
    config = config or default_settings
    if config.storage_driver == "local":
        return LocalObjectStorage(config.storage_root, config.storage_url_base)
    return S3ObjectStorage(
        bucket=config.s3_bucket,
        public_base_url=config.storage_url_base,
        region=config.s3_region,
        endpoint_url=config.s3_endpoint_url,
        access_key_id=config.aws_access_key_id,
        secret_access_key=config.aws_secret_access_key,
    )
