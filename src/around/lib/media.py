"""Media store adapter.

Uploads post attachments to an Azure Blob Storage container and returns the
blob's public URL. The container must allow anonymous blob reads; setting
that up is part of provisioning, not of this service.
"""

import asyncio
import logging
from typing import BinaryIO, Protocol

from azure.storage.blob import BlobServiceClient, ContentSettings
from fastapi.concurrency import run_in_threadpool

from .errors import MediaUploadError

logger = logging.getLogger(__name__)


class MediaStore(Protocol):
    async def put(self, key: str, stream: BinaryIO, content_type: str | None = None) -> str:
        """Store *stream* under *key* and return its public URL."""
        ...


class AzureBlobMediaStore:
    def __init__(
        self,
        service: BlobServiceClient | None,
        container: str,
        timeout: float | None = None,
    ):
        self.service = service
        self.container = container.strip("/")
        self.timeout = timeout

    @classmethod
    def from_connection_string(cls, conn: str | None, container: str, timeout: float | None = None):
        # Without a connection string every upload fails; the app still starts.
        service = BlobServiceClient.from_connection_string(conn) if conn else None
        return cls(service, container, timeout=timeout)

    def _upload(self, key: str, stream: BinaryIO, content_type: str | None) -> str:
        blob = self.service.get_blob_client(container=self.container, blob=key)
        blob.upload_blob(
            stream,
            overwrite=False,
            content_settings=ContentSettings(content_type=content_type),
        )
        return blob.url

    async def put(self, key: str, stream: BinaryIO, content_type: str | None = None) -> str:
        if self.service is None:
            raise MediaUploadError("Media storage is not configured")

        try:
            # The blob SDK client is synchronous.
            url = await asyncio.wait_for(
                run_in_threadpool(self._upload, key, stream, content_type),
                timeout=self.timeout,
            )
        except Exception as exc:
            logger.exception(
                "Media upload failed",
                extra={"container": self.container, "key": key},
            )
            raise MediaUploadError(f"Failed to upload media for {key}") from exc

        logger.info("Media for %s saved to %s", key, url)
        return url
