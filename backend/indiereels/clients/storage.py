"""Hosted storage client — IObjectStorage implementation.

Handles: video upload into a bucket and public URL resolution.
"""

import httpx
import logging
from typing import Optional

from indiereels.clients.base import IObjectStorage, StoredObject
from indiereels.errors import StoreError

logger = logging.getLogger(__name__)


class HostedStorageClient(IObjectStorage):
    """Hosted backend object storage (``/storage/v1``)."""

    def __init__(
        self,
        url: str,
        api_key: str,
        bucket: str = "reel-videos",
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.bucket = bucket
        self.timeout = timeout
        self._transport = transport

    def _headers(self, access_token: Optional[str] = None) -> dict:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {access_token or self.api_key}",
        }

    async def upload(
        self,
        path: str,
        content: bytes,
        content_type: str,
        access_token: Optional[str] = None,
    ) -> StoredObject:
        """Upload without upsert; an existing object at *path* is a failure."""
        headers = {
            **self._headers(access_token),
            "Content-Type": content_type,
            "cache-control": "3600",
            "x-upsert": "false",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(
                    f"{self.url}/storage/v1/object/{self.bucket}/{path}",
                    content=content,
                    headers=headers,
                )
                resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.exception("Upload of %s/%s failed", self.bucket, path)
            raise StoreError("Video upload failed") from e

        logger.info("Uploaded %s/%s (%d bytes)", self.bucket, path, len(content))
        return StoredObject(bucket=self.bucket, path=path, public_url=self.public_url(path))

    def public_url(self, path: str) -> str:
        return f"{self.url}/storage/v1/object/public/{self.bucket}/{path}"
