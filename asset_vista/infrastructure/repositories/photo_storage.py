"""Inventory photos in the Supabase storage bucket."""

import uuid
from typing import Optional

import structlog
from supabase import AsyncClient

from asset_vista.core.exceptions import BackendException, PhotoUploadException
from asset_vista.domain.models.inventory_item import Viewpoint
from asset_vista.infrastructure.supabase.errors import backend_call

logger = structlog.get_logger(__name__)


class SupabasePhotoStorage:
    def __init__(self, client: AsyncClient, bucket: str):
        self.client = client
        self.bucket = bucket

    async def upload(
        self,
        viewpoint: Viewpoint,
        extension: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        name = f"{uuid.uuid4()}.{extension}" if extension else str(uuid.uuid4())
        path = f"{viewpoint.value}/{name}"
        bucket = self.client.storage.from_(self.bucket)

        try:
            with backend_call("storage.upload", bucket=self.bucket, path=path):
                await bucket.upload(path, content, {"content-type": content_type or "application/octet-stream"})
        except BackendException as e:
            raise PhotoUploadException(f"File upload failed: {e.message}", details={"path": path}) from e

        logger.info("Photo uploaded", path=path, size=len(content))
        url = await bucket.get_public_url(path)
        # some SDK releases append an empty query string
        return url.rstrip("?")
