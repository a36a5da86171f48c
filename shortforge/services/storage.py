"""
Storage Service
Stores generated scene media - supports Google Cloud Storage and the local filesystem.
"""

import asyncio
import logging
from pathlib import Path

from shortforge.core.config import settings

logger = logging.getLogger(__name__)


class StorageService:
    """Service for media storage operations."""

    def __init__(self, base_path: str = None):
        self.use_gcs = settings.USE_GCS

        if self.use_gcs:
            from google.cloud import storage
            self.gcs_client = storage.Client(project=settings.GCP_PROJECT_ID)
            self.bucket_outputs = self.gcs_client.bucket(settings.GCS_BUCKET_OUTPUTS)
            logger.info(f"[Storage] Using Google Cloud Storage: {settings.GCS_BUCKET_OUTPUTS}")
        else:
            self.base_path = Path(base_path or settings.LOCAL_STORAGE_PATH)
            self.base_path.mkdir(parents=True, exist_ok=True)
            logger.info(f"[Storage] Using local storage: {self.base_path}")

    async def upload_bytes(self, data: bytes, path: str, content_type: str = "image/png") -> str:
        """Upload bytes and return the API URL that serves them."""
        if self.use_gcs:
            blob = self.bucket_outputs.blob(path)
            # GCS client is blocking
            await asyncio.to_thread(blob.upload_from_string, data, content_type=content_type)
        else:
            file_path = self._local_path(path)
            file_path.parent.mkdir(parents=True, exist_ok=True)
            file_path.write_bytes(data)

        return self.get_public_url(path)

    async def get_file(self, path: str) -> bytes:
        """Get file contents."""
        if self.use_gcs:
            from google.api_core.exceptions import NotFound
            blob = self.bucket_outputs.blob(path)
            try:
                return await asyncio.to_thread(blob.download_as_bytes)
            except NotFound:
                raise FileNotFoundError(path)

        return self._local_path(path).read_bytes()

    def get_public_url(self, path: str) -> str:
        """API proxy URL, consistent across storage backends."""
        return f"/files/{path}"

    def _local_path(self, path: str) -> Path:
        file_path = (self.base_path / path).resolve()
        # Keep served paths inside the storage root
        if self.base_path.resolve() not in file_path.parents:
            raise FileNotFoundError(path)
        return file_path
