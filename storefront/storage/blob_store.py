# storefront/storage/blob_store.py
"""
Blob storage for uploaded files (product images, proofs of payment).

Two backends:
  - SupabaseBlobStore: Supabase Storage bucket, object path
    "<container>/<blob_name>", returns the public URL.
  - LocalBlobStore: files under DATA_DIR/blobs/<container>/<blob_name>,
    served by the app at /blobs/...
"""
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from urllib.parse import quote

from storefront.core.config import get_settings
from storefront.storage.supabase_client import supabase_admin, supabase_configured

logger = logging.getLogger(__name__)

BLOBS_URL_PATH = "/blobs"


class BlobStore(ABC):
    @abstractmethod
    def upload(
        self,
        container: str,
        blob_name: str,
        data: bytes,
        content_type: str,
    ) -> str:
        """Store the bytes and return a URL the file can be retrieved from."""


class LocalBlobStore(BlobStore):
    def __init__(self, root_dir: str | Path, public_base_url: str):
        self.root_dir = Path(root_dir)
        self.public_base_url = public_base_url.rstrip("/")

    def upload(
        self,
        container: str,
        blob_name: str,
        data: bytes,
        content_type: str,
    ) -> str:
        target_dir = self.root_dir / container
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / blob_name
        target.write_bytes(data)
        logger.info("Stored blob %s/%s (%d bytes)", container, blob_name, len(data))
        return f"{self.public_base_url}{BLOBS_URL_PATH}/{container}/{quote(blob_name)}"


class SupabaseBlobStore(BlobStore):
    def __init__(self, client, bucket: str):
        self.client = client
        self.bucket = bucket

    def upload(
        self,
        container: str,
        blob_name: str,
        data: bytes,
        content_type: str,
    ) -> str:
        path = f"{container}/{blob_name}"
        bucket = self.client.storage.from_(self.bucket)
        bucket.upload(path, data, {"content-type": content_type, "upsert": "true"})
        return bucket.get_public_url(path)


def blobs_root(data_dir: str | Path) -> Path:
    return Path(data_dir) / "blobs"


def get_blob_store() -> BlobStore:
    """
    Pick the configured blob backend.

    Supabase is used only when both SUPABASE_URL and
    SUPABASE_SERVICE_ROLE_KEY are set.
    """
    settings = get_settings()
    if supabase_configured():
        return SupabaseBlobStore(supabase_admin(), settings.STORAGE_BUCKET)
    return LocalBlobStore(blobs_root(settings.DATA_DIR), settings.PUBLIC_BASE_URL)
