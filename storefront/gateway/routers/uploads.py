# storefront/gateway/routers/uploads.py
from fastapi import APIRouter, Depends

from storefront.gateway.deps import get_blobs
from storefront.gateway.services import UploadService
from storefront.schemas.envelope import ApiResponse
from storefront.schemas.upload import FileUploadRequest
from storefront.storage.blob_store import BlobStore

router = APIRouter(tags=["Gateway: Uploads"])


@router.post("/upload", response_model=ApiResponse[str])
def upload_file(payload: FileUploadRequest, blobs: BlobStore = Depends(get_blobs)):
    """
    Store a base64-encoded file in a blob container.

    Returns the blob URL in `data`.
    """
    url = UploadService(blobs).upload(payload)
    return ApiResponse(success=True, data=url, message="File uploaded")
