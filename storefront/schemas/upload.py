# storefront/schemas/upload.py
from pydantic import Field

from storefront.schemas.entity import CamelModel

PRODUCT_IMAGES_CONTAINER = "product-images"
PAYMENT_PROOFS_CONTAINER = "payment-proofs"


class FileUploadRequest(CamelModel):
    """
    Body of POST /api/upload. fileData is the file content, base64 encoded.
    """

    file_name: str = Field(min_length=1)
    container_name: str = Field(min_length=1)
    content_type: str = "application/octet-stream"
    file_data: str
