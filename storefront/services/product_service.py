# storefront/services/product_service.py
import logging

from fastapi import HTTPException, status

from storefront.clients.base import FileContent, FunctionsApi
from storefront.schemas.product import PRODUCT_PARTITION, Product, ProductUpdate

logger = logging.getLogger(__name__)


# --- Image config ---

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB per image

ALLOWED_IMAGE_CONTENT_TYPES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}


class ProductService:
    """
    Catalog operations for the storefront.

    Responsibilities:
      - public browsing (list / details)
      - admin create / update / delete, with an optional product image
      - image type and size validation before anything is uploaded
    """

    def __init__(self, api: FunctionsApi):
        self.api = api

    # ----- Helpers -----

    @staticmethod
    def validate_image(image: FileContent) -> None:
        if image.content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Unsupported image type. Allowed: JPEG, PNG, WEBP, GIF.",
            )
        if not image.data:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Uploaded image is empty",
            )
        if len(image.data) > MAX_IMAGE_BYTES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Image too large (max 5MB)",
            )

    # ----- Public -----

    def list_products(self) -> list[Product]:
        return self.api.list_products()

    def get_product(self, product_id: str) -> Product:
        product = self.api.get_product(product_id)
        if product is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    # ----- Admin -----

    def create_product(self, product: Product, image: FileContent | None = None) -> Product:
        if image is not None:
            self.validate_image(image)

        product = product.model_copy(
            update={"partition_key": PRODUCT_PARTITION, "row_key": None, "etag": None}
        )
        created = self.api.create_product(product, image)
        if created is None:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Could not create the product. Please try again.",
            )
        logger.info("Product %s created (%s)", created.row_key, created.product_name)
        return created

    def update_product(
        self,
        product_id: str,
        changes: ProductUpdate,
        image: FileContent | None = None,
    ) -> Product:
        current = self.get_product(product_id)
        if image is not None:
            self.validate_image(image)

        if changes.etag is None:
            changes = changes.model_copy(update={"etag": current.etag})

        if not self.api.update_product(product_id, changes, image):
            latest = self.api.get_product(product_id)
            if latest is not None and latest.etag != changes.etag:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="The product was changed by someone else. Reload and try again.",
                )
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Could not update the product. Please try again.",
            )
        return self.get_product(product_id)

    def delete_product(self, product_id: str) -> None:
        self.get_product(product_id)
        if not self.api.delete_product(product_id):
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Could not delete the product. Please try again.",
            )
        logger.info("Product %s deleted", product_id)
