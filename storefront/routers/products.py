# storefront/routers/products.py
from decimal import Decimal

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    UploadFile,
    status,
)

from storefront.clients.base import FileContent, FunctionsApi
from storefront.clients.deps import get_functions_api
from storefront.core.auth import require_admin
from storefront.schemas.product import Product, ProductUpdate
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])


def get_product_service(api: FunctionsApi = Depends(get_functions_api)) -> ProductService:
    return ProductService(api)


def _read_upload(file: UploadFile | None) -> FileContent | None:
    if file is None or not file.filename:
        return None
    return FileContent(
        file_name=file.filename,
        content_type=file.content_type or "application/octet-stream",
        data=file.file.read(),
    )


# -------- Public endpoints --------


@router.get("", response_model=list[Product])
def list_products(service: ProductService = Depends(get_product_service)):
    """
    List all products (public).
    """
    return service.list_products()


@router.get("/{product_id}", response_model=Product)
def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
    return service.get_product(product_id)


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=Product,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(
    product_name: str = Form(..., alias="productName", min_length=1),
    description: str = Form("", alias="description"),
    price: Decimal = Form(..., alias="price", ge=0),
    stock_available: int = Form(..., alias="stockAvailable", ge=0),
    image: UploadFile | None = File(None),
    service: ProductService = Depends(get_product_service),
):
    """
    Create a product (admin only), multipart form.

    - `image` is optional; JPEG, PNG, WEBP or GIF up to 5MB.
    """
    product = Product(
        product_name=product_name.strip(),
        description=description,
        price=price,
        stock_available=stock_available,
    )
    return service.create_product(product, _read_upload(image))


@router.put(
    "/{product_id}",
    response_model=Product,
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: str,
    product_name: str | None = Form(None, alias="productName"),
    description: str | None = Form(None, alias="description"),
    price: Decimal | None = Form(None, alias="price", ge=0),
    stock_available: int | None = Form(None, alias="stockAvailable", ge=0),
    etag: str | None = Form(None, alias="eTag"),
    image: UploadFile | None = File(None),
    service: ProductService = Depends(get_product_service),
):
    """
    Update a product (admin only), multipart form.

    - Only the fields sent are changed.
    - A new `image` replaces the product image URL.
    - `eTag` (optional) guards against overwriting someone else's edit.
    """
    fields = {
        "product_name": product_name,
        "description": description,
        "price": price,
        "stock_available": stock_available,
        "etag": etag,
    }
    changes = ProductUpdate(**{k: v for k, v in fields.items() if v is not None})
    return service.update_product(product_id, changes, _read_upload(image))


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_product(product_id: str, service: ProductService = Depends(get_product_service)):
    """
    Delete a product (admin only).
    """
    service.delete_product(product_id)
    return None
