# storefront/gateway/routers/products.py
from fastapi import APIRouter, Depends, status

from storefront.gateway.deps import get_product_store
from storefront.gateway.services import ProductGatewayService
from storefront.schemas.envelope import ApiResponse
from storefront.schemas.product import Product, ProductUpdate
from storefront.storage.table_store import TableStore

router = APIRouter(prefix="/products", tags=["Gateway: Products"])

service = ProductGatewayService()


@router.get("", response_model=ApiResponse[list[Product]])
def list_products(store: TableStore = Depends(get_product_store)):
    products = service.list(store)
    return ApiResponse(success=True, data=products, message=f"Retrieved {len(products)} products")


@router.post(
    "",
    response_model=ApiResponse[Product],
    status_code=status.HTTP_201_CREATED,
)
def create_product(payload: Product, store: TableStore = Depends(get_product_store)):
    return ApiResponse(success=True, data=service.create(store, payload), message="Product created")


@router.get("/{product_id}", response_model=ApiResponse[Product])
def get_product(product_id: str, store: TableStore = Depends(get_product_store)):
    return ApiResponse(success=True, data=service.get(store, product_id))


@router.put("/{product_id}", response_model=ApiResponse[Product])
def update_product(
    product_id: str,
    payload: ProductUpdate,
    store: TableStore = Depends(get_product_store),
):
    return ApiResponse(
        success=True,
        data=service.update(store, product_id, payload),
        message="Product updated",
    )


@router.delete("/{product_id}", response_model=ApiResponse[None])
def delete_product(product_id: str, store: TableStore = Depends(get_product_store)):
    service.delete(store, product_id)
    return ApiResponse(success=True, message="Product deleted")
