# storefront/gateway/app.py
"""
Entity gateway sub-application (mounted at GATEWAY_PREFIX, "/api").

Every response, including errors, is an {success, data, message} envelope:
  - NotFoundError        -> 404
  - VersionConflictError -> 409 (stale eTag, duplicate key)
  - ValidationFailure    -> 400 (also malformed request bodies)
  - anything else        -> 500 with a generic message; detail is logged only
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.core.errors import ErrorKind, StoreError
from storefront.gateway.routers.customers import router as customers_router
from storefront.gateway.routers.orders import router as orders_router
from storefront.gateway.routers.products import router as products_router
from storefront.gateway.routers.uploads import router as uploads_router
from storefront.schemas.envelope import fail, ok

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.VERSION_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.TRANSPORT: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


async def store_error_handler(request: Request, exc: StoreError):
    code = STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if code >= 500:
        logger.error("Gateway %s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=code, content=fail("An internal error occurred"))
    return JSONResponse(status_code=code, content=fail(exc.message))


async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ())[1:]) or 'body'}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=fail(f"Invalid request: {problems}"),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content=fail(str(exc.detail)))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled gateway error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=fail("An internal error occurred"),
    )


def create_gateway_app() -> FastAPI:
    gateway = FastAPI(title="Storefront Entity Gateway", version="0.1.0")

    gateway.add_exception_handler(StoreError, store_error_handler)
    gateway.add_exception_handler(RequestValidationError, validation_error_handler)
    gateway.add_exception_handler(StarletteHTTPException, http_error_handler)
    gateway.add_exception_handler(Exception, unhandled_error_handler)

    gateway.include_router(customers_router)
    gateway.include_router(products_router)
    gateway.include_router(orders_router)
    gateway.include_router(uploads_router)

    @gateway.get("/health", tags=["Gateway: Health"])
    def health():
        return ok(message="ok")

    return gateway
