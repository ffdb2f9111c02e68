# storefront/main.py
from contextlib import asynccontextmanager
import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from storefront.core.config import get_settings
from storefront.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from storefront.models import table_entity as _table_entity_models  # noqa: F401
from storefront.models import user as _user_models  # noqa: F401

from storefront.gateway.app import create_gateway_app
from storefront.storage.blob_store import BLOBS_URL_PATH, blobs_root

# Routers
from storefront.routers.auth import router as auth_router
from storefront.routers.home import router as home_router
from storefront.routers.products import router as products_router
from storefront.routers.customers import router as customers_router
from storefront.routers.cart import router as cart_router
from storefront.routers.orders import router as orders_router

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Create SQL tables (users, table_entities) if missing.
    """
    logger.info("Startup: preparing database (%s)...", settings.DATABASE_URL.split("@")[-1])
    try:
        create_db_and_tables()
        logger.info("Startup: tables verified. Table store: %s, API backend: %s",
                    settings.TABLE_STORE_BACKEND, settings.API_BACKEND)
    except Exception as e:
        logger.error(f"Startup: database initialisation FAILED: {e}")
        raise
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


# --- Middleware ---

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Signed cookie session; holds the shopping cart. Idle carts expire.
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET,
    max_age=settings.SESSION_IDLE_MINUTES * 60,
    same_site="lax",
)


# --- Entity gateway + local blobs ---

app.mount(settings.GATEWAY_PREFIX, create_gateway_app())

_blobs_dir: Path = blobs_root(settings.DATA_DIR)
_blobs_dir.mkdir(parents=True, exist_ok=True)
app.mount(BLOBS_URL_PATH, StaticFiles(directory=_blobs_dir), name="blobs")


# --- Storefront ---

app.include_router(home_router, prefix=settings.STORE_PREFIX)
app.include_router(auth_router, prefix=settings.STORE_PREFIX)
app.include_router(products_router, prefix=settings.STORE_PREFIX)
app.include_router(customers_router, prefix=settings.STORE_PREFIX)
app.include_router(cart_router, prefix=settings.STORE_PREFIX)
app.include_router(orders_router, prefix=settings.STORE_PREFIX)
