# storefront/clients/deps.py
from functools import lru_cache

from storefront.clients.base import FunctionsApi
from storefront.clients.functions_api_client import FunctionsApiClient
from storefront.clients.local_functions_api import LocalFunctionsApi
from storefront.core.config import get_settings
from storefront.database import engine
from storefront.storage.blob_store import get_blob_store


@lru_cache
def build_functions_api() -> FunctionsApi:
    """
    Build the storefront's API client once per process.

    API_BACKEND:
      - "remote": FunctionsApiClient against GATEWAY_BASE_URL
      - "local":  LocalFunctionsApi over the configured table store
    """
    settings = get_settings()
    if settings.API_BACKEND == "remote":
        return FunctionsApiClient(
            base_url=settings.GATEWAY_BASE_URL,
            timeout=settings.GATEWAY_TIMEOUT_SECONDS,
        )
    if settings.TABLE_STORE_BACKEND == "sql":
        return LocalFunctionsApi(get_blob_store(), engine=engine)
    return LocalFunctionsApi(
        get_blob_store(),
        data_dir=settings.DATA_DIR,
        seed_sample_products=settings.SEED_SAMPLE_PRODUCTS,
    )


def get_functions_api() -> FunctionsApi:
    """FastAPI dependency; override it in tests."""
    return build_functions_api()
