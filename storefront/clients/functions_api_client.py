# storefront/clients/functions_api_client.py
"""
HTTP client for the entity gateway.

Every request goes through `_request`, which turns the response envelope
(or the lack of one) into an ApiResult:

  - 2xx with success=true           -> Ok(data)
  - 404 / 409 / 400 with envelope   -> Err(NOT_FOUND / VERSION_CONFLICT / VALIDATION)
  - network error, timeout, non-JSON body, anything else -> Err(TRANSPORT)
"""
from typing import Any
from urllib.parse import quote

import httpx

from storefront.clients.base import EntityKind, FunctionsApi, parse_entity
from storefront.core.errors import ErrorKind
from storefront.core.result import ApiResult, Err, Ok
from storefront.schemas.order import OrderStatus
from storefront.schemas.upload import FileUploadRequest

KIND_BY_STATUS: dict[int, ErrorKind] = {
    400: ErrorKind.VALIDATION,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.VERSION_CONFLICT,
    412: ErrorKind.VERSION_CONFLICT,
    422: ErrorKind.VALIDATION,
}


class FunctionsApiClient(FunctionsApi):
    """
    Calls the gateway at `base_url` (e.g. "http://localhost:8000/api/").

    An existing httpx.Client may be passed instead (tests pass a
    TestClient bound to the gateway app); it is then used as-is.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ):
        if client is None:
            if not base_url:
                raise ValueError("base_url is required when no client is given")
            client = httpx.Client(base_url=base_url, timeout=timeout)
        self.http = client

    def close(self) -> None:
        self.http.close()

    # ----- transport -----

    def _request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: dict[str, str] | None = None,
    ) -> ApiResult[Any]:
        try:
            response = self.http.request(method, path, json=json, params=params)
        except httpx.HTTPError as exc:
            return Err(ErrorKind.TRANSPORT, f"{method} {path}: {exc.__class__.__name__}: {exc}")

        try:
            body = response.json()
        except ValueError:
            return Err(
                ErrorKind.TRANSPORT,
                f"{method} {path}: non-JSON response (HTTP {response.status_code})",
            )

        if not isinstance(body, dict) or "success" not in body:
            return Err(ErrorKind.TRANSPORT, f"{method} {path}: response is not an envelope")

        if response.is_success and body.get("success"):
            return Ok(body.get("data"))

        kind = KIND_BY_STATUS.get(response.status_code, ErrorKind.TRANSPORT)
        message = body.get("message") or f"HTTP {response.status_code}"
        return Err(kind, message)

    def _entity_call(
        self,
        kind: EntityKind,
        method: str,
        path: str,
        json: Any = None,
        params: dict[str, str] | None = None,
    ) -> ApiResult[Any]:
        result = self._request(method, path, json=json, params=params)
        if isinstance(result, Err):
            return result
        return parse_entity(kind, result.data)

    # ----- primitives -----

    def _list(self, kind: EntityKind, params: dict[str, str] | None = None) -> ApiResult[list]:
        result = self._entity_call(kind, "GET", kind.value, params=params)
        if isinstance(result, Ok) and result.data is None:
            return Ok([])
        return result

    def _get(self, kind: EntityKind, row_key: str) -> ApiResult[Any]:
        return self._entity_call(kind, "GET", f"{kind.value}/{row_key}")

    def _get_customer_by_username(self, username: str) -> ApiResult[Any]:
        path = f"customers/by-username/{quote(username, safe='')}"
        return self._entity_call(EntityKind.CUSTOMERS, "GET", path)

    def _create(self, kind: EntityKind, entity: Any) -> ApiResult[Any]:
        body = entity.model_dump(mode="json", by_alias=True, exclude_none=True)
        return self._entity_call(kind, "POST", kind.value, json=body)

    def _update(self, kind: EntityKind, row_key: str, changes: Any) -> ApiResult[Any]:
        body = changes.model_dump(mode="json", by_alias=True, exclude_unset=True)
        return self._entity_call(kind, "PUT", f"{kind.value}/{row_key}", json=body)

    def _set_order_status(self, order_id: str, status: OrderStatus) -> ApiResult[Any]:
        return self._entity_call(
            EntityKind.ORDERS,
            "PATCH",
            f"orders/{order_id}/status",
            json={"status": status.value},
        )

    def _delete(self, kind: EntityKind, row_key: str) -> ApiResult[None]:
        return self._request("DELETE", f"{kind.value}/{row_key}")

    def _upload(self, request: FileUploadRequest) -> ApiResult[str]:
        result = self._request("POST", "upload", json=request.model_dump(by_alias=True))
        if isinstance(result, Ok) and not isinstance(result.data, str):
            return Err(ErrorKind.TRANSPORT, "upload response carried no URL")
        return result
