# storefront/schemas/envelope.py
from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """
    Gateway response envelope: {success, data, message}.
    data is null on failures and on deletes.
    """

    success: bool
    data: T | None = None
    message: str = ""


def ok(data=None, message: str = "") -> dict:
    return {"success": True, "data": data, "message": message}


def fail(message: str) -> dict:
    return {"success": False, "data": None, "message": message}
