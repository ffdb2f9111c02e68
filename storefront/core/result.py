# storefront/core/result.py
"""
Tagged result type returned by the low-level API client calls.

    Ok(data)            -> the call succeeded
    Err(kind, message)  -> the call failed; kind is an ErrorKind

The public client methods collapse these into the degraded values the
storefront expects (empty list / None / False).
"""
from dataclasses import dataclass
from typing import ClassVar, Generic, TypeVar, Union

from storefront.core.errors import ErrorKind

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    data: T
    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str
    ok: ClassVar[bool] = False


ApiResult = Union[Ok[T], Err]


def unwrap_list(result: "ApiResult[list[T]]") -> list[T]:
    if isinstance(result, Ok) and result.data is not None:
        return result.data
    return []


def unwrap_one(result: "ApiResult[T | None]") -> T | None:
    if isinstance(result, Ok):
        return result.data
    return None


def succeeded(result: ApiResult) -> bool:
    return result.ok
