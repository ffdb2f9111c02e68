# storefront/schemas/entity.py
from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# Decimal in Python, JSON number on the wire.
Money = Annotated[
    Decimal,
    PlainSerializer(lambda v: float(v), return_type=float, when_used="json"),
]

# Fields owned by the table store, never copied into the stored properties.
KEY_FIELDS = frozenset({"partition_key", "row_key", "etag", "timestamp"})


class CamelModel(BaseModel):
    """
    Base for every JSON payload: camelCase on the wire, snake_case in Python.
    Both spellings are accepted on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TableEntityModel(CamelModel):
    """
    Shared identity/concurrency fields of a stored entity.

    - partitionKey / rowKey: composite key; optional on create, the gateway
      fills in defaults.
    - eTag: concurrency token issued by the store; send it back on update.
    """

    partition_key: str | None = None
    row_key: str | None = None
    etag: str | None = Field(default=None, alias="eTag")
    timestamp: datetime | None = None
