# storefront/models/table_entity.py
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class TableEntity(SQLModel, table=True):
    """
    One row of the key-value table store.

    Identity:
      - (table_name, partition_key, row_key) is the primary key.

    Concurrency:
      - etag changes on every write; conditional updates compare it.

    Payload:
      - properties holds the entity fields as a JSON object (camelCase keys,
        same shape the gateway sends on the wire).
    """

    __tablename__ = "table_entities"

    table_name: str = Field(
        primary_key=True,
        max_length=63,
        description="Logical table, e.g. Customers / Products / Orders",
    )

    partition_key: str = Field(
        primary_key=True,
        max_length=255,
    )

    row_key: str = Field(
        primary_key=True,
        max_length=255,
    )

    etag: str = Field(
        max_length=64,
        description="Opaque concurrency token, regenerated on each write",
    )

    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last write time (UTC)",
    )

    properties: dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
    )
