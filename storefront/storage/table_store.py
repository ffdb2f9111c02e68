# storefront/storage/table_store.py
"""
Key-value table store.

Records are addressed by a (partition, row) key pair inside a logical
table. Two backends implement the same contract:

  - SqlTableStore       rows in the `table_entities` SQL table
  - JsonFileTableStore  one JSON file per table (local fallback store)

Contract:
  put(record)                      insert; duplicate key -> DuplicateEntityError
  get(partition, row)              record or None
  list(partition=None)             records; no partition = full scan
  update(record, expected_etag)    conditional replace; stale etag ->
                                   VersionConflictError, missing -> NotFoundError
  delete(partition, row)           True if removed, False if it was missing
"""
from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field
from sqlalchemy import update
from sqlmodel import Session, select

from storefront.core.errors import (
    DuplicateEntityError,
    NotFoundError,
    ValidationFailure,
    VersionConflictError,
)
from storefront.models.table_entity import TableEntity

# Matches any current etag (unconditional update).
ANY_ETAG = "*"


class EntityRecord(BaseModel):
    """
    Backend-neutral view of a stored entity.
    """

    partition_key: str
    row_key: str
    etag: str = ""
    timestamp: datetime | None = None
    properties: dict[str, Any] = Field(default_factory=dict)


def new_etag() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_keys(record: EntityRecord) -> None:
    if not record.partition_key or not record.row_key:
        raise ValidationFailure("PartitionKey and RowKey are required")


class TableStore(ABC):
    """Abstract table scoped to a single logical table name."""

    def __init__(self, table_name: str):
        self.table_name = table_name

    @abstractmethod
    def put(self, record: EntityRecord) -> EntityRecord: ...

    @abstractmethod
    def get(self, partition_key: str, row_key: str) -> EntityRecord | None: ...

    @abstractmethod
    def list(self, partition_key: str | None = None) -> list[EntityRecord]: ...

    @abstractmethod
    def update(self, record: EntityRecord, expected_etag: str) -> EntityRecord: ...

    @abstractmethod
    def delete(self, partition_key: str, row_key: str) -> bool: ...


class SqlTableStore(TableStore):
    """
    Table store backed by the `table_entities` SQL table.

    The session is owned by the caller (FastAPI dependency); every write
    commits immediately.
    """

    def __init__(self, session: Session, table_name: str):
        super().__init__(table_name)
        self.session = session

    # ----- helpers -----

    def _identity(self, partition_key: str, row_key: str) -> dict[str, str]:
        return {
            "table_name": self.table_name,
            "partition_key": partition_key,
            "row_key": row_key,
        }

    @staticmethod
    def _to_record(row: TableEntity) -> EntityRecord:
        return EntityRecord(
            partition_key=row.partition_key,
            row_key=row.row_key,
            etag=row.etag,
            timestamp=row.timestamp,
            properties=dict(row.properties or {}),
        )

    # ----- contract -----

    def put(self, record: EntityRecord) -> EntityRecord:
        ensure_keys(record)
        key = self._identity(record.partition_key, record.row_key)
        if self.session.get(TableEntity, key) is not None:
            raise DuplicateEntityError(
                f"Entity {record.partition_key}/{record.row_key} already exists"
            )

        row = TableEntity(
            **key,
            etag=new_etag(),
            timestamp=utcnow(),
            properties=dict(record.properties),
        )
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return self._to_record(row)

    def get(self, partition_key: str, row_key: str) -> EntityRecord | None:
        row = self.session.get(TableEntity, self._identity(partition_key, row_key))
        return self._to_record(row) if row else None

    def list(self, partition_key: str | None = None) -> list[EntityRecord]:
        stmt = select(TableEntity).where(TableEntity.table_name == self.table_name)
        if partition_key is not None:
            stmt = stmt.where(TableEntity.partition_key == partition_key)
        stmt = stmt.order_by(TableEntity.partition_key, TableEntity.row_key)
        return [self._to_record(row) for row in self.session.exec(stmt).all()]

    def update(self, record: EntityRecord, expected_etag: str) -> EntityRecord:
        ensure_keys(record)
        stmt = (
            update(TableEntity)
            .where(
                TableEntity.table_name == self.table_name,
                TableEntity.partition_key == record.partition_key,
                TableEntity.row_key == record.row_key,
            )
            .values(
                etag=new_etag(),
                timestamp=utcnow(),
                properties=dict(record.properties),
            )
        )
        if expected_etag != ANY_ETAG:
            # update ... where etag = :expected -> 0 rows when someone else won
            stmt = stmt.where(TableEntity.etag == expected_etag)

        rowcount = self.session.execute(stmt).rowcount
        if rowcount == 0:
            self.session.rollback()
            if self.get(record.partition_key, record.row_key) is None:
                raise NotFoundError(
                    f"Entity {record.partition_key}/{record.row_key} not found"
                )
            raise VersionConflictError(
                f"Entity {record.partition_key}/{record.row_key} was modified "
                "by another operation"
            )

        self.session.commit()
        self.session.expire_all()
        return self.get(record.partition_key, record.row_key)

    def delete(self, partition_key: str, row_key: str) -> bool:
        row = self.session.get(TableEntity, self._identity(partition_key, row_key))
        if row is None:
            return False
        self.session.delete(row)
        self.session.commit()
        return True
