# storefront/storage/json_store.py
"""
Local fallback store: one JSON array file per entity table.

File layout (under DATA_DIR):
    customers.json, products.json, orders.json

Each element is the flattened entity:
    {"partitionKey": ..., "rowKey": ..., "eTag": ..., "timestamp": ..., <properties>}

The file is loaded once per process into an in-memory mirror. Every
mirror has its own lock, and every write rewrites the file atomically
(temp file + os.replace) while holding it. A file that cannot be parsed
is moved aside to `<name>.corrupt-<timestamp>` and the table starts empty.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from datetime import datetime
from pathlib import Path

from storefront.core.errors import (
    DuplicateEntityError,
    NotFoundError,
    VersionConflictError,
)
from storefront.storage.table_store import (
    ANY_ETAG,
    EntityRecord,
    TableStore,
    ensure_keys,
    new_etag,
    utcnow,
)

logger = logging.getLogger(__name__)

KEY_FIELDS = ("partitionKey", "rowKey", "eTag", "timestamp")


class _Mirror:
    def __init__(self, path: Path):
        self.path = path
        self.lock = threading.RLock()
        self.records: list[EntityRecord] | None = None


_mirrors: dict[Path, _Mirror] = {}
_mirrors_lock = threading.Lock()


def _mirror_for(path: Path) -> _Mirror:
    with _mirrors_lock:
        mirror = _mirrors.get(path)
        if mirror is None:
            mirror = _Mirror(path)
            _mirrors[path] = mirror
        return mirror


def reset_mirrors() -> None:
    """Drop every cached mirror (the files are re-read on next access)."""
    with _mirrors_lock:
        _mirrors.clear()


def _decode(item: dict) -> EntityRecord:
    props = {k: v for k, v in item.items() if k not in KEY_FIELDS}
    raw_ts = item.get("timestamp")
    return EntityRecord(
        partition_key=item.get("partitionKey") or "",
        row_key=item.get("rowKey") or "",
        etag=item.get("eTag") or "",
        timestamp=datetime.fromisoformat(raw_ts) if raw_ts else None,
        properties=props,
    )


def _encode(record: EntityRecord) -> dict:
    return {
        "partitionKey": record.partition_key,
        "rowKey": record.row_key,
        "eTag": record.etag,
        "timestamp": record.timestamp.isoformat() if record.timestamp else None,
        **record.properties,
    }


class JsonFileTableStore(TableStore):
    """
    Table store persisted to `<data_dir>/<table_name>.json`.
    """

    def __init__(self, data_dir: str | Path, table_name: str):
        super().__init__(table_name)
        self.path = (Path(data_dir) / f"{table_name.lower()}.json").resolve()
        self._mirror = _mirror_for(self.path)

    # ----- file I/O (caller holds the lock) -----

    def _records(self) -> list[EntityRecord]:
        mirror = self._mirror
        if mirror.records is None:
            mirror.records = self._load() if self.path.exists() else []
        return mirror.records

    def _load(self) -> list[EntityRecord]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8") or "[]")
            if not isinstance(raw, list):
                raise ValueError("expected a JSON array")
            records = [_decode(item) for item in raw]
        except (ValueError, TypeError, AttributeError):
            # unreadable file: keep it for inspection and start empty
            aside = self.path.with_name(f"{self.path.name}.corrupt-{utcnow():%Y%m%d%H%M%S}")
            logger.exception("Could not load %s; moved it to %s", self.path, aside)
            os.replace(self.path, aside)
            return []
        logger.info("Loaded %d records from %s", len(records), self.path)
        return records

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [_encode(r) for r in self._records()]
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, indent=2, default=str)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def _index(self, partition_key: str, row_key: str) -> int | None:
        for i, rec in enumerate(self._records()):
            if rec.partition_key == partition_key and rec.row_key == row_key:
                return i
        return None

    # ----- contract -----

    def put(self, record: EntityRecord) -> EntityRecord:
        ensure_keys(record)
        with self._mirror.lock:
            if self._index(record.partition_key, record.row_key) is not None:
                raise DuplicateEntityError(
                    f"Entity {record.partition_key}/{record.row_key} already exists"
                )
            stored = record.model_copy(
                update={"etag": new_etag(), "timestamp": utcnow()}, deep=True
            )
            self._records().append(stored)
            self._save()
            return stored.model_copy(deep=True)

    def get(self, partition_key: str, row_key: str) -> EntityRecord | None:
        with self._mirror.lock:
            idx = self._index(partition_key, row_key)
            if idx is None:
                return None
            return self._records()[idx].model_copy(deep=True)

    def list(self, partition_key: str | None = None) -> list[EntityRecord]:
        with self._mirror.lock:
            return [
                rec.model_copy(deep=True)
                for rec in self._records()
                if partition_key is None or rec.partition_key == partition_key
            ]

    def update(self, record: EntityRecord, expected_etag: str) -> EntityRecord:
        ensure_keys(record)
        with self._mirror.lock:
            idx = self._index(record.partition_key, record.row_key)
            if idx is None:
                raise NotFoundError(
                    f"Entity {record.partition_key}/{record.row_key} not found"
                )
            current = self._records()[idx]
            if expected_etag != ANY_ETAG and current.etag != expected_etag:
                raise VersionConflictError(
                    f"Entity {record.partition_key}/{record.row_key} was modified "
                    "by another operation"
                )
            stored = record.model_copy(
                update={"etag": new_etag(), "timestamp": utcnow()}, deep=True
            )
            self._records()[idx] = stored
            self._save()
            return stored.model_copy(deep=True)

    def delete(self, partition_key: str, row_key: str) -> bool:
        with self._mirror.lock:
            idx = self._index(partition_key, row_key)
            if idx is None:
                return False
            del self._records()[idx]
            self._save()
            return True
