"""
Key-value persistence shared by the event log and the strategy usage log.

Public API
----------
KeyValueStore(db).read(key, for_update=False)  -> list[dict]
KeyValueStore(db).write(key, records)          -> None
exclusive(key, timeout)                        -> context manager

Access pattern is read-all → mutate in memory → write-all. That sequence
is only safe inside `exclusive(key)`, which serializes writers of the same
key within this process; `for_update=True` adds a row lock so writers in
other worker processes queue behind it on Postgres.
"""
from __future__ import annotations

import json
import logging
import threading
import weakref
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import StoreReadError, StoreWriteError
from app.models.kv_record import KeyValueRecord

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Per-key write locks
# ---------------------------------------------------------------------------

# An entry lives only while some caller holds or waits on its lock.
_locks: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()
_locks_guard = threading.Lock()


def _lock_for(key: str) -> threading.Lock:
    with _locks_guard:
        lock = _locks.get(key)
        if lock is None:
            lock = _locks[key] = threading.Lock()
        return lock


@contextmanager
def exclusive(key: str, timeout: float) -> Iterator[None]:
    """Hold the writer lock for `key`; StoreWriteError if it can't be had in time."""
    lock = _lock_for(key)
    if not lock.acquire(timeout=timeout):
        logger.warning("Timed out after %.1fs waiting for write lock on %s", timeout, key)
        raise StoreWriteError(key, reason="timed out waiting for write lock")
    try:
        yield
    finally:
        lock.release()


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class KeyValueStore:
    """Read-all / write-all access to JSON lists kept in `kv_records`."""

    def __init__(self, db: Session):
        self.db = db

    def read(self, key: str, for_update: bool = False) -> list[dict]:
        try:
            q = self.db.query(KeyValueRecord).filter(KeyValueRecord.key == key)
            if for_update:
                q = q.with_for_update()
            row = q.first()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreReadError(key, reason=str(exc)) from exc

        if row is None or not row.value:
            return []
        try:
            records = json.loads(row.value)
        except ValueError as exc:
            raise StoreReadError(key, reason="stored value is not valid JSON") from exc
        if not isinstance(records, list):
            raise StoreReadError(key, reason="stored value is not a list")
        return records

    def write(self, key: str, records: list[dict]) -> None:
        payload = json.dumps(records, default=str)
        try:
            row = self.db.get(KeyValueRecord, key)
            if row is None:
                self.db.add(KeyValueRecord(key=key, value=payload))
            else:
                row.value = payload
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise StoreWriteError(key, reason=str(exc)) from exc
