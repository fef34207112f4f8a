"""
Serialization guard for admissions.

Admissions for one (tenant, professional, date) run one at a time. Inside a
single process that is a keyed ``threading.Lock``; on PostgreSQL the guard
also takes a transaction-scoped advisory lock, which serializes admissions
across every instance sharing the database and is released by the commit or
rollback that ends the transaction.
"""

import logging
import threading
import zlib
from contextlib import contextmanager
from datetime import date
from typing import Dict, Tuple

from sqlalchemy import text
from sqlalchemy.orm import Session

from app.core.errors import PersistenceUnavailable

logger = logging.getLogger(__name__)

LockKey = Tuple[int, int, date]


class _KeyedLock:
    """A lock plus the number of callers holding or waiting for it."""

    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class AdmissionLocks:
    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout
        self._locks: Dict[LockKey, _KeyedLock] = {}
        self._registry_lock = threading.Lock()

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._locks)

    def _checkout(self, key: LockKey) -> _KeyedLock:
        with self._registry_lock:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _KeyedLock()
            entry.users += 1
            return entry

    def _checkin(self, key: LockKey, entry: _KeyedLock) -> None:
        # The entry is dropped once nobody holds or waits for it.
        with self._registry_lock:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[key]

    @staticmethod
    def advisory_key(key: LockKey) -> Tuple[int, int]:
        """Two signed 32-bit ints for ``pg_advisory_xact_lock(int, int)``."""
        tenant_id, professional_id, day = key
        digest = zlib.crc32(f"{professional_id}:{day.isoformat()}".encode())
        if digest >= 2 ** 31:
            digest -= 2 ** 32
        return tenant_id, digest

    @contextmanager
    def hold(self, db: Session, tenant_id: int, professional_id: int, day: date):
        key = (tenant_id, professional_id, day)
        entry = self._checkout(key)
        try:
            if not entry.lock.acquire(timeout=self.timeout):
                logger.warning("Timed out waiting for admission lock %s", key)
                raise PersistenceUnavailable("Booking is busy for this day, please retry")
            try:
                if db.get_bind().dialect.name == "postgresql":
                    k1, k2 = self.advisory_key(key)
                    db.execute(text("SELECT pg_advisory_xact_lock(:k1, :k2)"), {"k1": k1, "k2": k2})
                yield
            finally:
                entry.lock.release()
        finally:
            self._checkin(key, entry)
