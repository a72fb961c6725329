"""Profile Store persistence interface and in-memory implementation.

The relational layer is plugged in by implementing ProfileRepository; the
in-memory repository is what the service runs with by default and what the
tests use.
"""
from __future__ import annotations
import datetime
import logging
import threading
from typing import Optional, Protocol

from .models import ProfileRecord

logger = logging.getLogger(__name__)


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0)


class ProfileRepository(Protocol):
    """Storage operations used by ProfileService."""

    def get(self, profile_id: int) -> Optional[ProfileRecord]: ...

    def find_by_email(self, email: str) -> Optional[ProfileRecord]: ...

    def exists_email(self, email: str) -> bool: ...

    def list(self) -> list[ProfileRecord]: ...

    def add(self, record: ProfileRecord) -> ProfileRecord: ...

    def save(self, record: ProfileRecord) -> ProfileRecord: ...

    def delete(self, profile_id: int) -> None: ...


class InMemoryProfileRepository:
    """Thread-safe dictionary-backed ProfileRepository.

    Records are copied on the way in and out so callers never mutate stored
    state without going through save().
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._records: dict[int, ProfileRecord] = {}
        self._next_id = 1

    def get(self, profile_id: int) -> Optional[ProfileRecord]:
        with self._lock:
            record = self._records.get(profile_id)
            return record.copy() if record else None

    def find_by_email(self, email: str) -> Optional[ProfileRecord]:
        """Case-insensitive lookup by email."""
        target = (email or "").strip().lower()
        with self._lock:
            for record in self._records.values():
                if record.email.lower() == target:
                    return record.copy()
        return None

    def exists_email(self, email: str) -> bool:
        return self.find_by_email(email) is not None

    def list(self) -> list[ProfileRecord]:
        with self._lock:
            return [self._records[key].copy() for key in sorted(self._records)]

    def add(self, record: ProfileRecord) -> ProfileRecord:
        with self._lock:
            stored = record.copy()
            stored.id = self._next_id
            self._next_id += 1
            stored.created_at = stored.updated_at = _now()
            self._records[stored.id] = stored
            logger.debug("Profile %s stored for %s", stored.id, stored.email)
            return stored.copy()

    def save(self, record: ProfileRecord) -> ProfileRecord:
        with self._lock:
            if record.id not in self._records:
                raise KeyError(record.id)
            stored = record.copy()
            stored.updated_at = _now()
            self._records[stored.id] = stored
            return stored.copy()

    def delete(self, profile_id: int) -> None:
        with self._lock:
            self._records.pop(profile_id, None)
