"""
Record Storage - Keyed Collections with Optional JSON Persistence

Each collection keeps its records in memory, keyed by identifier, and writes
the whole collection to a JSON file after every mutation when a persist path
is configured. Writes go to a staging file that is renamed over the live one,
so the file on disk is always a complete snapshot. A failed write is retried
once after a short backoff; if it still fails the in-memory state is rolled
back and InternalError is raised, so callers never observe a half-applied
transition. A file that cannot be parsed at startup is moved aside and kept.

Records are replaced, never mutated in place (dataclasses.replace), so the
rollback snapshot is a shallow copy of the index.
"""

from __future__ import annotations

import json
import logging
import os
import re
import threading
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Final, Generic, Iterator, Optional, TypeVar

from dreamkeys.errors import InternalError


logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRY_BACKOFF_SECONDS: Final[float] = 0.1


def utcnow() -> datetime:
    """Current UTC time, timezone-aware."""
    return datetime.now(timezone.utc)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO timestamp written by to_dict(), tolerating None."""
    if not value:
        return None
    return datetime.fromisoformat(value)


class RecordCollection(Generic[T]):
    """
    In-memory keyed collection of records, persisted as a single JSON file.

    Subclasses provide the record codec (to_record / from_record) and
    the key function.
    """

    collection_name: str = "records"

    def __init__(
        self,
        persist_path: Optional[str] = None,
        retry_backoff: float = DEFAULT_RETRY_BACKOFF_SECONDS,
    ):
        """
        Initialise collection.

        Args:
            persist_path: Optional path to persist data to JSON file
            retry_backoff: Seconds to wait before retrying a failed write
        """
        self._records: dict[str, T] = {}
        self._persist_path = Path(persist_path) if persist_path else None
        self._retry_backoff = retry_backoff
        self._lock = threading.RLock()

        if self._persist_path and self._persist_path.exists():
            self._load_from_file()

    # =========================================================================
    # Codec hooks
    # =========================================================================

    def key_of(self, record: T) -> str:
        raise NotImplementedError

    def to_record(self, record: T) -> dict:
        raise NotImplementedError

    def from_record(self, data: dict) -> T:
        raise NotImplementedError

    # =========================================================================
    # Persistence
    # =========================================================================

    def _write_file(self) -> None:
        """Write the whole collection to a staging file, then swap it in."""
        data = {
            self.collection_name: {
                key: self.to_record(record) for key, record in self._records.items()
            },
            "saved_at": utcnow().isoformat(),
        }
        self._persist_path.parent.mkdir(parents=True, exist_ok=True)
        staging = self._persist_path.with_name(
            f".{self._persist_path.name}.{uuid.uuid4().hex[:8]}.tmp"
        )
        try:
            staging.write_text(json.dumps(data, indent=2))
            os.replace(staging, self._persist_path)
        except OSError:
            staging.unlink(missing_ok=True)
            raise

    def _save_to_file(self) -> None:
        """Persist data to file, retrying once on a transient failure."""
        if not self._persist_path:
            return

        try:
            self._write_file()
        except OSError as e:
            logger.warning(
                "Write to %s failed (%s), retrying in %.2fs",
                self._persist_path,
                e,
                self._retry_backoff,
            )
            time.sleep(self._retry_backoff)
            self._write_file()

    def _load_from_file(self) -> None:
        """Load data from file. An unreadable file is moved aside, not reused."""
        try:
            data = json.loads(self._persist_path.read_text())
            records = {
                key: self.from_record(record_data)
                for key, record_data in data.get(self.collection_name, {}).items()
            }
        except (json.JSONDecodeError, AttributeError, KeyError, TypeError, ValueError) as e:
            quarantine = self._persist_path.with_name(
                f"{self._persist_path.name}.corrupt-{utcnow():%Y%m%dT%H%M%S%f}"
            )
            os.replace(self._persist_path, quarantine)
            logger.error(
                "Could not load %s from %s (%s), moved it to %s",
                self.collection_name,
                self._persist_path,
                e,
                quarantine,
            )
            return
        self._records = records

    def _commit(self, mutate: Callable[[dict[str, T]], Any]) -> Any:
        """
        Apply a mutation to the index and persist it atomically.

        On persistent write failure the index is restored and InternalError
        is raised.
        """
        with self._lock:
            snapshot = dict(self._records)
            result = mutate(self._records)
            try:
                self._save_to_file()
            except OSError as e:
                self._records = snapshot
                logger.error("Could not persist %s: %s", self.collection_name, e)
                raise InternalError(f"Could not persist {self.collection_name}") from e
            return result

    @property
    def lock(self) -> threading.RLock:
        """Lock guarding multi-step read-then-write sequences."""
        return self._lock

    # =========================================================================
    # CRUD Operations
    # =========================================================================

    def get(self, key: str) -> Optional[T]:
        """Get a record by key, or None if absent."""
        return self._records.get(key)

    def put(self, record: T) -> T:
        """Insert or replace a record."""
        key = self.key_of(record)

        def mutate(records: dict[str, T]) -> T:
            records[key] = record
            return record

        return self._commit(mutate)

    def remove(self, key: str) -> bool:
        """Remove a record. Returns False if it was not present."""

        def mutate(records: dict[str, T]) -> bool:
            return records.pop(key, None) is not None

        return self._commit(mutate)

    def remove_where(self, predicate: Callable[[T], bool]) -> int:
        """Remove every record matching predicate. Returns the count removed."""

        def mutate(records: dict[str, T]) -> int:
            doomed = [key for key, record in records.items() if predicate(record)]
            for key in doomed:
                del records[key]
            return len(doomed)

        return self._commit(mutate)

    # =========================================================================
    # Query Operations
    # =========================================================================

    def list_all(self) -> list[T]:
        """Get all records."""
        return list(self._records.values())

    def find(self, predicate: Callable[[T], bool]) -> list[T]:
        """Get records matching predicate."""
        return [record for record in self._records.values() if predicate(record)]

    def count(self) -> int:
        """Get total number of records."""
        return len(self._records)

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._records.values()))


# =============================================================================
# Identifiers
# =============================================================================


def generate_id(prefix: str) -> str:
    """Generate a record identifier such as PROP-1A2B3C4D5E6F."""
    return f"{prefix}-{uuid.uuid4().hex[:12].upper()}"


def is_valid_id(value: Optional[str], prefix: str) -> bool:
    """Check that value is a well-formed identifier with the given prefix."""
    if not value or not isinstance(value, str):
        return False
    return bool(re.fullmatch(rf"{re.escape(prefix)}-[0-9A-F]{{12}}", value))
