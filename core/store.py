"""
Snapshot stores.

A store persists the whole LedgerSnapshot as one value. save() is a
compare-and-set on the snapshot version: it succeeds only if the stored
version still equals the version the writer started from.

Stores raise:
- ConcurrentUpdateError when another writer got there first
- StoreError for I/O failures (disk, network, corrupt data)
"""

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Protocol

import redis
from pydantic import ValidationError

from clients.valkey_client import ValkeyClient
from core.errors import ConcurrentUpdateError, StoreError
from core.models import LedgerSnapshot

logger = logging.getLogger(__name__)


class SnapshotStore(Protocol):
    """Persistence port for ledger snapshots."""

    def load(self) -> LedgerSnapshot:
        """Return the stored snapshot, or an empty version-0 snapshot."""
        ...

    def save(self, snapshot: LedgerSnapshot, expected_version: int) -> None:
        """Store snapshot if the stored version equals expected_version."""
        ...

    def close(self) -> None:
        """Release connections. The store is not used afterwards."""
        ...


class MemorySnapshotStore:
    """Process-local store. Used in tests and single-process setups."""

    def __init__(self, initial: LedgerSnapshot | None = None):
        self._snapshot = initial or LedgerSnapshot()
        self._lock = threading.Lock()

    def load(self) -> LedgerSnapshot:
        return self._snapshot

    def save(self, snapshot: LedgerSnapshot, expected_version: int) -> None:
        with self._lock:
            if self._snapshot.version != expected_version:
                raise ConcurrentUpdateError(expected_version, self._snapshot.version)
            self._snapshot = snapshot

    def close(self) -> None:
        pass


class JsonFileSnapshotStore:
    """
    Snapshot persisted as a JSON document on local disk.

    Writes go to a temp file in the same directory and are moved into place
    with os.replace, so a crash never leaves a half-written snapshot.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read(self) -> LedgerSnapshot:
        if not self.path.exists():
            return LedgerSnapshot()
        try:
            return LedgerSnapshot.model_validate_json(self.path.read_text(encoding="utf-8"))
        except OSError as e:
            raise StoreError(f"Cannot read snapshot {self.path}: {e}") from e
        except ValidationError as e:
            raise StoreError(f"Corrupt snapshot {self.path}: {e}") from e

    def load(self) -> LedgerSnapshot:
        with self._lock:
            return self._read()

    def save(self, snapshot: LedgerSnapshot, expected_version: int) -> None:
        with self._lock:
            stored = self._read()
            if stored.version != expected_version:
                raise ConcurrentUpdateError(expected_version, stored.version)

            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as f:
                        f.write(snapshot.model_dump_json())
                    os.replace(tmp_path, self.path)
                except BaseException:
                    Path(tmp_path).unlink(missing_ok=True)
                    raise
            except OSError as e:
                raise StoreError(f"Cannot write snapshot {self.path}: {e}") from e

        logger.debug(f"Snapshot v{snapshot.version} written to {self.path}")

    def close(self) -> None:
        pass


class ValkeySnapshotStore:
    """
    Snapshot persisted under one key in Valkey, shared between processes.

    The version check and the write happen in one WATCH/MULTI transaction.
    """

    def __init__(self, valkey: ValkeyClient, key: str = "ledger:snapshot"):
        self.valkey = valkey
        self.key = key

    @staticmethod
    def _version_of(raw: str | None) -> int:
        if raw is None:
            return 0
        try:
            return int(json.loads(raw)["version"])
        except (ValueError, KeyError, TypeError) as e:
            raise StoreError(f"Corrupt snapshot payload: {e}") from e

    def load(self) -> LedgerSnapshot:
        try:
            raw = self.valkey.get(self.key)
        except redis.RedisError as e:
            raise StoreError(f"Cannot read snapshot '{self.key}': {e}") from e

        if raw is None:
            return LedgerSnapshot()
        try:
            return LedgerSnapshot.model_validate_json(raw)
        except ValidationError as e:
            raise StoreError(f"Corrupt snapshot '{self.key}': {e}") from e

    def save(self, snapshot: LedgerSnapshot, expected_version: int) -> None:
        try:
            written = self.valkey.set_if(
                self.key,
                snapshot.model_dump_json(),
                lambda raw: self._version_of(raw) == expected_version,
            )
            if not written:
                actual = self._version_of(self.valkey.get(self.key))
                raise ConcurrentUpdateError(expected_version, actual)
        except redis.RedisError as e:
            raise StoreError(f"Cannot write snapshot '{self.key}': {e}") from e

    def close(self) -> None:
        self.valkey.close()
