"""Document Store — owns the JSON backing file and the lock marker next to it.

Invariants:
    - The file holds one JSON object: table name -> list of row objects
    - commit() replaces the whole file; readers see the old or the new content, never a mix
    - A fresh store holds only the reserved metadata table with a creation timestamp
    - initialize() never replaces an existing file
    - The lock marker holds the integer Unix second it was taken at
    - A marker older than stale_after seconds is reclaimed by the next acquirer (logged)
    - acquire_lock() has no upper bound on waiting other than marker staleness
    - Every OSError becomes StorageIOError, every malformed payload FormatError

Design Decisions:
    - Marker check-and-create runs under an OS-level filelock.FileLock guard, held only
      for that step: two contenders can no longer both observe "unlocked"
    - Marker file kept on top of the guard so a crashed holder is reclaimed by age
    - Commits write a uniquely named temp file and os.replace it over the store
    - The lazy create publishes with os.link, so it can never clobber a store that
      another writer created after our exists() check
    - clock and sleep injectable so lock ageing is testable without real waits
"""

import json
import logging
import os
import time
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator
from uuid import uuid4

from filelock import FileLock

from jsdb.config import Settings
from jsdb.core.domain_types import Database, RESERVED_TABLE
from jsdb.core.errors import FormatError, StorageIOError

logger = logging.getLogger(__name__)


class DocumentStore:
    """Load / lock / commit / unlock primitives over a single JSON file."""

    def __init__(
        self,
        database_file: Path | str,
        lock_file: Path | str,
        stale_after: float = 10,
        poll_interval: float = 1,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.database_file = Path(database_file)
        self.lock_file = Path(lock_file)
        self.stale_after = stale_after
        self.poll_interval = poll_interval
        self._clock = clock
        self._sleep = sleep
        self._guard = FileLock(f"{self.lock_file}.guard")

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "DocumentStore":
        return cls(
            settings.database_file,
            settings.lock_file,
            stale_after=settings.lock_stale_seconds,
            poll_interval=settings.lock_poll_seconds,
            **kwargs,
        )

    # ─── Database file ──────────────────────────────────────────

    def exists(self) -> bool:
        return self.database_file.is_file()

    def initialize(self) -> bool:
        """Create the backing file with only the metadata table.

        The file is published with a hard link, which fails when the target
        already exists: a store created meanwhile by another writer is never
        replaced. Returns False in that case.
        """
        created = datetime.fromtimestamp(self._clock()).strftime("%Y-%m-%d %H:%M:%S")
        self._ensure_directory(self.database_file.parent)
        tmp = self._write_temp(self._serialize({RESERVED_TABLE: [{"created": created}]}))
        try:
            os.link(tmp, self.database_file)
        except FileExistsError:
            logger.debug(
                "Database already created by another writer",
                extra={"path": str(self.database_file)},
            )
            return False
        except OSError as e:
            raise self._not_writable(e) from e
        finally:
            tmp.unlink(missing_ok=True)
        logger.info("Database initialized", extra={"path": str(self.database_file)})
        return True

    def ensure_initialized(self) -> None:
        if not self.exists():
            self.initialize()

    def load(self) -> Database:
        """Read and decode the whole file."""
        try:
            raw = self.database_file.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageIOError(
                f"Database file is not readable: {e}", str(self.database_file),
            ) from e
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise FormatError(
                f"Database file is not valid JSON: {e.msg}", str(self.database_file),
            ) from e
        self._check_layout(data)
        return data

    def open(self) -> Database:
        """Load, creating the file first if it does not exist yet."""
        self.ensure_initialized()
        return self.load()

    def commit(self, db: Database) -> None:
        """Serialize db and atomically replace the backing file."""
        tmp = self._write_temp(self._serialize(db))
        try:
            os.replace(tmp, self.database_file)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise self._not_writable(e) from e

    def _serialize(self, db: Database) -> str:
        try:
            return json.dumps(db, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise FormatError(
                f"Database content is not JSON serializable: {e}", str(self.database_file),
            ) from e

    def _write_temp(self, payload: str) -> Path:
        """Write payload to a uniquely named sibling of the backing file."""
        tmp = self.database_file.with_name(f"{self.database_file.name}.{uuid4().hex}.tmp")
        try:
            with open(tmp, "x", encoding="utf-8") as handle:
                handle.write(payload)
        except FileExistsError as e:
            raise self._not_writable(e) from e
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise self._not_writable(e) from e
        return tmp

    def _not_writable(self, e: OSError) -> StorageIOError:
        return StorageIOError(
            f"Database file is not writable, make sure the data directory is writable: {e}",
            str(self.database_file),
        )

    def _check_layout(self, data: object) -> None:
        path = str(self.database_file)
        if not isinstance(data, dict):
            raise FormatError("Database root must be an object of tables", path)
        for table, rows in data.items():
            if not isinstance(rows, list):
                raise FormatError(f"Table {table} must be a list of rows", path)
            if any(not isinstance(row, dict) for row in rows):
                raise FormatError(f"Table {table} contains a row that is not an object", path)

    # ─── Locking ────────────────────────────────────────────────

    def acquire_lock(self) -> None:
        """Block until the marker is ours; reclaim it when it is stale."""
        self._ensure_directory(self.lock_file.parent)
        while True:
            with self._guard:
                stamp = self._read_lock_stamp()
                now = self._clock()
                if stamp is None:
                    self._write_lock_stamp(now)
                    return
                age = now - stamp
                if age > self.stale_after:
                    logger.info(
                        "Database lock is stale, reclaiming it",
                        extra={"lock_age": round(age, 3), "path": str(self.lock_file)},
                    )
                    self._remove_marker()
                    self._write_lock_stamp(now)
                    return
            self._sleep(self.poll_interval)

    def release_lock(self) -> None:
        """Remove the marker if present."""
        with self._guard:
            self._remove_marker()

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the lock for a load -> mutate -> commit cycle."""
        self.acquire_lock()
        try:
            yield
        finally:
            self.release_lock()

    def is_locked(self) -> bool:
        return self.lock_file.exists()

    def _read_lock_stamp(self) -> float | None:
        try:
            content = self.lock_file.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageIOError(f"Error reading the lock: {e}", str(self.lock_file)) from e
        try:
            return float(content)
        except ValueError:
            logger.warning(
                "Lock marker is unreadable, treating it as stale",
                extra={"path": str(self.lock_file)},
            )
            return float("-inf")

    def _write_lock_stamp(self, now: float) -> None:
        try:
            self.lock_file.write_text(str(int(now)), encoding="utf-8")
        except OSError as e:
            raise StorageIOError(f"Error locking the Database: {e}", str(self.lock_file)) from e

    def _remove_marker(self) -> None:
        try:
            self.lock_file.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageIOError(
                f"Error unlocking the Database: {e}", str(self.lock_file),
            ) from e

    @staticmethod
    def _ensure_directory(directory: Path) -> None:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(f"Data directory cannot be created: {e}", str(directory)) from e
