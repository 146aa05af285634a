"""
Read-only access to the local package index snapshot (SQLite).
"""
from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from pkgsearch.domain.errors import OpenError, QueryError

logger = logging.getLogger(__name__)


class IndexHandle:
    """
    Owns the single read-only connection to the snapshot.

    Every statement goes through one gate, so at most one query touches the
    connection at a time. Waiting for the gate (and for SQLite's own locks) is
    bounded by ``lock_timeout``.
    """

    def __init__(self, conn: sqlite3.Connection, path: Path, lock_timeout: float):
        self.conn = conn
        self.path = path
        self.lock_timeout = lock_timeout
        self._gate = threading.Lock()

    @classmethod
    def open(cls, path: Path, lock_timeout: float = 5.0) -> "IndexHandle":
        """
        Open ``path`` read-only and check that it holds a packages table.

        Raises:
            OpenError: the file is missing, corrupt, or not a package index.
        """
        try:
            exists = path.is_file()
            uri = f"{path.resolve().as_uri()}?mode=ro"
        except OSError as e:
            logger.error(f"Cannot access index snapshot {path}: {e}", exc_info=True)
            raise OpenError("index snapshot is not accessible") from e

        if not exists:
            logger.error(f"Index snapshot not found: {path}")
            raise OpenError("index snapshot not found")

        logger.debug(f"Opening index snapshot: {uri}")

        conn: Optional[sqlite3.Connection] = None
        try:
            conn = sqlite3.connect(
                uri,
                uri=True,
                timeout=lock_timeout,
                check_same_thread=False,
            )
            # Deprecated by SQLite but still honoured; makes the LIKE tiers
            # case-sensitive like the exact tier. Literal matching does not need it.
            conn.execute("PRAGMA case_sensitive_like = ON")
            conn.execute("SELECT name, version FROM packages LIMIT 1").fetchall()
        except sqlite3.Error as e:
            if conn is not None:
                conn.close()
            logger.error(f"Index snapshot {path} is not a usable package index: {e}", exc_info=True)
            raise OpenError("index snapshot is corrupt or not a package index") from e

        logger.info(f"Opened index snapshot {path} (read-only)")
        return cls(conn, path, lock_timeout)

    def query(self, sql: str, params: Sequence[Any] = ()) -> List[Tuple[Any, ...]]:
        """
        Run a read statement and return all rows.

        Raises:
            QueryError: the gate could not be acquired within the lock
                timeout, or SQLite reported an error.
        """
        if not self._gate.acquire(timeout=self.lock_timeout):
            logger.warning(f"Timed out after {self.lock_timeout}s waiting for the index connection")
            raise QueryError("query error: timed out waiting for the index")
        try:
            return self.conn.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Index query failed: {e}", exc_info=True)
            raise QueryError("query error: the index could not answer the search") from e
        finally:
            self._gate.release()

    def close(self) -> None:
        """Close the connection. Only used at shutdown and in tests."""
        with self._gate:
            self.conn.close()
