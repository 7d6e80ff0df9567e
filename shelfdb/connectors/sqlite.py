"""
SQLite connector — the embedded fallback store.

Zero pip dependencies. Python stdlib sqlite3 on a single file.

One connection is shared by the whole process and guarded by a lock,
so statements run in submission order. Reads and writes take different
paths, picked by a textual prefix check (see results.is_read_statement):

    SELECT ...   → ReadResult(rows)
    anything else → WriteResult(row_count, insert_id)
"""

import logging
import os
import sqlite3
import threading

from ..results import ReadResult, WriteResult, is_read_statement
from .base import CheckedOutConnection, Connector

logger = logging.getLogger(__name__)


class SQLiteConnector(Connector):
    """SQLite via one shared sqlite3 connection."""

    db_type = "sqlite"

    def __init__(self, *, db_path):
        if not db_path:
            raise ValueError("SQLiteConnector requires 'db_path'")
        self.db_path = os.path.expanduser(db_path)
        if os.path.isdir(self.db_path):
            raise ValueError(f"Path points to a directory, expected file: {self.db_path}")
        # isolation_level=None → autocommit; transactions issue BEGIN themselves.
        self._conn = sqlite3.connect(
            self.db_path, check_same_thread=False, isolation_level=None
        )
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._closed = False

    # ── Helpers ───────────────────────────────────────────────

    def _run(self, sql, params=None):
        params = params or ()
        with self._lock:
            if is_read_statement(sql):
                rows = self._conn.execute(sql, params).fetchall()
                return ReadResult([dict(r) for r in rows])
            cur = self._conn.execute(sql, params)
            # -1 means "not a DML statement" (DDL, PRAGMA writes).
            return WriteResult(
                row_count=max(cur.rowcount, 0),
                insert_id=cur.lastrowid,
            )

    # ── Interface ─────────────────────────────────────────────

    def query(self, sql, params=None):
        return self._run(sql, params)

    def connect(self):
        """Same query, no-op release. There is no pool to return to."""
        return CheckedOutConnection(self._run)

    def begin(self):
        self._lock.acquire()
        try:
            self._conn.execute("BEGIN")
        except Exception:
            self._lock.release()
            raise
        return CheckedOutConnection(
            self._run,
            release=self._lock.release,
            commit=lambda: self._conn.execute("COMMIT"),
            rollback=lambda: self._conn.execute("ROLLBACK"),
        )

    def end(self):
        with self._lock:
            if self._closed:
                return
            self._conn.close()
            self._closed = True
        logger.info("Closed SQLite database %s", self.db_path)

    def ping(self):
        try:
            with self._lock:
                return self._conn.execute("SELECT 1").fetchone()[0] == 1
        except Exception:
            return False

    @property
    def closed(self) -> bool:
        return self._closed

    # ── Dialect overrides ─────────────────────────────────────

    # ilike: SQLite has no ILIKE, the base class LOWER() form is correct.
    # upsert: SQLite 3.24+ understands ON CONFLICT ... excluded.

    def placeholder(self, index):
        return "?"

    def list_tables_sql(self):
        return (
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        )

    def describe_table_sql(self):
        return (
            'SELECT name AS "column", type, "notnull" = 0 AS nullable, '
            "dflt_value AS default_value, pk AS primary_key "
            "FROM pragma_table_info(?)"
        )

    def __repr__(self):
        return f"<SQLiteConnector {self.db_path}>"
