"""
Abstract database connector interface.

Every connector implements the same surface:

    query(sql, params)    → ReadResult | WriteResult
    connect()             → CheckedOutConnection (query + release)
    end()                 → None, closes the pool / file handle
    transaction(callback) → whatever callback returns
    ping()                → bool, connectivity check

Connectors handle connection, execution, and dialect.
They know nothing about which store the facade picked at startup;
that stays in connectors/__init__.py.
"""

from abc import ABC, abstractmethod
import logging

logger = logging.getLogger(__name__)


class CheckedOutConnection:
    """
    One connection handed to a caller until release().

    Mirrors the pool idiom (check out, query, release) for every store.
    For stores without a pool, release is a no-op. Usable as a context
    manager, which releases on exit.
    """

    def __init__(self, run, release=None, commit=None, rollback=None):
        self._run = run
        self._release = release
        self._commit = commit
        self._rollback = rollback
        self.released = False

    def query(self, sql, params=None):
        return self._run(sql, params)

    def commit(self):
        if self._commit:
            self._commit()

    def rollback(self):
        if self._rollback:
            self._rollback()

    def release(self):
        if self.released:
            return
        self.released = True
        if self._release:
            self._release()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.release()
        return False


class Connector(ABC):
    """
    Minimal database connector.

    Subclasses must implement five methods:
      query    — run one statement, return a ReadResult or WriteResult
      connect  — check out a CheckedOutConnection
      begin    — check out a connection with autocommit off
      end      — close the underlying pool or file
      ping     — connectivity test

    db_type is the tag the rest of the app branches on for SQL dialect.
    """

    db_type = None

    # ── Required ──────────────────────────────────────────────

    @abstractmethod
    def query(self, sql, params=None):
        """
        Execute one statement on its own connection and commit.

        Raises the driver's exception on failure. No retry.
        """
        ...

    @abstractmethod
    def connect(self) -> CheckedOutConnection:
        """Check out a connection. Caller must release() it."""
        ...

    @abstractmethod
    def begin(self) -> CheckedOutConnection:
        """Check out a connection inside an open transaction."""
        ...

    @abstractmethod
    def end(self):
        """Close the store. Calling it twice is a no-op."""
        ...

    @abstractmethod
    def ping(self) -> bool:
        """
        Test connectivity. Returns True if the database is reachable.

        Must not raise. Returns False on any failure.
        """
        ...

    # ── Shared behaviour ──────────────────────────────────────

    def transaction(self, callback):
        """
        Run callback(conn) in one transaction.

        Commits when callback returns, rolls back and re-raises when the
        callback or the commit raises. The connection is released either way.
        """
        conn = self.begin()
        try:
            result = callback(conn)
            conn.commit()
            return result
        except Exception:
            logger.error("Transaction rolled back on %s", self.db_type)
            try:
                conn.rollback()
            except Exception as e:
                logger.warning("Rollback failed on %s: %s", self.db_type, e)
            raise
        finally:
            conn.release()

    def test_connection(self) -> bool:
        """Check out and release one connection; raise on failure."""
        conn = self.connect()
        conn.release()
        return True

    # ── Dialect helpers ───────────────────────────────────────
    # Override in subclasses where SQL syntax diverges.

    def placeholder(self, index: int) -> str:
        """Bind marker for the index-th parameter (1-based)."""
        return "%s"

    def now(self) -> str:
        """SQL expression for current timestamp."""
        return "CURRENT_TIMESTAMP"

    def ilike(self, col: str) -> str:
        """Case-insensitive LIKE against one bound parameter."""
        return f"LOWER({col}) LIKE LOWER({self.placeholder(1)})"

    def upsert(self, table: str, key_col: str, cols: list[str]) -> str:
        """
        Generate a parameterised UPSERT statement.

        Bind values in `cols` order. Override per dialect
        (ON CONFLICT, ON DUPLICATE KEY, etc.).
        """
        col_list = ", ".join(cols)
        binds = ", ".join(self.placeholder(i) for i in range(1, len(cols) + 1))
        update_set = ", ".join(
            f"{c} = excluded.{c}" for c in cols if c != key_col
        )
        return (
            f"INSERT INTO {table} ({col_list}) VALUES ({binds}) "
            f"ON CONFLICT ({key_col}) DO UPDATE SET {update_set}"
        )

    @abstractmethod
    def list_tables_sql(self) -> str:
        """SELECT returning one `name` column per user table."""
        ...

    @abstractmethod
    def describe_table_sql(self) -> str:
        """SELECT describing the columns of the table bound as the only parameter."""
        ...

    # ── Repr ──────────────────────────────────────────────────

    def __repr__(self):
        return f"<{self.__class__.__name__}>"
