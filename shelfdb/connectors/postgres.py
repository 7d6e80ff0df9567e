"""
PostgreSQL connector — the primary store, via a psycopg2 connection pool.

Connection settings come from DatabaseConfig (DB_HOST, DB_PORT, ...).
DB_SSL=true maps to sslmode=require: TLS on, certificate not verified.

Construction probes the server: the pool opens its first connection,
one connection is checked out and put straight back. Any failure closes
the half-built pool and raises PrimaryUnavailableError, or
DriverUnavailableError when psycopg2 itself is missing.

Rows come back as dicts (RealDictCursor). A statement that produced a
result set (SELECT, or INSERT ... RETURNING) maps to ReadResult;
anything else maps to WriteResult with the driver's rowcount.
"""

import logging

from ..errors import DriverUnavailableError, PrimaryUnavailableError
from ..results import ReadResult, WriteResult
from .base import CheckedOutConnection, Connector

logger = logging.getLogger(__name__)


def _load_driver():
    """Return (pool class, cursor factory, base error) from psycopg2."""
    try:
        import psycopg2
        import psycopg2.extras
        import psycopg2.pool
    except ImportError as e:
        raise DriverUnavailableError(
            "psycopg2", "Install it with: pip install psycopg2-binary"
        ) from e
    return (
        psycopg2.pool.ThreadedConnectionPool,
        psycopg2.extras.RealDictCursor,
        psycopg2.Error,
    )


class PostgresConnector(Connector):
    """PostgreSQL via psycopg2.pool.ThreadedConnectionPool."""

    db_type = "postgresql"

    def __init__(self, config, *, pool_factory=None):
        self.config = config
        if pool_factory is None:
            pool_factory, self._cursor_factory, driver_error = _load_driver()
        else:
            self._cursor_factory, driver_error = None, Exception
        self._pool = None
        try:
            self._pool = pool_factory(1, config.pool_max, **self.connect_kwargs())
            self._probe()
        except driver_error as e:
            self._discard_pool()
            raise PrimaryUnavailableError(config.target, e) from e

    # ── Helpers ───────────────────────────────────────────────

    def connect_kwargs(self) -> dict:
        """Keyword arguments handed to psycopg2.connect() for every pooled connection."""
        cfg = self.config
        kwargs = {
            "host": cfg.host,
            "port": cfg.port,
            "dbname": cfg.database,
            "user": cfg.user,
            "password": cfg.password,
            "connect_timeout": cfg.connect_timeout,
        }
        if cfg.ssl:
            kwargs["sslmode"] = "require"
        return kwargs

    def _probe(self):
        conn = self._pool.getconn()
        self._pool.putconn(conn)

    def _discard_pool(self):
        if self._pool is None:
            return
        try:
            self._pool.closeall()
        except Exception as e:
            logger.debug("Ignoring error while closing failed pool: %s", e)
        self._pool = None

    def _execute(self, conn, sql, params):
        with conn.cursor(cursor_factory=self._cursor_factory) as cur:
            cur.execute(sql, params or None)
            if cur.description is not None:
                return ReadResult([dict(r) for r in cur.fetchall()])
            return WriteResult(
                row_count=max(cur.rowcount, 0),
                insert_id=cur.lastrowid or None,
            )

    def _checkout(self, *, autocommit):
        if self._pool is None:
            raise RuntimeError("PostgresConnector has been closed")
        conn = self._pool.getconn()
        try:
            conn.autocommit = autocommit
        except Exception:
            # Broken connection: drop it instead of returning it to the pool.
            self._pool.putconn(conn, close=True)
            raise

        def release():
            self._pool.putconn(conn)

        return conn, release

    # ── Interface ─────────────────────────────────────────────

    def query(self, sql, params=None):
        conn, release = self._checkout(autocommit=True)
        try:
            return self._execute(conn, sql, params)
        finally:
            release()

    def connect(self):
        conn, release = self._checkout(autocommit=True)
        return CheckedOutConnection(
            lambda sql, params=None: self._execute(conn, sql, params),
            release=release,
        )

    def begin(self):
        conn, release = self._checkout(autocommit=False)
        return CheckedOutConnection(
            lambda sql, params=None: self._execute(conn, sql, params),
            release=release,
            commit=conn.commit,
            rollback=conn.rollback,
        )

    def end(self):
        if self._pool is None:
            return
        self._pool.closeall()
        self._pool = None
        logger.info("Closed PostgreSQL pool for %s", self.config.target)

    def ping(self):
        try:
            result = self.query("SELECT 1 AS ok")
            return result.rows == [{"ok": 1}]
        except Exception:
            return False

    # ── Dialect overrides ─────────────────────────────────────

    def ilike(self, col):
        """PostgreSQL has native ILIKE."""
        return f"{col} ILIKE %s"

    def now(self):
        return "NOW()"

    def list_tables_sql(self):
        return (
            "SELECT table_name AS name FROM information_schema.tables "
            "WHERE table_schema = 'public' AND table_type = 'BASE TABLE' "
            "ORDER BY table_name"
        )

    def describe_table_sql(self):
        return (
            'SELECT column_name AS "column", data_type AS type, '
            "is_nullable = 'YES' AS nullable, column_default AS default_value "
            "FROM information_schema.columns "
            "WHERE table_schema = 'public' AND table_name = %s "
            "ORDER BY ordinal_position"
        )

    def __repr__(self):
        return f"<PostgresConnector {self.config.target}>"
