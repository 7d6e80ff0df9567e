"""
MySQL / MariaDB connector — primary store when DB_ENGINE=mysql.

Two drivers are supported, detected once at construction:
  1. mysql-connector-python — Oracle's official driver
  2. PyMySQL — pure Python, easier to install

No pool: every query opens and closes its own connection. For a POS
backend the handshake cost (~5ms on a LAN) is negligible next to the
request itself.

  pip install mysql-connector-python   # Option A
  pip install PyMySQL                  # Option B
"""

import logging

from ..errors import DriverUnavailableError, PrimaryUnavailableError
from ..results import ReadResult, WriteResult
from .base import CheckedOutConnection, Connector

logger = logging.getLogger(__name__)


def _detect_driver():
    """Return the name of the first importable MySQL driver."""
    try:
        import mysql.connector  # noqa: F401
        return "mysql-connector"
    except ImportError:
        pass
    try:
        import pymysql  # noqa: F401
        return "pymysql"
    except ImportError:
        raise DriverUnavailableError(
            "mysql",
            "Install one of: pip install mysql-connector-python | pip install PyMySQL",
        )


class MySQLConnector(Connector):
    """MySQL/MariaDB via mysql-connector-python or PyMySQL."""

    db_type = "mysql"

    def __init__(self, config, *, driver=None, connect_fn=None):
        self.config = config
        if connect_fn is not None:
            self.driver = driver or "custom"
            self._connect_fn = connect_fn
        else:
            self.driver = driver or _detect_driver()
            self._connect_fn = self._driver_connect
        self._closed = False
        try:
            self._open().close()
        except Exception as e:
            raise PrimaryUnavailableError(config.target, e) from e

    # ── Helpers ───────────────────────────────────────────────

    def connect_kwargs(self) -> dict:
        cfg = self.config
        kwargs = {
            "host": cfg.host,
            "port": cfg.port,
            "user": cfg.user,
            "password": cfg.password,
            "database": cfg.database,
        }
        if self.driver == "mysql-connector":
            kwargs["connection_timeout"] = cfg.connect_timeout
        else:
            kwargs["connect_timeout"] = cfg.connect_timeout
        if cfg.ssl:
            # Encrypt without verifying the server certificate.
            if self.driver == "mysql-connector":
                kwargs["ssl_disabled"] = False
                kwargs["ssl_verify_cert"] = False
            else:
                kwargs["ssl"] = {"check_hostname": False}
        return kwargs

    def _driver_connect(self, **kwargs):
        if self.driver == "mysql-connector":
            import mysql.connector
            return mysql.connector.connect(**kwargs)
        import pymysql
        import pymysql.cursors
        return pymysql.connect(cursorclass=pymysql.cursors.DictCursor, **kwargs)

    def _open(self):
        return self._connect_fn(**self.connect_kwargs())

    def _cursor(self, conn):
        # mysql-connector needs dictionary=True; PyMySQL uses DictCursor
        # from the connection config.
        if self.driver == "mysql-connector":
            return conn.cursor(dictionary=True)
        return conn.cursor()

    def _execute(self, conn, sql, params):
        cursor = self._cursor(conn)
        try:
            cursor.execute(sql, tuple(params or ()))
            if cursor.description is not None:
                return ReadResult([dict(r) for r in cursor.fetchall()])
            return WriteResult(
                row_count=max(cursor.rowcount, 0),
                insert_id=cursor.lastrowid or None,
            )
        finally:
            cursor.close()

    def _checkout(self, *, autocommit):
        if self._closed:
            raise RuntimeError("MySQLConnector has been closed")
        conn = self._open()
        try:
            if self.driver == "pymysql":
                conn.autocommit(autocommit)
            else:
                conn.autocommit = autocommit
        except Exception:
            conn.close()
            raise
        return conn

    # ── Interface ─────────────────────────────────────────────

    def query(self, sql, params=None):
        conn = self._checkout(autocommit=True)
        try:
            return self._execute(conn, sql, params)
        finally:
            conn.close()

    def connect(self):
        conn = self._checkout(autocommit=True)
        return CheckedOutConnection(
            lambda sql, params=None: self._execute(conn, sql, params),
            release=conn.close,
        )

    def begin(self):
        conn = self._checkout(autocommit=False)
        return CheckedOutConnection(
            lambda sql, params=None: self._execute(conn, sql, params),
            release=conn.close,
            commit=conn.commit,
            rollback=conn.rollback,
        )

    def end(self):
        # Nothing pooled to close; later queries are refused.
        if not self._closed:
            self._closed = True
            logger.info("Closed MySQL connector for %s", self.config.target)

    def ping(self):
        try:
            return self.query("SELECT 1 AS ok").rows == [{"ok": 1}]
        except Exception:
            return False

    # ── Dialect overrides ─────────────────────────────────────

    # ilike: MySQL is case-insensitive by default with utf8 collation.
    def ilike(self, col):
        """MySQL is case-insensitive by default (utf8_general_ci)."""
        return f"{col} LIKE %s"

    def upsert(self, table, key_col, cols):
        """MySQL ON DUPLICATE KEY upsert."""
        col_list = ", ".join(cols)
        binds = ", ".join(["%s"] * len(cols))
        update_set = ", ".join(f"{c} = VALUES({c})" for c in cols if c != key_col)
        return (
            f"INSERT INTO {table} ({col_list}) VALUES ({binds}) "
            f"ON DUPLICATE KEY UPDATE {update_set}"
        )

    def list_tables_sql(self):
        return (
            "SELECT table_name AS name FROM information_schema.tables "
            "WHERE table_schema = DATABASE() AND table_type = 'BASE TABLE' "
            "ORDER BY table_name"
        )

    def describe_table_sql(self):
        return (
            "SELECT column_name AS `column`, column_type AS type, "
            "is_nullable = 'YES' AS nullable, column_default AS default_value, "
            "column_key = 'PRI' AS primary_key "
            "FROM information_schema.columns "
            "WHERE table_schema = DATABASE() AND table_name = %s "
            "ORDER BY ordinal_position"
        )

    def __repr__(self):
        return f"<MySQLConnector {self.config.target} via {self.driver}>"
