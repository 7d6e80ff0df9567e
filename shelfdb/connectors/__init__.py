"""
shelfdb connectors — one facade, whichever store is reachable.

Usage:

    from shelfdb.config import DatabaseConfig
    from shelfdb.connectors import create_connection_facade

    db = create_connection_facade(DatabaseConfig.from_env())

    db.kind        # StoreKind.PRIMARY or StoreKind.FALLBACK, fixed for the process
    db.db_type     # "postgresql" | "mysql" | "sqlite"

    result = db.query("SELECT * FROM products WHERE id = %s", [7])
    result.rows    # list[dict], always present

    with db.connect() as conn:              # check out / release
        conn.query("UPDATE products SET stock = stock - 1 WHERE id = %s", [7])

    db.transaction(lambda conn: ...)        # commit / rollback
    db.end()

Startup order:
  1. Probe the primary store (PostgreSQL, or MySQL with DB_ENGINE=mysql).
  2. On any probe failure, log it and open the SQLite fallback, once.
     The primary is never retried.
  3. Return the resolved facade. Callers hold on to it and pass it
     around; there is no module-level singleton to race against.

If the fallback cannot start either, the error is raised: a facade with
no working store is never returned.
"""

import enum
import logging

from ..errors import DriverUnavailableError, PrimaryUnavailableError
from .base import CheckedOutConnection, Connector

__all__ = [
    "create_connection_facade",
    "ConnectionFacade",
    "StoreKind",
    "Connector",
    "CheckedOutConnection",
]

logger = logging.getLogger(__name__)


class StoreKind(enum.Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"
    # Reported by tooling when no facade could be built at all.
    UNAVAILABLE = "unavailable"


class ConnectionFacade:
    """
    The data-access object handed to the rest of the application.

    Wraps exactly one connector. `kind` and `db_type` are read-only and
    never change after construction; there is no runtime failover.
    """

    __slots__ = ("_kind", "_connector")

    def __init__(self, kind: StoreKind, connector: Connector):
        if kind is StoreKind.UNAVAILABLE:
            raise ValueError("A facade needs a working store")
        self._kind = kind
        self._connector = connector

    @property
    def kind(self) -> StoreKind:
        return self._kind

    @property
    def db_type(self) -> str:
        return self._connector.db_type

    @property
    def connector(self) -> Connector:
        return self._connector

    def query(self, sql, params=None):
        return self._connector.query(sql, params)

    def connect(self) -> CheckedOutConnection:
        return self._connector.connect()

    def transaction(self, callback):
        return self._connector.transaction(callback)

    def test_connection(self) -> bool:
        return self._connector.test_connection()

    def ping(self) -> bool:
        return self._connector.ping()

    def end(self):
        self._connector.end()

    # Dialect helpers, so callers can write db.placeholder(1) directly.
    def __getattr__(self, name):
        if name in ("placeholder", "now", "ilike", "upsert",
                    "list_tables_sql", "describe_table_sql"):
            return getattr(self._connector, name)
        raise AttributeError(name)

    def __repr__(self):
        return f"<ConnectionFacade {self._kind.value} {self._connector!r}>"


# ── Store loaders ─────────────────────────────────────────────
# Module-level so tests can swap them out.

def _open_primary(config) -> Connector:
    if config.engine == "mysql":
        from .mysql import MySQLConnector
        return MySQLConnector(config)
    from .postgres import PostgresConnector
    return PostgresConnector(config)


def _open_fallback(config) -> Connector:
    try:
        from .sqlite import SQLiteConnector
    except ImportError as e:
        raise DriverUnavailableError(
            "sqlite3", "This Python build has no sqlite3 module"
        ) from e
    return SQLiteConnector(db_path=config.sqlite_path)


def create_connection_facade(config) -> ConnectionFacade:
    """
    Probe the primary store, fall back to SQLite, return the facade.

    Raises DriverUnavailableError (or the sqlite3 error) when the
    fallback store cannot be opened.
    """
    try:
        connector = _open_primary(config)
    except DriverUnavailableError as e:
        logger.warning("%s driver unavailable, using SQLite: %s", config.engine, e)
    except PrimaryUnavailableError as e:
        logger.warning("%s connection failed, switching to SQLite: %s", config.engine, e)
    else:
        logger.info("Connected to %s at %s", connector.db_type, config.target)
        return ConnectionFacade(StoreKind.PRIMARY, connector)

    try:
        connector = _open_fallback(config)
    except Exception:
        logger.error("Both %s and SQLite failed", config.engine)
        raise
    logger.info("SQLite database ready at %s", connector.db_path)
    return ConnectionFacade(StoreKind.FALLBACK, connector)
