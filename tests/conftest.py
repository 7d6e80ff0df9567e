from types import SimpleNamespace

import pytest

from shelfdb.config import DatabaseConfig
from shelfdb.connectors.sqlite import SQLiteConnector


class FakeDriverError(Exception):
    pass


# ── Fake DB-API connection (psycopg2 / mysql shaped) ──────────

class FakeCursor:
    """Returns `conn.rows` for SELECT / RETURNING, a rowcount otherwise."""

    def __init__(self, conn, **kwargs):
        self.conn = conn
        self.kwargs = kwargs
        self.description = None
        self.rowcount = -1
        self.lastrowid = None
        self._rows = []

    def execute(self, sql, params=None):
        self.conn.executed.append((sql, params))
        if sql.startswith("FAIL"):
            raise FakeDriverError("syntax error at or near FAIL")
        upper = sql.strip().upper()
        if upper.startswith("SELECT") or "RETURNING" in upper:
            self.description = [("id",)]
            self._rows = list(self.conn.rows)
            self.rowcount = len(self._rows)
        else:
            self.rowcount = self.conn.affected
            self.lastrowid = self.conn.last_id

    def fetchall(self):
        return self._rows

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


class FakeConnection:
    def __init__(self, rows=None, affected=1, last_id=None):
        self.rows = rows or []
        self.affected = affected
        self.last_id = last_id
        self.executed = []
        self.autocommit = None
        self.commits = 0
        self.rollbacks = 0
        self.closed = False
        self.cursor_kwargs = []

    def cursor(self, **kwargs):
        self.cursor_kwargs.append(kwargs)
        return FakeCursor(self, **kwargs)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        self.closed = True


class FakePool:
    """Stand-in for psycopg2.pool.ThreadedConnectionPool."""

    fail_on_getconn = False

    def __init__(self, minconn, maxconn, **kwargs):
        self.minconn = minconn
        self.maxconn = maxconn
        self.kwargs = kwargs
        self.conn = FakeConnection()
        self.checked_out = 0
        self.getconn_calls = 0
        self.discarded = []
        self.closed = False

    def getconn(self):
        self.getconn_calls += 1
        if self.fail_on_getconn:
            raise FakeDriverError("could not connect to server: Connection refused")
        self.checked_out += 1
        return self.conn

    def putconn(self, conn, close=False):
        self.checked_out -= 1
        if close:
            self.discarded.append(conn)

    def closeall(self):
        self.closed = True


@pytest.fixture()
def fake_pool_factory():
    """Pool factory that remembers the pool it built."""
    created = []

    def factory(minconn, maxconn, **kwargs):
        pool = FakePool(minconn, maxconn, **kwargs)
        created.append(pool)
        return pool

    factory.created = created
    return factory


# ── Fake Supabase client ──────────────────────────────────────

class FakeTableQuery:
    def __init__(self, client, name):
        self.client = client
        self.name = name
        self.calls = []

    def select(self, *columns, **kwargs):
        self.calls.append(("select", columns, kwargs))
        return self

    def insert(self, record):
        self.calls.append(("insert", record))
        rows = self.client.tables.setdefault(self.name, [])
        rows.append(dict(record, id=len(rows) + 1))
        return self

    def execute(self):
        error = self.client.errors.get(self.name)
        if error is not None:
            raise error
        if self.calls and self.calls[0][0] == "insert":
            return SimpleNamespace(data=[self.client.tables[self.name][-1]], count=None)
        rows = self.client.tables.get(self.name, [])
        return SimpleNamespace(data=list(rows), count=len(rows))


class FakeSupabaseClient:
    def __init__(self, tables=None, errors=None):
        self.tables = tables or {}
        self.errors = errors or {}
        self.queried = []

    def table(self, name):
        self.queried.append(name)
        return FakeTableQuery(self, name)


# ── Real SQLite store ─────────────────────────────────────────

@pytest.fixture()
def sqlite_store(tmp_path):
    store = SQLiteConnector(db_path=str(tmp_path / "pos_app.db"))
    store.query(
        "CREATE TABLE products ("
        " id INTEGER PRIMARY KEY AUTOINCREMENT,"
        " name TEXT NOT NULL,"
        " sku TEXT UNIQUE,"
        " stock INTEGER NOT NULL DEFAULT 0)"
    )
    yield store
    store.end()


@pytest.fixture()
def db_config(tmp_path):
    return DatabaseConfig(sqlite_path=str(tmp_path / "pos_app.db"))
