import sqlite3
import threading

import pytest

from shelfdb.results import ReadResult, WriteResult, is_read_statement
from shelfdb.connectors.sqlite import SQLiteConnector


@pytest.mark.parametrize("sql", [
    "SELECT * FROM products",
    "   select 1",
    "\n\tSeLeCt name FROM products",
])
def test_select_prefix_is_read(sql):
    assert is_read_statement(sql)


@pytest.mark.parametrize("sql", [
    "INSERT INTO products (name) VALUES ('x')",
    "UPDATE products SET stock = 1",
    "DELETE FROM products",
    "CREATE TABLE t (id INTEGER)",
])
def test_other_statements_are_writes(sql):
    assert not is_read_statement(sql)


def test_with_select_classified_as_write():
    """Known limitation: CTEs are not recognised as reads."""
    assert not is_read_statement("WITH t AS (SELECT 1) SELECT * FROM t")
    assert not is_read_statement("-- comment\nSELECT 1")


def test_insert_returns_write_result(sqlite_store):
    r = sqlite_store.query(
        "INSERT INTO products (name, sku, stock) VALUES (?, ?, ?)",
        ["Keyboard", "KB-1", 4],
    )
    assert isinstance(r, WriteResult)
    assert r.rows == []
    assert r.row_count == 1
    assert r.insert_id == 1
    assert r.to_dict() == {"rows": [], "rowCount": 1, "insertId": 1}


def test_select_returns_rows_as_dicts(sqlite_store):
    sqlite_store.query("INSERT INTO products (name, sku) VALUES (?, ?)", ["Mouse", "MS-1"])
    r = sqlite_store.query("SELECT name, sku, stock FROM products")
    assert isinstance(r, ReadResult)
    assert r.rows == [{"name": "Mouse", "sku": "MS-1", "stock": 0}]
    assert r.row_count is None
    assert r.insert_id is None
    assert r.to_dict() == {"rows": [{"name": "Mouse", "sku": "MS-1", "stock": 0}]}


def test_select_without_matches_has_empty_rows(sqlite_store):
    r = sqlite_store.query("SELECT * FROM products WHERE id = ?", [99])
    assert isinstance(r, ReadResult)
    assert r.rows == []


def test_lowercase_select_with_leading_whitespace_reads(sqlite_store):
    r = sqlite_store.query("   select 1 AS one")
    assert r.rows == [{"one": 1}]


def test_update_reports_affected_rows(sqlite_store):
    for sku in ("A", "B", "C"):
        sqlite_store.query("INSERT INTO products (name, sku) VALUES ('p', ?)", [sku])
    r = sqlite_store.query("UPDATE products SET stock = 10 WHERE sku != ?", ["C"])
    assert r.row_count == 2
    assert r.rows == []


def test_ddl_row_count_is_zero(sqlite_store):
    r = sqlite_store.query("CREATE TABLE customers (id INTEGER PRIMARY KEY, name TEXT)")
    assert isinstance(r, WriteResult)
    assert r.row_count == 0


def test_with_select_goes_down_write_path(sqlite_store):
    sqlite_store.query("INSERT INTO products (name) VALUES ('p')")
    r = sqlite_store.query("WITH t AS (SELECT name FROM products) SELECT name FROM t")
    # Rows are discarded: documented misclassification.
    assert isinstance(r, WriteResult)
    assert r.rows == []
    assert r.row_count == 0


def test_statement_error_propagates(sqlite_store):
    with pytest.raises(sqlite3.OperationalError):
        sqlite_store.query("SELECT * FROM no_such_table")
    sqlite_store.query("INSERT INTO products (name, sku) VALUES ('p', 'DUP')")
    with pytest.raises(sqlite3.IntegrityError):
        sqlite_store.query("INSERT INTO products (name, sku) VALUES ('q', 'DUP')")


def test_connect_exposes_query_and_noop_release(sqlite_store):
    conn = sqlite_store.connect()
    conn.query("INSERT INTO products (name) VALUES ('p')")
    assert conn.query("SELECT COUNT(*) AS n FROM products").rows == [{"n": 1}]
    conn.release()
    conn.release()
    # Store is still usable after release.
    assert sqlite_store.query("SELECT COUNT(*) AS n FROM products").rows == [{"n": 1}]


def test_transaction_commits(sqlite_store):
    def sell(conn):
        conn.query("INSERT INTO products (name, stock) VALUES ('p', 5)")
        conn.query("UPDATE products SET stock = stock - 2")
        return "ok"

    assert sqlite_store.transaction(sell) == "ok"
    assert sqlite_store.query("SELECT stock FROM products").rows == [{"stock": 3}]


def test_transaction_rolls_back_on_error(sqlite_store):
    def broken(conn):
        conn.query("INSERT INTO products (name) VALUES ('p')")
        raise RuntimeError("payment declined")

    with pytest.raises(RuntimeError, match="payment declined"):
        sqlite_store.transaction(broken)
    assert sqlite_store.query("SELECT COUNT(*) AS n FROM products").rows == [{"n": 0}]
    # Lock was released: a plain query from another thread still works.
    results = []
    t = threading.Thread(target=lambda: results.append(sqlite_store.query("SELECT 1 AS x").rows))
    t.start()
    t.join(timeout=5)
    assert results == [[{"x": 1}]]


def test_failed_commit_rolls_back(sqlite_store):
    sqlite_store.query("PRAGMA foreign_keys = ON")
    sqlite_store.query("CREATE TABLE sales (id INTEGER PRIMARY KEY)")
    sqlite_store.query(
        "CREATE TABLE sale_items (id INTEGER PRIMARY KEY, sale_id INTEGER "
        "REFERENCES sales(id) DEFERRABLE INITIALLY DEFERRED)"
    )

    # The orphan row is only checked at COMMIT.
    with pytest.raises(sqlite3.IntegrityError):
        sqlite_store.transaction(
            lambda c: c.query("INSERT INTO sale_items (sale_id) VALUES (99)")
        )

    sqlite_store.transaction(lambda c: c.query("INSERT INTO sales (id) VALUES (1)"))
    assert sqlite_store.query("SELECT id FROM sales").rows == [{"id": 1}]
    assert sqlite_store.query("SELECT COUNT(*) AS n FROM sale_items").rows == [{"n": 0}]


def test_concurrent_writes_are_serialized(sqlite_store):
    def worker(n):
        for i in range(25):
            sqlite_store.query("INSERT INTO products (name) VALUES (?)", [f"w{n}-{i}"])

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert sqlite_store.query("SELECT COUNT(*) AS n FROM products").rows == [{"n": 100}]


def test_end_is_idempotent(tmp_path):
    store = SQLiteConnector(db_path=str(tmp_path / "x.db"))
    store.end()
    store.end()
    assert store.closed


def test_query_after_end_raises(tmp_path):
    store = SQLiteConnector(db_path=str(tmp_path / "x.db"))
    store.end()
    with pytest.raises(sqlite3.ProgrammingError):
        store.query("SELECT 1")
    assert store.ping() is False


def test_directory_path_rejected(tmp_path):
    with pytest.raises(ValueError, match="directory"):
        SQLiteConnector(db_path=str(tmp_path))


def test_dialect_helpers(sqlite_store):
    assert sqlite_store.placeholder(3) == "?"
    assert sqlite_store.ilike("name") == "LOWER(name) LIKE LOWER(?)"
    sql = sqlite_store.upsert("products", "sku", ["sku", "name"])
    assert sql == (
        "INSERT INTO products (sku, name) VALUES (?, ?) "
        "ON CONFLICT (sku) DO UPDATE SET name = excluded.name"
    )
    sqlite_store.query(sql, ["S1", "first"])
    sqlite_store.query(sql, ["S1", "second"])
    assert sqlite_store.query("SELECT name FROM products").rows == [{"name": "second"}]


def test_list_and_describe_tables(sqlite_store):
    tables = sqlite_store.query(sqlite_store.list_tables_sql()).rows
    assert [t["name"] for t in tables] == ["products"]
    cols = sqlite_store.query(sqlite_store.describe_table_sql(), ["products"]).rows
    assert [c["column"] for c in cols] == ["id", "name", "sku", "stock"]
    assert cols[0]["primary_key"] == 1
    assert cols[1]["nullable"] == 0
