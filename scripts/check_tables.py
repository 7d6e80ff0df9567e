#!/usr/bin/env python3
"""List the tables of the active store, or describe one with --table."""

import argparse
import logging
import os
import sys

from shelfdb.config import DatabaseConfig, load_env
from shelfdb.connectors import create_connection_facade

SAMPLE_ROWS = 5


def list_tables(db):
    return [row["name"] for row in db.query(db.list_tables_sql()).rows]


def describe_table(db, table):
    return db.query(db.describe_table_sql(), [table]).rows


def sample_rows(db, table, limit=SAMPLE_ROWS):
    # Table names cannot be bound; only accept ones the store reported.
    if table not in list_tables(db):
        raise ValueError(f"Unknown table: {table}")
    count = db.query(f"SELECT COUNT(*) AS count FROM {table}").rows[0]["count"]
    rows = db.query(f"SELECT * FROM {table} LIMIT {int(limit)}").rows
    return count, rows


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--table", help="describe this table and show sample rows")
    args = parser.parse_args(argv)

    load_env()
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "WARNING").upper())

    try:
        db = create_connection_facade(DatabaseConfig.from_env())
    except Exception as e:
        print(f"Error connecting: {e}", file=sys.stderr)
        return 1

    try:
        print(f"Connected to {db.db_type} ({db.kind.value})\n")
        if not args.table:
            print("Existing tables:")
            for name in list_tables(db):
                print(f"- {name}")
            return 0

        print(f"{args.table} table structure:")
        for col in describe_table(db, args.table):
            print("  " + "\t".join(f"{k}={v}" for k, v in col.items()))
        count, rows = sample_rows(db, args.table)
        print(f"\nTotal rows in {args.table}: {count}")
        for row in rows:
            print(f"  {row}")
        return 0
    except Exception as e:
        print(f"Error checking tables: {e}", file=sys.stderr)
        return 1
    finally:
        db.end()


if __name__ == "__main__":
    sys.exit(main())
