#!/usr/bin/env python3
"""Create tables and indexes from a .sql schema file on the active store."""

import argparse
import logging
import os
import sys
from pathlib import Path

from shelfdb.config import DatabaseConfig, load_env
from shelfdb.connectors import create_connection_facade
from shelfdb.schema import apply_schema


def main(argv=None):
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("schema", type=Path, help="path to the .sql file")
    args = parser.parse_args(argv)

    load_env()
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(levelname)s %(message)s",
    )

    try:
        sql = args.schema.read_text(encoding="utf-8")
    except OSError as e:
        print(f"Database initialization failed: {e}", file=sys.stderr)
        return 1

    try:
        db = create_connection_facade(DatabaseConfig.from_env())
    except Exception as e:
        print(f"Database initialization failed: {e}", file=sys.stderr)
        return 1

    try:
        report = apply_schema(db, sql)
    except Exception as e:
        print(f"Database initialization failed: {e}", file=sys.stderr)
        return 1
    finally:
        db.end()

    print(
        f"Done on {db.db_type}. Tables created: {len(report.tables_created)}, "
        f"already present: {len(report.tables_existing)}, "
        f"indexes created: {report.indexes_created}, "
        f"index errors: {len(report.index_errors)}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
