#!/usr/bin/env python3
"""Report which store the facade lands on and whether it answers."""

import logging
import os
import sys

from shelfdb.config import DatabaseConfig, load_env
from shelfdb.connectors import StoreKind, create_connection_facade


def main():
    load_env()
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    print("Testing database connection...")
    try:
        db = create_connection_facade(DatabaseConfig.from_env())
    except Exception as e:
        print(f"Store: {StoreKind.UNAVAILABLE.value}")
        print(f"Database connection failed: {e}", file=sys.stderr)
        return 1

    try:
        db.test_connection()
        print(f"Store: {db.kind.value} ({db.db_type})")
        print("Database connection successful!")
        return 0
    except Exception as e:
        print(f"Database connection failed: {e}", file=sys.stderr)
        return 1
    finally:
        db.end()


if __name__ == "__main__":
    sys.exit(main())
