"""
Schema initialisation from a plain .sql file.

The file is split on ';' with no parser: semicolons inside string
literals or function bodies are not supported. Tables are created
before indexes. A table that already exists is skipped; any other
table error aborts. Index errors are logged and never abort.
"""

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

_TABLE_NAME = re.compile(
    r"CREATE\s+TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?[`\"]?(\w+)", re.IGNORECASE
)


@dataclass
class SchemaReport:
    tables_created: list[str] = field(default_factory=list)
    tables_existing: list[str] = field(default_factory=list)
    indexes_created: int = 0
    index_errors: list[str] = field(default_factory=list)


def split_statements(sql: str) -> list[str]:
    """Split a script on ';' and drop empty statements."""
    return [s.strip() for s in sql.split(";") if s.strip()]


def _is_create(statement, kind):
    return re.match(rf"CREATE\s+(UNIQUE\s+)?{kind}\b", statement, re.IGNORECASE) is not None


def _table_name(statement, position):
    m = _TABLE_NAME.search(statement)
    return m.group(1) if m else f"table {position}"


def apply_schema(db, sql: str) -> SchemaReport:
    """Run the CREATE TABLE then CREATE INDEX statements of `sql` on `db`."""
    statements = split_statements(sql)
    report = SchemaReport()

    tables = [s for s in statements if _is_create(s, "TABLE")]
    for position, statement in enumerate(tables, 1):
        name = _table_name(statement, position)
        try:
            db.query(statement)
        except Exception as e:
            if "already exists" in str(e):
                logger.info("Table already exists: %s", name)
                report.tables_existing.append(name)
                continue
            logger.error("Error creating table %s: %s", name, e)
            raise
        logger.info("Created table: %s", name)
        report.tables_created.append(name)

    indexes = [s for s in statements if _is_create(s, "INDEX")]
    for statement in indexes:
        try:
            db.query(statement)
        except Exception as e:
            if "already exists" in str(e):
                logger.info("Index already exists")
            else:
                logger.error("Error creating index: %s", e)
                report.index_errors.append(str(e))
            continue
        report.indexes_created += 1

    skipped = len(statements) - len(tables) - len(indexes)
    if skipped:
        logger.warning("Skipped %d statement(s) that are neither CREATE TABLE nor CREATE INDEX", skipped)
    return report
