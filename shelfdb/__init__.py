"""
shelfdb — data access for the point-shelf POS backend.

    connectors/  SQL facade: PostgreSQL or MySQL, SQLite fallback
    backends/    hosted Supabase wrapper with a degraded mode
    schema.py    apply a .sql schema file through the facade
"""

__version__ = "0.1.0"

from .config import DatabaseConfig, SupabaseConfig, load_env
from .connectors import ConnectionFacade, StoreKind, create_connection_facade
from .results import QueryOutcome, ReadResult, WriteResult

__all__ = [
    "DatabaseConfig",
    "SupabaseConfig",
    "load_env",
    "ConnectionFacade",
    "StoreKind",
    "create_connection_facade",
    "QueryOutcome",
    "ReadResult",
    "WriteResult",
]
