"""
Supabase backend — a thin wrapper over the supabase-py client.

Used by the parts of the app that talk to the hosted project instead of
the SQL facade in shelfdb.connectors. The two are never composed.

Degraded mode
-------------
If the client cannot be created (package missing, malformed URL or key)
the wrapper keeps `client = None` for the rest of the process and every
method turns into a safe no-op:

    query()          → ReadResult([])
    get_table()      → []
    insert_record()  → None
    test_connection()→ True

`degraded_reason` says why. Per-call failures of get_table /
insert_record are logged and kept in `last_error` instead of raised, so
an empty list can be told apart from a failed call.

query() is a placeholder
------------------------
Even with a live client, query() does not translate SQL into PostgREST
calls; it logs the statement and returns no rows. Code that needs real
data from the hosted project must use get_table / insert_record or the
client directly.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..config import SupabaseConfig
from ..results import ReadResult

logger = logging.getLogger(__name__)

HEALTH_TABLE = "users"


def _is_missing_relation(error, table):
    message = str(error)
    return any(
        f'relation "{name}" does not exist' in message
        for name in (table, f"public.{table}")
    )


def _create_client(url, key):
    from supabase import create_client
    return create_client(url, key)


@dataclass(frozen=True)
class ManagedCallError:
    """A per-call failure that was swallowed into an empty result."""
    operation: str
    table: str
    error: Exception


class _TransactionClient:
    """Stand-in connection passed to transaction callbacks."""

    def __init__(self, backend):
        self._backend = backend

    def query(self, text, params=None):
        return self._backend.query(text, params)


class SupabaseBackend:
    """
    Supabase client wrapper with a permanent degraded mode.

    Usage:
        backend = SupabaseBackend.from_env()
        if backend.is_ready():
            products = backend.get_table("products")
    """

    def __init__(self, url, key, *, client_factory=_create_client):
        self.url = url
        self.degraded_reason: Optional[str] = None
        self.last_error: Optional[ManagedCallError] = None
        try:
            self._client = client_factory(url, key)
        except Exception as e:
            # ImportError, supabase's SupabaseException for a bad URL/key, ...
            self._client = None
            self.degraded_reason = f"{type(e).__name__}: {e}"
            logger.warning("Supabase client unavailable, using fallback mode: %s", self.degraded_reason)
        else:
            logger.info("Supabase client initialized for %s", url)

    @classmethod
    def from_env(cls, env=None, **kwargs) -> "SupabaseBackend":
        cfg = SupabaseConfig.from_env(env)
        return cls(cfg.url, cfg.key, **kwargs)

    @property
    def client(self):
        return self._client

    def is_ready(self) -> bool:
        return self._client is not None

    # ── SQL-shaped surface ────────────────────────────────────

    def query(self, text, params=None) -> ReadResult:
        """Placeholder: always returns no rows (see module docstring)."""
        if self._client is None:
            logger.info("Fallback mode, query would be: %s", text)
            return ReadResult([])
        logger.debug("Supabase query (not translated): %s", text)
        return ReadResult([])

    def transaction(self, callback):
        """
        Call callback(client) with a client whose query() is self.query.

        Naming convenience only: nothing is atomic and nothing is rolled
        back. Errors from callback are logged and re-raised.
        """
        try:
            return callback(_TransactionClient(self))
        except Exception as e:
            logger.error("Transaction error: %s", e)
            raise

    def test_connection(self) -> bool:
        """
        Advisory health check. Always True: startup is never blocked.

        A missing health table (schema not provisioned yet) is expected;
        any other error is logged.
        """
        if self._client is None:
            logger.warning("Supabase not configured (%s), skipping connection test", self.degraded_reason)
            return True
        try:
            self._client.table(HEALTH_TABLE).select("*", count="exact", head=True).execute()
        except Exception as e:
            if _is_missing_relation(e, HEALTH_TABLE):
                logger.info("Supabase reachable, table %s not provisioned yet", HEALTH_TABLE)
            else:
                logger.error("Supabase connection test failed: %s", e)
        return True

    # ── Table helpers ─────────────────────────────────────────

    def get_table(self, table_name) -> list[dict[str, Any]]:
        """All rows of `table_name`, or [] on any failure."""
        if self._client is None:
            return []
        try:
            response = self._client.table(table_name).select("*").execute()
            return response.data or []
        except Exception as e:
            self._record_error("get_table", table_name, e)
            return []

    def insert_record(self, table_name, record) -> Optional[dict[str, Any]]:
        """Insert one row and return it as stored, or None on any failure."""
        if self._client is None:
            return None
        try:
            response = self._client.table(table_name).insert(record).execute()
            return response.data[0] if response.data else None
        except Exception as e:
            self._record_error("insert_record", table_name, e)
            return None

    def _record_error(self, operation, table_name, error):
        self.last_error = ManagedCallError(operation, table_name, error)
        logger.error("Error in %s for %s: %s", operation, table_name, error)

    def __repr__(self):
        state = "ready" if self.is_ready() else "degraded"
        return f"<SupabaseBackend {self.url} {state}>"
