"""
shelfdb backends — hosted backend-as-a-service wrappers.

Unlike shelfdb.connectors, a backend is not a SQL store chosen at
startup. It wraps a vendor SDK and must keep working, as inert no-ops,
when the SDK or its credentials are missing:

    from shelfdb.backends import SupabaseBackend

    backend = SupabaseBackend.from_env()
    backend.is_ready()          # False in degraded mode
    backend.get_table("products")
    backend.insert_record("customers", {"name": "Walk-in"})
    backend.test_connection()   # advisory, always True

Available backends:
    - supabase.py — Supabase (PostgREST) via supabase-py
"""

from .supabase import ManagedCallError, SupabaseBackend

__all__ = ["SupabaseBackend", "ManagedCallError"]
