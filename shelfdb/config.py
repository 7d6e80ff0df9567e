"""
Environment-driven configuration.

Every variable is optional. Defaults match a local development setup:
PostgreSQL on localhost:5432, database pos_app, user postgres, no TLS,
with pos_app.db in the working directory as the SQLite fallback.

    DB_ENGINE           postgresql | mysql       (default postgresql)
    DB_HOST             primary host             (default localhost)
    DB_PORT             primary port             (default 5432, 3306 for mysql)
    DB_NAME             database name            (default pos_app)
    DB_USER             user                     (default postgres, root for mysql)
    DB_PASSWORD         password                 (default empty)
    DB_SSL              "true" to require TLS    (default false)
    DB_POOL_MAX         max pooled connections   (default 10)
    DB_CONNECT_TIMEOUT  probe timeout, seconds   (default 5)
    SQLITE_PATH         fallback database file   (default pos_app.db)
    SUPABASE_URL        managed backend URL      (default: project URL)
    SUPABASE_ANON_KEY   managed backend anon key (default: project key)

The .env file is only read when load_env() is called; importing this
module never touches the environment.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

ENGINES = ("postgresql", "mysql")

_ENGINE_ALIASES = {
    "postgresql": "postgresql",
    "postgres": "postgresql",
    "pg": "postgresql",
    "mysql": "mysql",
    "mariadb": "mysql",
}

_DEFAULT_PORTS = {"postgresql": 5432, "mysql": 3306}
_DEFAULT_USERS = {"postgresql": "postgres", "mysql": "root"}

DEFAULT_SQLITE_PATH = "pos_app.db"

DEFAULT_SUPABASE_URL = "https://nqqvsrsnvrxydborkfsv.supabase.co"
DEFAULT_SUPABASE_ANON_KEY = (
    "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9."
    "eyJpc3MiOiJzdXBhYmFzZSIsInJlZiI6Im5xcXZzcnNudnJ4eWRib3JrZnN2Iiwicm9sZSI6"
    "ImFub24iLCJpYXQiOjE3NTUwODg2NjMsImV4cCI6MjA3MDY2NDY2M30."
    "N9fm57nGk9g6-HEjP7jOTPcXUxQifRPEfLI18BCSEic"
)


def load_env(path=None) -> bool:
    """Load a .env file into os.environ without overriding set variables."""
    if path is None:
        path = Path.cwd() / ".env"
    loaded = load_dotenv(path, override=False)
    if loaded:
        logger.debug("Loaded environment from %s", path)
    return loaded


def _env_int(env, name, default):
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid integer for %s=%r, using %s", name, raw, default)
        return default


def _env_flag(env, name):
    return env.get(name, "").strip().lower() == "true"


@dataclass(frozen=True)
class DatabaseConfig:
    engine: str = "postgresql"
    host: str = "localhost"
    port: int = 5432
    database: str = "pos_app"
    user: str = "postgres"
    password: str = ""
    ssl: bool = False
    pool_max: int = 10
    connect_timeout: int = 5
    sqlite_path: str = DEFAULT_SQLITE_PATH

    def __post_init__(self):
        if self.engine not in ENGINES:
            raise ValueError(
                f"Unknown engine '{self.engine}'. Supported: {', '.join(ENGINES)}"
            )

    @classmethod
    def from_env(cls, env=None) -> "DatabaseConfig":
        env = os.environ if env is None else env
        raw_engine = env.get("DB_ENGINE", "postgresql").strip().lower()
        engine = _ENGINE_ALIASES.get(raw_engine)
        if engine is None:
            raise ValueError(
                f"Unknown DB_ENGINE '{raw_engine}'. "
                f"Supported: {', '.join(sorted(_ENGINE_ALIASES))}"
            )
        return cls(
            engine=engine,
            host=env.get("DB_HOST") or "localhost",
            port=_env_int(env, "DB_PORT", _DEFAULT_PORTS[engine]),
            database=env.get("DB_NAME") or "pos_app",
            user=env.get("DB_USER") or _DEFAULT_USERS[engine],
            password=env.get("DB_PASSWORD", ""),
            ssl=_env_flag(env, "DB_SSL"),
            pool_max=max(1, _env_int(env, "DB_POOL_MAX", 10)),
            connect_timeout=max(1, _env_int(env, "DB_CONNECT_TIMEOUT", 5)),
            sqlite_path=env.get("SQLITE_PATH") or DEFAULT_SQLITE_PATH,
        )

    @property
    def target(self) -> str:
        """user@host:port/database, without the password."""
        return f"{self.user}@{self.host}:{self.port}/{self.database}"


@dataclass(frozen=True)
class SupabaseConfig:
    url: str = DEFAULT_SUPABASE_URL
    key: str = DEFAULT_SUPABASE_ANON_KEY

    @classmethod
    def from_env(cls, env=None) -> "SupabaseConfig":
        env = os.environ if env is None else env
        return cls(
            url=env.get("SUPABASE_URL") or DEFAULT_SUPABASE_URL,
            key=env.get("SUPABASE_ANON_KEY") or DEFAULT_SUPABASE_ANON_KEY,
        )
