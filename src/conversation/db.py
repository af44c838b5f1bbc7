"""Database layer for the conversation store.

Supports two backends:
- PostgreSQL (production, set SEQUENCER_DATABASE_URL)
- SQLite (local development, default)

Uses raw SQL via psycopg2 (Postgres) or sqlite3 (SQLite) for simplicity.
No ORM — keeps the dependency footprint minimal.

Thread-safety: Postgres uses a ThreadedConnectionPool for connection
reuse. SQLite uses per-call connections with check_same_thread=False.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Optional

from src import config

logger = logging.getLogger(__name__)

DATABASE_URL = config.DATABASE_URL
SQLITE_PATH = config.SQLITE_PATH

_initialized = False
_pg_pool = None


def configure(database_url: Optional[str] = None, sqlite_path: Optional[Path] = None) -> None:
    """Point the module at a different database and force re-initialization."""
    global DATABASE_URL, SQLITE_PATH, _initialized, _pg_pool
    if database_url is not None:
        DATABASE_URL = database_url
    if sqlite_path is not None:
        SQLITE_PATH = Path(sqlite_path)
    if _pg_pool is not None:
        _pg_pool.closeall()
        _pg_pool = None
    _initialized = False


def _is_postgres() -> bool:
    """Check if we're using Postgres."""
    return DATABASE_URL.startswith("postgres")


def _get_pg_pool():
    """Get or create the Postgres connection pool (lazy singleton)."""
    global _pg_pool
    if _pg_pool is None:
        import psycopg2.pool
        _pg_pool = psycopg2.pool.ThreadedConnectionPool(
            minconn=1,
            maxconn=5,
            dsn=DATABASE_URL,
        )
        logger.info("PostgreSQL connection pool initialized (1-5 connections)")
    return _pg_pool


@contextmanager
def get_connection():
    """Get a database connection (Postgres or SQLite).

    Usage:
        with get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(...)
            conn.commit()
    """
    if _is_postgres():
        pool = _get_pg_pool()
        conn = pool.getconn()
        try:
            yield conn
        finally:
            pool.putconn(conn)
    else:
        conn = sqlite3.connect(str(SQLITE_PATH), check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        try:
            yield conn
        finally:
            conn.close()


def execute(sql: str, params: tuple = (), fetch: str = "none") -> Any:
    """Execute a SQL statement.

    Args:
        sql: SQL statement (use %s placeholders; adapted for SQLite)
        params: Parameters tuple
        fetch: "none", "one", "all"

    Returns:
        None for "none", dict for "one", list[dict] for "all"
    """
    init_db()
    adapted_sql = sql if _is_postgres() else sql.replace("%s", "?")

    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(adapted_sql, params)

        if fetch == "one":
            row = cursor.fetchone()
            if row is None:
                return None
            if _is_postgres():
                columns = [desc[0] for desc in cursor.description]
                return dict(zip(columns, row))
            return dict(row)
        elif fetch == "all":
            rows = cursor.fetchall()
            if _is_postgres():
                columns = [desc[0] for desc in cursor.description]
                return [dict(zip(columns, row)) for row in rows]
            return [dict(row) for row in rows]

        conn.commit()
        return None


def init_db():
    """Create tables if they don't exist."""
    global _initialized
    if _initialized:
        return

    if _is_postgres():
        _init_postgres()
    else:
        SQLITE_PATH.parent.mkdir(parents=True, exist_ok=True)
        _init_sqlite()

    _initialized = True
    backend = "PostgreSQL" if _is_postgres() else f"SQLite ({SQLITE_PATH})"
    logger.info(f"Conversation database initialized: {backend}")


def _init_postgres():
    """Create Postgres tables."""
    ddl = """
    CREATE TABLE IF NOT EXISTS conversation_turns (
        seq SERIAL PRIMARY KEY,
        turn_id VARCHAR(64) NOT NULL UNIQUE,
        user_id VARCHAR(100) NOT NULL,
        role VARCHAR(20) NOT NULL,
        content TEXT NOT NULL,
        created_at VARCHAR(40) NOT NULL
    );

    CREATE INDEX IF NOT EXISTS idx_conversation_turns_user
        ON conversation_turns(user_id, seq);
    """
    with get_connection() as conn:
        cursor = conn.cursor()
        cursor.execute(ddl)
        conn.commit()


def _init_sqlite():
    """Create SQLite tables."""
    ddl = """
    CREATE TABLE IF NOT EXISTS conversation_turns (
        seq INTEGER PRIMARY KEY AUTOINCREMENT,
        turn_id TEXT NOT NULL UNIQUE,
        user_id TEXT NOT NULL,
        role TEXT NOT NULL,
        content TEXT NOT NULL,
        created_at TEXT NOT NULL
    );

    CREATE INDEX IF NOT EXISTS idx_conversation_turns_user
        ON conversation_turns(user_id, seq);
    """
    with get_connection() as conn:
        conn.executescript(ddl)
        conn.commit()
