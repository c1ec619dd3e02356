"""Database access layer using psycopg2.

Provides:
- get_conn(): Get a database connection from DATABASE_URL
- txn(): Context manager for short, read-committed transactions
- fetchone/fetchall: Query helpers
- DataAccessError: psycopg2 failures, re-raised for the API layer
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Any, Iterator, Sequence
from urllib.parse import urlparse

import psycopg2
from psycopg2.extensions import connection as PgConnection, cursor as PgCursor

from staydesk.infra.settings import get_settings

_KEYWORD_PASSWORD_RE = re.compile(r"(^|\s)password\s*=")


class DataAccessError(Exception):
    """Underlying database failure (connectivity, query error).

    Not retried here; the API maps it to a 503.
    """


def _dsn_has_password(dsn: str) -> bool:
    if "://" in dsn:
        return urlparse(dsn).password is not None
    return _KEYWORD_PASSWORD_RE.search(dsn) is not None


def get_conn() -> PgConnection:
    """Get a new database connection from DATABASE_URL.

    DB_PASSWORD is passed separately when the DSN carries no password
    (secret-manager style deployments).

    Returns:
        psycopg2 connection object.

    Raises:
        RuntimeError: If DATABASE_URL is not set.
        DataAccessError: On connection failure.
    """
    settings = get_settings()
    dsn = settings.database_url
    if not dsn:
        raise RuntimeError("DATABASE_URL environment variable not set")

    try:
        if settings.db_password and not _dsn_has_password(dsn):
            return psycopg2.connect(dsn, password=settings.db_password)
        return psycopg2.connect(dsn)
    except psycopg2.Error as exc:
        raise DataAccessError("database connection failed") from exc


@contextmanager
def txn(conn: PgConnection | None = None) -> Iterator[PgCursor]:
    """Context manager for a short, safe transaction.

    If conn is None, creates a new connection that is closed on exit.
    Commits on successful exit, rolls back on exception. psycopg2 errors
    surface as DataAccessError; other exceptions propagate unchanged.

    Example:
        with txn() as cur:
            cur.execute("SELECT count(*) FROM rooms WHERE room_type_id = %s", (7,))
    """
    owns_conn = conn is None
    if owns_conn:
        conn = get_conn()

    try:
        with conn.cursor() as cur:
            yield cur
        conn.commit()
    except psycopg2.Error as exc:
        conn.rollback()
        raise DataAccessError(str(exc).strip() or "database error") from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        if owns_conn:
            conn.close()


def fetchone(
    cur: PgCursor,
    query: str,
    params: Sequence[Any] | None = None,
) -> tuple[Any, ...] | None:
    """Execute query and fetch one row (None if no results)."""
    cur.execute(query, params)
    return cur.fetchone()


def fetchall(
    cur: PgCursor,
    query: str,
    params: Sequence[Any] | None = None,
) -> list[tuple[Any, ...]]:
    """Execute query and fetch all rows."""
    cur.execute(query, params)
    return cur.fetchall()
