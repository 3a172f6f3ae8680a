"""PostgreSQL connection pool for the box catalog."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any

import psycopg2
from psycopg2.pool import ThreadedConnectionPool

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"


class ConnectionPool:
    """Lazily opened pool; nothing connects until the first query."""

    def __init__(self, dsn: str | None, minconn: int = 1, maxconn: int = 10) -> None:
        self._dsn = dsn
        self._minconn = minconn
        self._maxconn = maxconn
        self._pool: ThreadedConnectionPool | None = None
        self._lock = threading.Lock()

    def get_conn(self) -> Any:
        """Get a connection from the pool. Raises if DATABASE_URL is not set or pool unavailable."""
        if not self._dsn:
            raise RuntimeError("DATABASE_URL not set")
        with self._lock:
            if self._pool is None:
                self._pool = ThreadedConnectionPool(minconn=self._minconn, maxconn=self._maxconn, dsn=self._dsn)
        return self._pool.getconn()

    def put_conn(self, conn: Any) -> None:
        """Return a connection to the pool."""
        if conn is not None and self._pool is not None:
            self._pool.putconn(conn)


def apply_schema(dsn: str, schema_path: Path = SCHEMA_PATH) -> list[str]:
    """Run every statement of schema.sql in one transaction. Returns the public tables afterwards."""
    sql_text = schema_path.read_text(encoding="utf-8")
    statements = [s.strip() for s in sql_text.split(";") if s.strip()]
    logger.info(f"Applying {len(statements)} statements from {schema_path.name}")

    conn = psycopg2.connect(dsn)
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt + ";")
        conn.commit()

        cur.execute(
            """
            SELECT table_name
            FROM information_schema.tables
            WHERE table_schema='public'
            ORDER BY table_name;
            """
        )
        tables = [r[0] for r in cur.fetchall()]
        cur.close()
    finally:
        conn.close()
    return tables
