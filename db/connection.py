"""
db/connection.py
----------------
Manages the PostgreSQL connection pool.
Uses psycopg2's SimpleConnectionPool for efficient connection reuse.

One ConnectionPool is created at start-up and handed to the repositories
that need it; nothing looks it up globally.
"""

from contextlib import contextmanager
from typing import Iterator

import psycopg2
from psycopg2 import extras, pool

from utils.logger import get_logger

logger = get_logger(__name__)


class ConnectionPool:
    """Thin wrapper around a psycopg2 SimpleConnectionPool."""

    def __init__(self, dsn: str, min_conn: int = 1, max_conn: int = 5):
        self.dsn = dsn
        self.min_conn = min_conn
        self.max_conn = max_conn
        self._pool: pool.SimpleConnectionPool | None = None

    def open(self) -> None:
        """
        Open the pool. Safe to call more than once.

        Raises:
            psycopg2.OperationalError: If the database is unreachable.
        """
        if self._pool is not None:
            return
        # uuid.UUID <-> Postgres UUID in both directions.
        extras.register_uuid()
        try:
            self._pool = pool.SimpleConnectionPool(self.min_conn, self.max_conn, self.dsn)
            logger.info("Database connection pool initialized successfully.")
        except psycopg2.OperationalError as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise

    def getconn(self):
        """
        Get a connection from the pool.

        Raises:
            RuntimeError: If the pool has not been opened.
        """
        if self._pool is None:
            raise RuntimeError("Database pool not initialized. Call open() first.")
        return self._pool.getconn()

    def putconn(self, conn) -> None:
        """Return a connection back to the pool."""
        if self._pool is not None:
            self._pool.putconn(conn)

    @contextmanager
    def connection(self) -> Iterator:
        """Borrow a connection for the duration of a `with` block."""
        conn = self.getconn()
        try:
            yield conn
        finally:
            self.putconn(conn)

    def close(self) -> None:
        """Close all connections in the pool."""
        if self._pool is not None:
            self._pool.closeall()
            self._pool = None
            logger.info("Database connection pool closed.")
