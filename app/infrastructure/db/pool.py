"""
Name: PostgreSQL Connection Pool

Responsibilities:
  - Own the pool lifecycle (open, ping, close)
  - Execute single parameterized statements and return rows as dicts
  - Translate driver failures into the service's DatabaseError family
  - Terminate the process when the pool can no longer reconnect

Collaborators:
  - psycopg_pool: Connection pooling
  - psycopg: Driver, dict_row factory, typed errors
  - config: Pool bounds, timeouts, TLS policy

Constraints:
  - One Database per process, built by the container and passed explicitly
  - Must open before use; close() waits for in-flight work, then closes
  - Autocommit: every query is its own round trip, no transactions

Notes:
  - Production requires verified TLS (sslmode=verify-full)
  - reconnect_failed is the only background failure psycopg_pool surfaces;
    a pool that cannot reconnect is not trusted and the process exits
"""

import os
import threading
from typing import Any, Sequence

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool, PoolClosed, PoolTimeout

from ...config import Settings
from ...exceptions import DatabaseError
from ...logger import logger
from .errors import (
    DatabaseConnectionError,
    DatabasePoolError,
    PoolNotOpenError,
    UniqueViolationError,
)

# R: Exit status used when the pool is poisoned
FATAL_EXIT_CODE = 1


def _connection_kwargs(settings: Settings) -> dict[str, Any]:
    """R: Per-connection options forwarded to psycopg.connect()."""
    return {
        "autocommit": True,
        "row_factory": dict_row,
        "sslmode": "verify-full" if settings.is_production() else "prefer",
    }


def _on_reconnect_failed(pool: ConnectionPool) -> None:
    """
    R: Called by psycopg_pool when background reconnection gives up.

    No graceful drain: in-flight requests are abandoned.
    """
    logger.critical(
        "Connection pool failed to reconnect, terminating process",
        extra={"pool": pool.name},
    )
    os._exit(FATAL_EXIT_CODE)


class Database:
    """
    R: Thin wrapper over psycopg_pool.ConnectionPool.

    Attributes:
        settings: Source of pool bounds and timeouts
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._lock = threading.Lock()
        self._opened = False
        self._pool = ConnectionPool(
            conninfo=settings.database_url,
            kwargs=_connection_kwargs(settings),
            min_size=settings.db_pool_min_size,
            max_size=settings.db_pool_max_size,
            max_idle=settings.db_pool_max_idle_seconds,
            timeout=settings.db_pool_timeout_seconds,
            reconnect_timeout=settings.db_pool_reconnect_timeout_seconds,
            reconnect_failed=_on_reconnect_failed,
            name="employees",
            open=False,
        )

    @property
    def is_open(self) -> bool:
        return self._opened

    def open(self) -> None:
        """
        R: Open the pool and wait until min_size connections are ready.

        Raises:
            DatabasePoolError: If already open
            DatabaseConnectionError: If the database is unreachable in time
        """
        with self._lock:
            if self._opened:
                raise DatabasePoolError("Connection pool already open")

            logger.info(
                "Opening connection pool",
                extra={
                    "min_size": self.settings.db_pool_min_size,
                    "max_size": self.settings.db_pool_max_size,
                },
            )
            try:
                self._pool.open(wait=True, timeout=self.settings.db_pool_timeout_seconds)
            except PoolTimeout as exc:
                self._pool.close(timeout=0)
                raise DatabaseConnectionError(
                    f"Database unreachable: {exc}"
                ) from exc
            self._opened = True
            logger.info("Connection pool opened")

    def ping(self) -> bool:
        """R: Run a trivial query; raises DatabaseError when unreachable."""
        rows = self.query("SELECT 1 AS ok")
        return bool(rows) and rows[0]["ok"] == 1

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """
        R: Execute one parameterized statement on a pooled connection.

        Args:
            sql: Statement with %s placeholders
            params: Positional parameters

        Returns:
            Rows as dicts (empty list for statements without a result set)

        Raises:
            PoolNotOpenError: Pool not opened (or already closed)
            DatabaseConnectionError: No connection available within the timeout
            UniqueViolationError: UNIQUE constraint violated
            DatabaseError: Any other driver failure
        """
        if not self._opened:
            raise PoolNotOpenError("Connection pool is not open")

        try:
            with self._pool.connection() as conn:
                cur = conn.execute(sql, tuple(params))
                if cur.description is None:
                    return []
                return cur.fetchall()
        except (PoolTimeout, PoolClosed) as exc:
            raise DatabaseConnectionError(f"Connection unavailable: {exc}") from exc
        except psycopg.errors.UniqueViolation as exc:
            raise UniqueViolationError(f"Unique constraint violated: {exc}") from exc
        except psycopg.Error as exc:
            raise DatabaseError(f"Query failed: {exc}") from exc

    def stats(self) -> dict[str, int]:
        """R: Pool counters for the health endpoint."""
        stats = self._pool.get_stats()
        return {
            "pool_size": stats.get("pool_size", 0),
            "pool_available": stats.get("pool_available", 0),
            "requests_waiting": stats.get("requests_waiting", 0),
        }

    def close(self) -> None:
        """
        R: Stop new checkouts, wait for in-flight queries, then close.

        Safe to call when the pool never opened.
        """
        with self._lock:
            if not self._opened:
                return
            logger.info("Closing connection pool")
            try:
                self._pool.close(timeout=self.settings.db_pool_close_timeout_seconds)
            finally:
                self._opened = False
            logger.info("Connection pool closed")
