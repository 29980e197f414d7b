"""
SQL execution layer for the administrative Postgres connection.

The shared provisioner talks to the cluster through the small SqlExecutor
protocol below. Production wires in AsyncpgExecutor on top of an asyncpg
pool; tests substitute an in-memory fake. Driver errors are converted into
SqlExecutionError carrying the SQLSTATE so callers can classify them without
importing asyncpg.
"""

import asyncio
import logging
from typing import Any, Optional, Protocol

import asyncpg

logger = logging.getLogger(__name__)


class SqlExecutionError(Exception):
    """
    A statement failed on the SQL server or could not be sent.

    Attributes:
        message: Driver error message
        sqlstate: Five-character SQLSTATE code, if the server reported one
    """

    def __init__(self, message: str, sqlstate: Optional[str] = None):
        self.message = message
        self.sqlstate = sqlstate
        super().__init__(message)


class SqlExecutor(Protocol):
    """Subset of SQL operations used by the shared provisioner."""

    async def fetch_optional(self, query: str, *args: Any) -> Optional[Any]:
        """Run a query with bound parameters and return the first row or None."""
        ...

    async def execute(self, query: str, *args: Any) -> str:
        """Run a statement and return the server's status string."""
        ...


class AsyncpgExecutor:
    """SqlExecutor backed by an asyncpg connection pool.

    Each call acquires a pooled connection for the duration of a single
    statement. Statements run outside explicit transactions, so each one
    commits on its own (CREATE DATABASE cannot run inside a transaction
    block anyway).
    """

    def __init__(self, pool: asyncpg.Pool, command_timeout: Optional[float] = None):
        """
        Initialize the executor.

        Args:
            pool: Connected asyncpg pool for the administrative role
            command_timeout: Optional per-statement timeout in seconds
        """
        self.pool = pool
        self.command_timeout = command_timeout

    async def fetch_optional(self, query: str, *args: Any) -> Optional[Any]:
        try:
            async with self.pool.acquire() as conn:
                return await conn.fetchrow(query, *args, timeout=self.command_timeout)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError, OSError) as e:
            raise SqlExecutionError(str(e) or type(e).__name__, sqlstate=getattr(e, "sqlstate", None)) from e

    async def execute(self, query: str, *args: Any) -> str:
        try:
            async with self.pool.acquire() as conn:
                return await conn.execute(query, *args, timeout=self.command_timeout)
        except (asyncpg.PostgresError, asyncpg.InterfaceError, asyncio.TimeoutError, OSError) as e:
            raise SqlExecutionError(str(e) or type(e).__name__, sqlstate=getattr(e, "sqlstate", None)) from e

    async def close(self) -> None:
        """Close the underlying pool."""
        await self.pool.close()
        logger.info("Closed administrative connection pool")
