"""
Oracle Database Connection Pool

Manages Oracle database connections using oracledb connection pooling.
The Oracle registry store runs every import transaction through this pool.
"""

import os
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import oracledb

from rde_import.exceptions import ConflictError, QueryError, StoreConnectionError

logger = logging.getLogger("rde.database")

# Oracle error codes meaning a concurrent transaction got in the way
# ORA-00054 resource busy, ORA-00060 deadlock, ORA-08177 can't serialize access
CONFLICT_ERROR_CODES = {54, 60, 8177}


def _is_conflict(error: oracledb.Error) -> bool:
    """Check whether an Oracle error signals a concurrent modification."""
    if not error.args:
        return False
    code = getattr(error.args[0], "code", None)
    return code in CONFLICT_ERROR_CODES


class TransactionConnection:
    """
    Wrapper for connection with transaction-friendly execute method.

    Used within pool.transaction() context manager.
    """

    def __init__(self, conn):
        self._conn = conn

    async def execute(self, sql: str, params: Optional[Dict[str, Any]] = None) -> int:
        """
        Execute SQL statement within the transaction.

        Args:
            sql: SQL statement with named parameters
            params: Dictionary of parameter values

        Returns:
            Number of rows affected
        """
        cursor = self._conn.cursor()
        try:
            cursor.execute(sql, params or {})
            return cursor.rowcount
        finally:
            cursor.close()

    async def execute_many(self, sql: str, params_list: List[Dict[str, Any]]) -> int:
        """
        Execute SQL statement once per parameter set within the transaction.

        Returns:
            Total rows affected
        """
        if not params_list:
            return 0
        cursor = self._conn.cursor()
        try:
            cursor.executemany(sql, params_list)
            return cursor.rowcount
        finally:
            cursor.close()

    async def query_one(self, sql: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """
        Execute SELECT query and return first row.

        Args:
            sql: SELECT statement
            params: Dictionary of parameter values

        Returns:
            Row dictionary or None
        """
        cursor = self._conn.cursor()
        try:
            cursor.execute(sql, params or {})
            columns = [col[0] for col in cursor.description]
            row = cursor.fetchone()
        finally:
            cursor.close()
        if row is None:
            return None
        return dict(zip(columns, row))

    async def get_next_sequence(self, sequence_name: str) -> int:
        """
        Get next value from Oracle sequence within transaction.

        Args:
            sequence_name: Name of the sequence

        Returns:
            Next sequence value
        """
        row = await self.query_one(f"SELECT {sequence_name}.NEXTVAL AS VAL FROM DUAL")
        if row is None:
            raise QueryError(f"Failed to get sequence value: {sequence_name}")
        return int(row["VAL"])


class DatabasePool:
    """
    Oracle connection pool manager.

    Provides connection pooling and transaction scoping with automatic
    connection management and error handling.
    """

    def __init__(
        self,
        user: str,
        dsn: str,
        pool_min: int = 2,
        pool_max: int = 10,
        pool_increment: int = 1,
        password: Optional[str] = None
    ):
        """
        Initialize database pool configuration.

        Args:
            user: Oracle username
            dsn: Oracle DSN (e.g., "host:port/service")
            pool_min: Minimum pool connections
            pool_max: Maximum pool connections
            pool_increment: Pool growth increment
            password: Oracle password (falls back to RDE_DB_PASSWORD env var)
        """
        self.user = user
        self.dsn = dsn
        self.pool_min = pool_min
        self.pool_max = pool_max
        self.pool_increment = pool_increment
        self._password = password or os.environ.get("RDE_DB_PASSWORD")
        self._pool: Optional[oracledb.ConnectionPool] = None

    async def initialize(self) -> None:
        """
        Initialize the connection pool.

        Raises:
            StoreConnectionError: If pool creation fails
        """
        if self._pool is not None:
            logger.warning("Pool already initialized")
            return

        if not self._password:
            raise StoreConnectionError(
                "Database password not configured. "
                "Set RDE_DB_PASSWORD environment variable."
            )

        try:
            logger.info(f"Creating Oracle connection pool: {self.user}@{self.dsn}")
            logger.info(f"Pool size: min={self.pool_min}, max={self.pool_max}")

            self._pool = oracledb.create_pool(
                user=self.user,
                password=self._password,
                dsn=self.dsn,
                min=self.pool_min,
                max=self.pool_max,
                increment=self.pool_increment,
                getmode=oracledb.POOL_GETMODE_WAIT,
                homogeneous=True
            )

            logger.info("Database pool initialized successfully")

        except oracledb.Error as e:
            error_msg = f"Failed to create database pool: {e}"
            logger.error(error_msg)
            raise StoreConnectionError(error_msg) from e

    async def close(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            try:
                self._pool.close()
                logger.info("Database pool closed")
            except oracledb.Error as e:
                logger.error(f"Error closing pool: {e}")
            finally:
                self._pool = None

    @asynccontextmanager
    async def transaction(self):
        """
        Acquire a connection with transaction semantics.

        Commits on successful exit, rolls back on exception. Oracle errors
        raised by a concurrent transaction surface as ConflictError, all
        other Oracle errors as QueryError.

        Usage:
            async with pool.transaction() as conn:
                await conn.execute(...)
                # auto-commits on exit, rolls back on exception

        Yields:
            TransactionConnection wrapper with execute method

        Raises:
            StoreConnectionError: If pool not initialized or acquire fails
        """
        if self._pool is None:
            raise StoreConnectionError("Database pool not initialized")

        try:
            conn = self._pool.acquire()
        except oracledb.Error as e:
            logger.error(f"Error acquiring connection: {e}")
            raise StoreConnectionError(f"Failed to acquire connection: {e}") from e

        try:
            yield TransactionConnection(conn)
            conn.commit()
        except oracledb.Error as e:
            conn.rollback()
            if _is_conflict(e):
                logger.warning(f"Transaction conflict: {e}")
                raise ConflictError(f"Transaction conflict: {e}") from e
            logger.error(f"Transaction failed: {e}")
            raise QueryError(f"Transaction failed: {e}") from e
        except BaseException:
            conn.rollback()
            raise
        finally:
            try:
                self._pool.release(conn)
            except oracledb.Error as e:
                logger.error(f"Error releasing connection: {e}")


async def create_pool(config: Dict[str, Any]) -> DatabasePool:
    """
    Create and initialize a database pool from config.

    Args:
        config: Oracle configuration dictionary with keys:
            - user: Oracle username
            - dsn: Oracle DSN
            - pool_min: Minimum connections
            - pool_max: Maximum connections
            - pool_increment: Growth increment

    Returns:
        Initialized DatabasePool instance
    """
    pool = DatabasePool(
        user=config["user"],
        dsn=config["dsn"],
        pool_min=config.get("pool_min", 2),
        pool_max=config.get("pool_max", 10),
        pool_increment=config.get("pool_increment", 1)
    )

    await pool.initialize()
    return pool
