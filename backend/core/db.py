import logging
from typing import Any

import psycopg
import psycopg.rows
import psycopg_pool
from psycopg import sql

from core.config import DatabaseConfig
from core.errors import ConnectionFailure, ExecutionFailure


logger = logging.getLogger(__name__)


async def init_pool(database: DatabaseConfig) -> psycopg_pool.AsyncConnectionPool:
    """Create and open the application connection pool.

    The pool is opened without waiting for the minimum connections, so an
    unreachable database does not stop the process from starting.
    """
    pool = psycopg_pool.AsyncConnectionPool(
        conninfo=database.conninfo,
        min_size=database.pool_min_size,
        max_size=database.pool_max_size,
        timeout=float(database.connect_timeout),
        open=False,
    )
    await pool.open(wait=False)
    return pool


async def close_pool(pool: psycopg_pool.AsyncConnectionPool | None) -> None:
    """Close the connection pool."""
    if pool is not None:
        await pool.close()


def sql_call_procedure(procedure: str) -> sql.Composed:
    """Call a zero-argument set-returning function, optionally schema-qualified."""
    return sql.SQL("SELECT * FROM {}()").format(sql.Identifier(*procedure.split(".")))


async def release(
    pool: psycopg_pool.AsyncConnectionPool, conn: psycopg.AsyncConnection
) -> None:
    """Return a connection to the pool. Failures are logged, never raised."""
    try:
        await pool.putconn(conn)
    except Exception:
        logger.exception("Failed to release database connection")


async def call_procedure(
    pool: psycopg_pool.AsyncConnectionPool | None,
    procedure: str,
    timeout: float | None = None,
) -> list[dict[str, Any]]:
    """Execute a stored procedure with no parameters and return its rowset.

    Args:
        pool: Application connection pool
        procedure: Procedure name, e.g. "GetSampleData" or "sales.GetSampleData"
        timeout: Seconds to wait for a connection (pool default when None)

    Returns:
        Rows as dicts keyed by column name, in the order the database
        returned them

    Raises:
        ConnectionFailure: If no connection could be acquired
        ExecutionFailure: If the procedure call failed
    """
    if pool is None:
        raise ConnectionFailure("Database pool not initialized")

    try:
        conn = await pool.getconn(timeout=timeout)
    except psycopg.Error as e:
        raise ConnectionFailure(f"Could not acquire connection: {e}") from e

    try:
        # commits on success, rolls back on error; the connection goes back idle
        async with conn.transaction():
            async with conn.cursor(row_factory=psycopg.rows.dict_row) as cur:
                await cur.execute(sql_call_procedure(procedure))
                rows = await cur.fetchall()
    except psycopg.Error as e:
        raise ExecutionFailure(f"Procedure {procedure} failed: {e}") from e
    finally:
        await release(pool, conn)

    return [dict(row) for row in rows]


async def check_connection(pool: psycopg_pool.AsyncConnectionPool | None) -> bool:
    """Return True when a pooled connection answers a trivial query."""
    if pool is None:
        return False
    try:
        async with pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute("SELECT 1")
                return True
    except psycopg.Error:
        logger.warning("Database health probe failed", exc_info=True)
        return False
