"""PostgreSQL adapter — async psycopg, labels via SQL comments + application_name."""

from __future__ import annotations

import logging
import time

import psycopg
from psycopg.conninfo import make_conninfo

from grantwatch.adapters._base import AdapterError, ConnectionConfig, ExecutionResult

logger = logging.getLogger(__name__)

APPLICATION_NAME = "grantwatch"


def build_conninfo(config: ConnectionConfig) -> str:
    """Turn a ConnectionConfig into a libpq connection string."""
    if config.dsn:
        return make_conninfo(config.dsn)
    return make_conninfo(
        host=config.host,
        port=config.port,
        user=config.user,
        password=config.password,
        dbname=config.dbname,
        sslmode=config.sslmode,
    )


class PostgresAdapter:
    """PostgreSQL adapter using psycopg (async).

    Holds one long-lived autocommit connection. If the connection is found
    closed or broken before a query, it is reopened with the parameters from
    the last successful ``connect``.
    """

    def __init__(self) -> None:
        self._conn: psycopg.AsyncConnection | None = None
        self._config: ConnectionConfig | None = None

    async def connect(self, config: ConnectionConfig) -> None:
        try:
            self._conn = await psycopg.AsyncConnection.connect(
                build_conninfo(config), autocommit=True, application_name=APPLICATION_NAME
            )
        except Exception as e:
            raise AdapterError(f"PostgreSQL connection failed: {e}") from e
        self._config = config

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None

    def _ensure_conn(self) -> psycopg.AsyncConnection:
        if self._conn is None:
            raise AdapterError("Not connected. Call connect() first.")
        return self._conn

    async def _live_conn(self) -> psycopg.AsyncConnection:
        conn = self._ensure_conn()
        if (conn.closed or conn.broken) and self._config is not None:
            logger.warning("connection to %s lost, reconnecting", self._config.describe())
            await conn.close()
            await self.connect(self._config)
            conn = self._ensure_conn()
        return conn

    async def ping(self) -> None:
        """Round-trip a trivial query to prove the server is reachable."""
        conn = self._ensure_conn()
        try:
            async with conn.cursor() as cur:
                await cur.execute("SELECT 1")
                await cur.fetchone()
        except Exception as e:
            raise AdapterError(f"PostgreSQL ping failed: {e}") from e

    async def execute(
        self,
        sql: str,
        params: tuple[object, ...] | None = None,
        *,
        labels: dict[str, str] | None = None,
    ) -> ExecutionResult:
        conn = await self._live_conn()

        # Label via SQL comment prefix.
        if labels:
            label_str = ", ".join(f"{k}={v}" for k, v in labels.items())
            sql = f"/* {APPLICATION_NAME}: {label_str} */ {sql}"

        t0 = time.monotonic()
        try:
            async with conn.cursor() as cur:
                await cur.execute(sql, params)
                columns = [desc.name for desc in cur.description] if cur.description else []
                rows_raw = await cur.fetchall() if cur.description else []
        except Exception as e:
            raise AdapterError(f"PostgreSQL execution failed: {e}") from e
        duration_ms = (time.monotonic() - t0) * 1000

        rows = [dict(zip(columns, row, strict=True)) for row in rows_raw]
        logger.debug("query returned %d rows in %.1fms", len(rows), duration_ms)

        return ExecutionResult(
            columns=columns,
            rows=rows,
            row_count=len(rows),
            duration_ms=duration_ms,
        )
