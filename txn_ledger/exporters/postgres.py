"""PostgreSQL exporter for protocol audit events."""

from __future__ import annotations

from typing import Optional

import asyncpg

from .base import EventExporter, ProtocolEvent

INSERT_SQL = """
INSERT INTO protocol_events (
    participant,
    role,
    kind,
    state,
    token,
    detail,
    created_at
)
VALUES ($1, $2, $3, $4, $5, $6, $7)
"""


class PostgresExporter(EventExporter):
    """Exporter that persists protocol events into PostgreSQL using ``asyncpg``."""

    def __init__(
        self,
        dsn: Optional[str] = None,
        *,
        pool: Optional[asyncpg.Pool] = None,
        min_size: int = 1,
        max_size: int = 4,
    ) -> None:
        self._dsn = dsn
        self._pool = pool
        self._min_size = min_size
        self._max_size = max_size

    async def connect(self) -> None:
        """Initialize a connection pool if one was not supplied."""
        if self._pool is not None:
            return
        if not self._dsn:
            raise ValueError("Either `dsn` or `pool` must be provided for PostgresExporter.")

        self._pool = await asyncpg.create_pool(
            dsn=self._dsn,
            min_size=self._min_size,
            max_size=self._max_size,
        )

    async def export(self, event: ProtocolEvent) -> None:
        if self._pool is None:
            await self.connect()

        assert self._pool is not None
        payload = event.to_dict()

        async with self._pool.acquire() as conn:
            await conn.execute(
                INSERT_SQL,
                payload["participant"],
                payload["role"],
                payload["kind"],
                payload["state"],
                payload["token"],
                payload["detail"],
                payload["created_at"],
            )

    async def close(self) -> None:
        """Close the underlying pool if it exists."""
        if self._pool is not None:
            await self._pool.close()
            self._pool = None
