"""Append-only PostgreSQL store of relayed submissions."""

from __future__ import annotations

import json
from datetime import datetime, timezone

from psycopg import AsyncConnection
from psycopg.rows import dict_row

CREATE_TABLE_SQL = (
    "CREATE TABLE IF NOT EXISTS form_submissions ("
    "  id BIGSERIAL PRIMARY KEY,"
    "  form TEXT NOT NULL,"
    "  payload JSONB NOT NULL,"
    "  created_at TIMESTAMPTZ NOT NULL"
    ")"
)


class SubmissionRepository:
    def __init__(self, connection: AsyncConnection) -> None:
        self._connection = connection

    @property
    def connection(self) -> AsyncConnection:
        return self._connection

    async def ensure_schema(self) -> None:
        async with self.connection.cursor() as cur:
            await cur.execute(CREATE_TABLE_SQL)
        await self.connection.commit()

    async def record(
        self,
        form: str,
        payload: dict[str, str],
        created_at: datetime | None = None,
    ) -> int:
        """Insert one submission row, creating the table on first use."""
        await self.ensure_schema()
        query = (
            "INSERT INTO form_submissions (form, payload, created_at) "
            "VALUES (%(form)s, %(payload)s, %(created_at)s) RETURNING id"
        )
        async with self.connection.cursor(row_factory=dict_row) as cur:
            await cur.execute(
                query,
                {
                    "form": form,
                    "payload": json.dumps(payload, ensure_ascii=False),
                    "created_at": created_at or datetime.now(timezone.utc),
                },
            )
            record = await cur.fetchone()
        await self.connection.commit()
        return int(record["id"])  # type: ignore[index]

