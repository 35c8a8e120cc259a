from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any

import asyncpg

from app.domain.errors import StorageError
from app.domain.ids import new_analysis_public_id
from app.domain.models import AnalysisResult, StoredAnalysis, items_from_json, items_to_json
from app.repositories.sql_loader import load_sql

SQL_INSERT_ANALYSIS = load_sql("insert_analysis.sql")
SQL_LIST_ANALYSES_BY_OWNER = load_sql("list_analyses_by_owner.sql")
MAX_PUBLIC_ID_ATTEMPTS = 5


@dataclass
class AsyncpgPoolManager:
    dsn: str
    pool: Any | None = None

    async def startup(self) -> None:
        async def _init_connection(conn: Any) -> None:
            await conn.set_type_codec(
                "jsonb",
                encoder=json.dumps,
                decoder=json.loads,
                schema="pg_catalog",
            )

        self.pool = await asyncpg.create_pool(
            dsn=self.dsn,
            min_size=1,
            max_size=5,
            init=_init_connection,
        )

    async def shutdown(self) -> None:
        if self.pool is None:
            return
        await self.pool.close()
        self.pool = None


@dataclass
class PostgresAnalysisRepository:
    """Analyses table; created_at comes from clock_timestamp() on the server."""

    pool_manager: AsyncpgPoolManager

    def _pool(self) -> Any:
        if self.pool_manager.pool is None:
            raise RuntimeError("postgres pool is not initialized")
        return self.pool_manager.pool

    async def insert_analysis(self, *, owner_id: str, result: AnalysisResult) -> StoredAnalysis:
        pool = self._pool()
        items_json = items_to_json(result.items)
        async with pool.acquire() as conn:
            for _ in range(MAX_PUBLIC_ID_ATTEMPTS):
                try:
                    row = await conn.fetchrow(
                        SQL_INSERT_ANALYSIS,
                        new_analysis_public_id(),
                        owner_id,
                        result.file_name,
                        result.average_score,
                        result.summary,
                        items_json,
                    )
                    if row is None:
                        raise StorageError("failed to insert analysis", stage="persist")
                    return StoredAnalysis(analysis_id=row["public_id"], created_at=row["created_at"])
                except asyncpg.UniqueViolationError:
                    continue
        raise StorageError("failed to allocate unique analysis public id", stage="persist")

    async def list_analyses_by_owner(self, *, owner_id: str) -> list[AnalysisResult]:
        pool = self._pool()
        async with pool.acquire() as conn:
            rows = await conn.fetch(SQL_LIST_ANALYSES_BY_OWNER, owner_id)
        return [
            AnalysisResult(
                file_name=row["file_name"],
                average_score=row["average_score"],
                summary=row["summary"],
                items=items_from_json(row["items_json"]),
                owner_id=row["owner_id"],
                created_at=row["created_at"],
                analysis_id=row["public_id"],
            )
            for row in rows
        ]
