from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

from app.domain.contracts import ANALYSES_COLLECTION
from app.domain.ids import new_analysis_public_id
from app.domain.models import AnalysisResult, StoredAnalysis, items_from_json, items_to_json


@dataclass
class _AnalysisRow:
    id: int
    public_id: str
    owner_id: str
    file_name: str
    average_score: int
    summary: str
    items_json: list[dict[str, object]]
    created_at: datetime


@dataclass
class InMemoryAnalysisRepository:
    """Non-network repository with deterministic behavior for skeleton mode."""

    collection: str = ANALYSES_COLLECTION
    rows: list[_AnalysisRow] = field(default_factory=list)
    inserts: list[str] = field(default_factory=list)
    queries: list[str] = field(default_factory=list)
    next_id: int = 1

    async def insert_analysis(self, *, owner_id: str, result: AnalysisResult) -> StoredAnalysis:
        self.inserts.append(owner_id)
        row = _AnalysisRow(
            id=self.next_id,
            public_id=new_analysis_public_id(),
            owner_id=owner_id,
            file_name=result.file_name,
            average_score=result.average_score,
            summary=result.summary,
            items_json=items_to_json(result.items),
            created_at=self._server_timestamp(owner_id),
        )
        self.next_id += 1
        self.rows.append(row)
        return StoredAnalysis(analysis_id=row.public_id, created_at=row.created_at)

    async def list_analyses_by_owner(self, *, owner_id: str) -> list[AnalysisResult]:
        self.queries.append(owner_id)
        owned = [row for row in self.rows if row.owner_id == owner_id]
        owned.sort(key=lambda row: (row.created_at, row.id), reverse=True)
        return [_to_result(row) for row in owned]

    @property
    def calls_total(self) -> int:
        return len(self.inserts) + len(self.queries)

    def _server_timestamp(self, owner_id: str) -> datetime:
        now = datetime.now(tz=UTC)
        latest = max((row.created_at for row in self.rows if row.owner_id == owner_id), default=None)
        if latest is not None and now < latest:
            return latest
        return now


def _to_result(row: _AnalysisRow) -> AnalysisResult:
    # Rebuilt from the stored JSON so callers never share state with the store.
    return AnalysisResult(
        file_name=row.file_name,
        average_score=row.average_score,
        summary=row.summary,
        items=items_from_json(row.items_json),
        owner_id=row.owner_id,
        created_at=row.created_at,
        analysis_id=row.public_id,
    )
