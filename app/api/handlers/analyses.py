from __future__ import annotations

from app.api.handlers.deps import ApiDeps
from app.api.schemas import AnalysisResponse, HistoryEntryResponse
from app.domain.models import AnalysisResult, CallerIdentity, items_to_json

COMPONENT_ID = "api.analyses"


async def upload_analysis_handler(
    *,
    caller: CallerIdentity | None,
    filename: str | None,
    payload: bytes | None,
    api_deps: ApiDeps,
) -> AnalysisResponse:
    result = await api_deps.analyses.submit_analysis(
        caller=caller,
        file_bytes=payload,
        file_name=filename,
    )
    return AnalysisResponse(
        file_name=result.file_name,
        average_score=result.average_score,
        summary=result.summary,
        items=items_to_json(result.items),
    )


async def list_history_handler(
    *,
    caller: CallerIdentity | None,
    api_deps: ApiDeps,
) -> list[HistoryEntryResponse]:
    history = await api_deps.analyses.list_history(caller=caller)
    return [_history_entry(result) for result in history]


def _history_entry(result: AnalysisResult) -> HistoryEntryResponse:
    if result.analysis_id is None or result.created_at is None:
        raise ValueError("stored analysis is missing id or timestamp")
    return HistoryEntryResponse(
        id=result.analysis_id,
        file_name=result.file_name,
        average_score=result.average_score,
        summary=result.summary,
        items=items_to_json(result.items),
        created_at=result.created_at.isoformat(),
    )
