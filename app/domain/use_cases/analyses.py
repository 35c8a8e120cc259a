from __future__ import annotations

from dataclasses import dataclass
import logging

from app.domain.contracts import AnalysisRepository
from app.domain.error_taxonomy import resolve_stage_error
from app.domain.errors import (
    BadRequestError,
    CsvParseError,
    DomainError,
    EnrichmentError,
    StorageError,
    UnauthorizedError,
    UploadTooLargeError,
)
from app.domain.lifecycle import UploadLifecycle, UploadState
from app.domain.models import DEFAULT_PRODUCT_ALIASES, AnalysisResult, CallerIdentity, ScoredRow
from app.domain.normalization import iter_csv_rows
from app.domain.scoring import green_score
from app.domain.use_cases.aggregate import aggregate_analysis
from app.domain.use_cases.enrich import EnrichmentOrchestrator

COMPONENT_ID = "domain.analyses"
DEFAULT_FILE_NAME = "upload.csv"
logger = logging.getLogger("analysis")

_STAGE_ERRORS: dict[str, type[DomainError]] = {
    "parse": CsvParseError,
    "enrich": EnrichmentError,
    "persist": StorageError,
}


@dataclass
class AnalysisService:
    """Authorizes callers, runs the scoring pipeline and persists results per owner."""

    repository: AnalysisRepository
    enrichment: EnrichmentOrchestrator
    product_aliases: tuple[str, ...] = DEFAULT_PRODUCT_ALIASES
    max_upload_bytes: int = 2 * 1024 * 1024

    async def submit_analysis(
        self,
        *,
        caller: CallerIdentity | None,
        file_bytes: bytes | None,
        file_name: str | None,
    ) -> AnalysisResult:
        lifecycle = UploadLifecycle()
        owner_id = _require_subject(caller, lifecycle=lifecycle)
        lifecycle.advance(UploadState.AUTHENTICATED)

        if not file_bytes:
            lifecycle.fail()
            raise BadRequestError("no file uploaded", stage="validate")
        if len(file_bytes) > self.max_upload_bytes:
            lifecycle.fail()
            raise UploadTooLargeError(
                f"file exceeds upload limit of {self.max_upload_bytes} bytes",
                stage="validate",
            )

        try:
            rows = list(iter_csv_rows(file_bytes, product_aliases=self.product_aliases))
            lifecycle.advance(UploadState.PARSED)

            scored = [ScoredRow(row=row, green_score=green_score(row)) for row in rows]
            lifecycle.advance(UploadState.SCORED)

            outcome = await self.enrichment.enrich(scored)
            lifecycle.advance(UploadState.ENRICHED)

            result = aggregate_analysis(
                file_name=file_name or DEFAULT_FILE_NAME,
                items=outcome.items,
                summary=outcome.summary,
            )
            lifecycle.advance(UploadState.AGGREGATED)

            stored = await self.repository.insert_analysis(owner_id=owner_id, result=result)
            lifecycle.advance(UploadState.PERSISTED)
        except Exception as exc:
            error = _stage_failure(lifecycle, exc, owner_id=owner_id)
            if error is exc:
                raise
            raise error from exc

        logger.info(
            "analysis saved",
            extra={
                "stage": "persist",
                "owner_id": owner_id,
                "analysis_id": stored.analysis_id,
                "rows": len(result.items),
            },
        )
        lifecycle.advance(UploadState.RESPONDED)
        return result.stored_as(
            analysis_id=stored.analysis_id,
            owner_id=owner_id,
            created_at=stored.created_at,
        )

    async def list_history(self, *, caller: CallerIdentity | None) -> list[AnalysisResult]:
        owner_id = _require_subject(caller)
        try:
            return await self.repository.list_analyses_by_owner(owner_id=owner_id)
        except Exception as exc:
            logger.error(
                "analysis stage failed",
                exc_info=True,
                extra={"stage": "history", "owner_id": owner_id, "error_code": "storage_failed"},
            )
            raise StorageError("history query failed", stage="history") from exc


def _require_subject(caller: CallerIdentity | None, *, lifecycle: UploadLifecycle | None = None) -> str:
    if caller is None or not caller.subject:
        if lifecycle is not None:
            lifecycle.fail()
        raise UnauthorizedError("verified caller identity is required", stage="authenticate")
    return caller.subject


def _stage_failure(lifecycle: UploadLifecycle, exc: Exception, *, owner_id: str) -> DomainError:
    stage = lifecycle.fail()
    if isinstance(exc, DomainError):
        error = exc
        if error.stage is None:
            error.stage = stage
    else:
        error_type = _STAGE_ERRORS.get(stage, DomainError)
        error = error_type(f"{stage} stage failed", stage=stage)

    logger.error(
        "analysis stage failed",
        exc_info=True,
        extra={
            "stage": stage,
            "owner_id": owner_id,
            "error_code": resolve_stage_error(stage=stage, code=error.code),
        },
    )
    return error
