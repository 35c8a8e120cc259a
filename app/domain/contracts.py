from __future__ import annotations

from typing import Protocol, runtime_checkable

from app.domain.dto import CompletionRequest, CompletionResult
from app.domain.models import AnalysisResult, CallerIdentity, StoredAnalysis

ANALYSES_COLLECTION = "analyses"


@runtime_checkable
class AnalysisRepository(Protocol):
    """Append-only store of analysis results scoped by owner.

    The store assigns both the id and the timestamp used to order history;
    callers never supply wall-clock time.
    """

    async def insert_analysis(self, *, owner_id: str, result: AnalysisResult) -> StoredAnalysis: ...

    async def list_analyses_by_owner(self, *, owner_id: str) -> list[AnalysisResult]: ...


@runtime_checkable
class LLMClient(Protocol):
    """Text completion with a per-call output budget.

    Provider failures (quota, timeout, invalid request) raise LLMProviderError.
    """

    async def complete(self, request: CompletionRequest) -> CompletionResult: ...


@runtime_checkable
class IdentityVerifier(Protocol):
    """Returns the verified caller for a bearer token, or None when verification fails."""

    async def verify(self, token: str) -> CallerIdentity | None: ...
