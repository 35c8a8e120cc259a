from __future__ import annotations

from dataclasses import dataclass

from app.domain.models import ScoredRow


@dataclass(frozen=True)
class CompletionRequest:
    prompt: str
    model: str
    max_output_tokens: int
    temperature: float
    purpose: str


@dataclass(frozen=True)
class CompletionResult:
    text: str
    tokens_input: int
    tokens_output: int
    latency_ms: int


@dataclass(frozen=True)
class SuggestionFailure:
    row_index: int
    error_code: str
    detail: str


@dataclass(frozen=True)
class EnrichmentOutcome:
    summary: str
    items: tuple[ScoredRow, ...]
    failures: tuple[SuggestionFailure, ...] = ()
