from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
import logging

from app.domain.contracts import LLMClient
from app.domain.dto import CompletionRequest, CompletionResult, EnrichmentOutcome, SuggestionFailure
from app.domain.error_taxonomy import classify_error, resolve_stage_error
from app.domain.errors import EnrichmentError, LLMProviderError
from app.domain.models import ScoredRow
from app.domain.prompts import EnrichmentPromptSpec, PromptConfig, alternative_prompt, summary_prompt

COMPONENT_ID = "domain.enrich"
logger = logging.getLogger("analysis")


@dataclass(frozen=True)
class EnrichmentSettings:
    low_score_threshold: int = 40
    max_concurrency: int = 5
    timeout_seconds: float = 20.0
    max_retries: int = 1
    retry_backoff_ms: int = 250
    # False degrades a failed summary call to an empty summary.
    summary_required: bool = True


def is_low_scoring(item: ScoredRow, *, threshold: int) -> bool:
    return item.green_score < threshold


@dataclass
class EnrichmentOrchestrator:
    """Summary plus per-item alternatives from the text-completion provider.

    Alternatives fan out through a bounded pool. Each low-scoring row settles
    on its own: a failed request leaves that row without a suggestion and
    never cancels siblings or touches the summary.
    """

    llm: LLMClient
    prompt_spec: EnrichmentPromptSpec
    settings: EnrichmentSettings = field(default_factory=EnrichmentSettings)

    async def enrich(self, items: Sequence[ScoredRow]) -> EnrichmentOutcome:
        summary = await self._summarize(items)

        candidates = [
            index
            for index, item in enumerate(items)
            if is_low_scoring(item, threshold=self.settings.low_score_threshold) and item.product
        ]
        semaphore = asyncio.Semaphore(max(self.settings.max_concurrency, 1))
        outcomes = await asyncio.gather(
            *(self._suggest(items[index], semaphore=semaphore) for index in candidates),
            return_exceptions=True,
        )

        updated = list(items)
        failures: list[SuggestionFailure] = []
        for index, outcome in zip(candidates, outcomes):
            if isinstance(outcome, str):
                updated[index] = items[index].with_suggestion(outcome)
                continue
            failures.append(_failure_for(index, outcome))

        if failures:
            logger.warning(
                "alternative suggestions failed for some rows",
                extra={"stage": "enrich", "failed_rows": [item.row_index for item in failures]},
            )
        return EnrichmentOutcome(summary=summary, items=tuple(updated), failures=tuple(failures))

    async def _summarize(self, items: Sequence[ScoredRow]) -> str:
        if not items:
            return ""
        products = [item.product or "" for item in items]
        request = self._request(
            prompt=summary_prompt(self.prompt_spec, products=products),
            config=self.prompt_spec.summary,
            purpose="summary",
        )
        try:
            result = await self._complete(request, retries=0)
        except LLMProviderError as exc:
            if self.settings.summary_required:
                raise EnrichmentError("summary completion failed", stage="enrich") from exc
            logger.warning(
                "summary completion failed, continuing without summary",
                extra={"stage": "enrich", "error_code": exc.code},
            )
            return ""
        return result.text.strip()

    async def _suggest(self, item: ScoredRow, *, semaphore: asyncio.Semaphore) -> str:
        request = self._request(
            prompt=alternative_prompt(self.prompt_spec, product=item.product or ""),
            config=self.prompt_spec.alternative,
            purpose="alternative",
        )
        async with semaphore:
            result = await self._complete(request, retries=self.settings.max_retries)
        suggestion = result.text.strip()
        if not suggestion:
            raise LLMProviderError("empty alternative completion", recoverable=False)
        return suggestion

    async def _complete(self, request: CompletionRequest, *, retries: int) -> CompletionResult:
        attempt = 0
        while True:
            try:
                return await asyncio.wait_for(self.llm.complete(request), timeout=self.settings.timeout_seconds)
            except TimeoutError:
                error = LLMProviderError(
                    f"{request.purpose} completion timed out after {self.settings.timeout_seconds}s"
                )
            except LLMProviderError as exc:
                error = exc

            if not error.recoverable or attempt >= retries:
                raise error
            attempt += 1
            await asyncio.sleep(self.settings.retry_backoff_ms * (2 ** (attempt - 1)) / 1000)

    def _request(self, *, prompt: str, config: PromptConfig, purpose: str) -> CompletionRequest:
        return CompletionRequest(
            prompt=prompt,
            model=self.prompt_spec.model,
            max_output_tokens=config.max_output_tokens,
            temperature=self.prompt_spec.temperature,
            purpose=purpose,
        )


def _failure_for(index: int, exc: BaseException) -> SuggestionFailure:
    code = exc.code if isinstance(exc, LLMProviderError) else "internal_error"
    error_code = resolve_stage_error(stage="enrich", code=code)
    return SuggestionFailure(
        row_index=index,
        error_code=error_code,
        detail=f"{classify_error(error_code)}: {exc}",
    )
