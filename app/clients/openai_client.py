from __future__ import annotations

from dataclasses import dataclass, field
import time
from typing import Any

import openai

from app.domain.dto import CompletionRequest, CompletionResult
from app.domain.errors import LLMProviderError

# Transport-level failures worth another attempt; request/auth errors are terminal.
RECOVERABLE_OPENAI_ERRORS: tuple[type[Exception], ...] = (
    openai.APITimeoutError,
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)


@dataclass
class OpenAILLMClient:
    """Chat-completions client for OpenAI-compatible endpoints.

    Retries are owned by the enrichment orchestrator, so the SDK's own retry
    loop is disabled.
    """

    api_key: str
    base_url: str | None = None
    timeout_seconds: float = 20.0
    _client: Any = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._client = openai.AsyncOpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            timeout=self.timeout_seconds,
            max_retries=0,
        )

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        started = time.monotonic()
        try:
            response = await self._client.chat.completions.create(
                model=request.model,
                messages=[{"role": "user", "content": request.prompt}],
                max_tokens=request.max_output_tokens,
                temperature=request.temperature,
            )
        except openai.OpenAIError as exc:
            raise LLMProviderError(
                f"{request.purpose} completion failed: {type(exc).__name__}",
                recoverable=isinstance(exc, RECOVERABLE_OPENAI_ERRORS),
            ) from exc

        if not response.choices:
            raise LLMProviderError(f"{request.purpose} completion returned no choices", recoverable=False)
        usage = response.usage
        return CompletionResult(
            text=(response.choices[0].message.content or "").strip(),
            tokens_input=usage.prompt_tokens if usage is not None else 0,
            tokens_output=usage.completion_tokens if usage is not None else 0,
            latency_ms=int((time.monotonic() - started) * 1000),
        )
