from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import re

from app.domain.dto import CompletionRequest, CompletionResult
from app.domain.errors import LLMProviderError
from app.domain.models import CallerIdentity

QUOTED_PRODUCT_RE = re.compile(r'"([^"]+)"')


@dataclass
class StubLLMClient:
    calls: list[CompletionRequest] = field(default_factory=list)
    # Requests whose purpose is listed, or whose prompt contains a marker, fail.
    fail_purposes: set[str] = field(default_factory=set)
    fail_markers: set[str] = field(default_factory=set)
    delay_seconds: float = 0.0
    in_flight: int = 0
    max_in_flight: int = 0

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        self.calls.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay_seconds:
                await asyncio.sleep(self.delay_seconds)
            if request.purpose in self.fail_purposes or any(
                marker in request.prompt for marker in self.fail_markers
            ):
                raise LLMProviderError(f"stub provider rejected {request.purpose} request", recoverable=False)
            text = self._text_for(request)
        finally:
            self.in_flight -= 1
        return CompletionResult(
            text=text,
            tokens_input=len(request.prompt.split()),
            tokens_output=len(text.split()),
            latency_ms=int(self.delay_seconds * 1000),
        )

    @staticmethod
    def _text_for(request: CompletionRequest) -> str:
        if request.purpose == "summary":
            return (
                "This purchase list mixes greener choices with single-use items. "
                "Swapping disposables for reusable options would cut most of the waste."
            )
        match = QUOTED_PRODUCT_RE.search(request.prompt)
        product = match.group(1) if match else "this item"
        return f"Choose a reusable or compostable alternative to {product}."


@dataclass
class StubIdentityVerifier:
    tokens: dict[str, CallerIdentity] = field(default_factory=dict)
    verified: list[str] = field(default_factory=list)

    async def verify(self, token: str) -> CallerIdentity | None:
        identity = self.tokens.get(token)
        if identity is not None:
            self.verified.append(identity.subject)
        return identity


def stub_identities_from_spec(spec: str) -> dict[str, CallerIdentity]:
    """Parse `token:subject,token2:subject2` into a token map."""
    tokens: dict[str, CallerIdentity] = {}
    for entry in spec.split(","):
        token, sep, subject = entry.strip().partition(":")
        if sep and token and subject:
            tokens[token] = CallerIdentity(subject=subject)
    return tokens
