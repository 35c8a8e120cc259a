from __future__ import annotations

from dataclasses import dataclass

from app.domain.contracts import AnalysisRepository, IdentityVerifier, LLMClient
from app.domain.use_cases.analyses import AnalysisService


@dataclass(frozen=True)
class ApiDeps:
    repository: AnalysisRepository
    llm: LLMClient
    identity: IdentityVerifier
    analyses: AnalysisService
    cors_allow_origins: tuple[str, ...] = ("*",)
    mode: str = "stub"
