from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
import os

from app.api.handlers.deps import ApiDeps
from app.clients.stub import StubIdentityVerifier, StubLLMClient, stub_identities_from_spec
from app.domain.contracts import AnalysisRepository, IdentityVerifier, LLMClient
from app.domain.prompts import DEFAULT_PROMPT_SPEC_PATH, load_prompt_spec
from app.domain.use_cases.analyses import AnalysisService
from app.domain.use_cases.enrich import EnrichmentOrchestrator
from app.repositories.postgres import AsyncpgPoolManager, PostgresAnalysisRepository
from app.repositories.stub import InMemoryAnalysisRepository
from app.services.settings import AnalysisSettings, analysis_settings_from_env


@dataclass
class RuntimeContainer:
    repository: AnalysisRepository
    llm: LLMClient
    identity: IdentityVerifier
    analyses: AnalysisService
    api_deps: ApiDeps
    on_startup: Callable[[], Awaitable[None]] | None
    on_shutdown: Callable[[], Awaitable[None]] | None


def build_runtime_container(settings: AnalysisSettings | None = None) -> RuntimeContainer:
    settings = settings or analysis_settings_from_env()
    database_url = os.getenv("DATABASE_URL")
    on_startup: Callable[[], Awaitable[None]] | None = None
    on_shutdown: Callable[[], Awaitable[None]] | None = None
    repository: AnalysisRepository
    if database_url:
        pool_manager = AsyncpgPoolManager(dsn=database_url)
        repository = PostgresAnalysisRepository(pool_manager=pool_manager)
        on_startup = pool_manager.startup
        on_shutdown = pool_manager.shutdown
    else:
        repository = InMemoryAnalysisRepository()

    llm = _build_llm(settings)
    identity = _build_identity()
    prompt_spec = load_prompt_spec(file_path=os.getenv("PROMPT_SPEC_PATH", str(DEFAULT_PROMPT_SPEC_PATH)))
    analyses = AnalysisService(
        repository=repository,
        enrichment=EnrichmentOrchestrator(llm=llm, prompt_spec=prompt_spec, settings=settings.enrichment),
        product_aliases=settings.product_aliases,
        max_upload_bytes=settings.max_upload_bytes,
    )
    api_deps = ApiDeps(
        repository=repository,
        llm=llm,
        identity=identity,
        analyses=analyses,
        cors_allow_origins=settings.cors_allow_origins,
        mode="stub" if isinstance(llm, StubLLMClient) else "live",
    )

    return RuntimeContainer(
        repository=repository,
        llm=llm,
        identity=identity,
        analyses=analyses,
        api_deps=api_deps,
        on_startup=on_startup,
        on_shutdown=on_shutdown,
    )


def _build_llm(settings: AnalysisSettings) -> LLMClient:
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        return StubLLMClient()

    from app.clients.openai_client import OpenAILLMClient

    return OpenAILLMClient(
        api_key=api_key,
        base_url=os.getenv("OPENAI_BASE_URL") or None,
        timeout_seconds=settings.enrichment.timeout_seconds,
    )


def _build_identity() -> IdentityVerifier:
    credentials_path = os.getenv("FIREBASE_CREDENTIALS")
    if not credentials_path:
        return StubIdentityVerifier(tokens=stub_identities_from_spec(os.getenv("STUB_AUTH_TOKENS", "")))

    from app.clients.firebase_identity import FirebaseIdentityVerifier

    return FirebaseIdentityVerifier(credentials_path=credentials_path)
