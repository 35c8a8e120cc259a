from __future__ import annotations

from dataclasses import dataclass
import os

from app.domain.models import DEFAULT_PRODUCT_ALIASES
from app.domain.use_cases.enrich import EnrichmentSettings


@dataclass(frozen=True)
class AnalysisSettings:
    product_aliases: tuple[str, ...] = DEFAULT_PRODUCT_ALIASES
    max_upload_bytes: int = 2 * 1024 * 1024
    cors_allow_origins: tuple[str, ...] = ("*",)
    enrichment: EnrichmentSettings = EnrichmentSettings()


def analysis_settings_from_env() -> AnalysisSettings:
    return AnalysisSettings(
        product_aliases=_env_list("PRODUCT_COLUMN_ALIASES", DEFAULT_PRODUCT_ALIASES),
        max_upload_bytes=_env_int("MAX_UPLOAD_BYTES", 2 * 1024 * 1024),
        cors_allow_origins=_env_list("CORS_ALLOW_ORIGINS", ("*",)),
        enrichment=EnrichmentSettings(
            low_score_threshold=_env_int("LOW_SCORE_THRESHOLD", 40),
            max_concurrency=_env_int("ENRICHMENT_MAX_CONCURRENCY", 5),
            timeout_seconds=_env_float("ENRICHMENT_TIMEOUT_SECONDS", 20.0),
            max_retries=_env_int("ENRICHMENT_MAX_RETRIES", 1, minimum=0),
            retry_backoff_ms=_env_int("ENRICHMENT_RETRY_BACKOFF_MS", 250, minimum=0),
            summary_required=_env_bool("ENRICHMENT_SUMMARY_REQUIRED", True),
        ),
    )


def _env_int(name: str, default: int, *, minimum: int = 1) -> int:
    value = os.getenv(name)
    if value is None:
        return default

    try:
        parsed = int(value)
    except ValueError:
        return default

    return parsed if parsed >= minimum else default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default

    try:
        parsed = float(value)
    except ValueError:
        return default

    return parsed if parsed > 0 else default


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = os.getenv(name)
    if value is None:
        return default
    items = tuple(part.strip() for part in value.split(",") if part.strip())
    return items or default
