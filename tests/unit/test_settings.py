from __future__ import annotations

import pytest

from app.services.settings import analysis_settings_from_env

ENV_NAMES = (
    "PRODUCT_COLUMN_ALIASES",
    "MAX_UPLOAD_BYTES",
    "CORS_ALLOW_ORIGINS",
    "LOW_SCORE_THRESHOLD",
    "ENRICHMENT_MAX_CONCURRENCY",
    "ENRICHMENT_TIMEOUT_SECONDS",
    "ENRICHMENT_MAX_RETRIES",
    "ENRICHMENT_RETRY_BACKOFF_MS",
    "ENRICHMENT_SUMMARY_REQUIRED",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


@pytest.mark.unit
def test_defaults_without_environment() -> None:
    settings = analysis_settings_from_env()

    assert settings.product_aliases == ("product", "item")
    assert settings.max_upload_bytes == 2 * 1024 * 1024
    assert settings.cors_allow_origins == ("*",)
    assert settings.enrichment.low_score_threshold == 40
    assert settings.enrichment.max_concurrency == 5
    assert settings.enrichment.max_retries == 1
    assert settings.enrichment.summary_required is True


@pytest.mark.unit
def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PRODUCT_COLUMN_ALIASES", "Product, Item ,Description")
    monkeypatch.setenv("MAX_UPLOAD_BYTES", "1024")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://localhost:3000,https://app.example.org")
    monkeypatch.setenv("LOW_SCORE_THRESHOLD", "55")
    monkeypatch.setenv("ENRICHMENT_MAX_CONCURRENCY", "2")
    monkeypatch.setenv("ENRICHMENT_TIMEOUT_SECONDS", "1.5")
    monkeypatch.setenv("ENRICHMENT_MAX_RETRIES", "0")
    monkeypatch.setenv("ENRICHMENT_SUMMARY_REQUIRED", "false")

    settings = analysis_settings_from_env()

    assert settings.product_aliases == ("Product", "Item", "Description")
    assert settings.max_upload_bytes == 1024
    assert settings.cors_allow_origins == ("http://localhost:3000", "https://app.example.org")
    assert settings.enrichment.low_score_threshold == 55
    assert settings.enrichment.max_concurrency == 2
    assert settings.enrichment.timeout_seconds == 1.5
    assert settings.enrichment.max_retries == 0
    assert settings.enrichment.summary_required is False


@pytest.mark.unit
def test_invalid_values_fall_back_to_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENRICHMENT_MAX_CONCURRENCY", "0")
    monkeypatch.setenv("ENRICHMENT_TIMEOUT_SECONDS", "soon")
    monkeypatch.setenv("MAX_UPLOAD_BYTES", "-1")
    monkeypatch.setenv("PRODUCT_COLUMN_ALIASES", " , ")

    settings = analysis_settings_from_env()

    assert settings.enrichment.max_concurrency == 5
    assert settings.enrichment.timeout_seconds == 20.0
    assert settings.max_upload_bytes == 2 * 1024 * 1024
    assert settings.product_aliases == ("product", "item")
