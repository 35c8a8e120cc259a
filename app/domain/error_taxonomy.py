from __future__ import annotations

from collections.abc import Mapping
from typing import Literal

# Canonical error vocabulary for all stages.
ErrorCode = Literal[
    "unauthorized",
    "bad_request",
    "upload_too_large",
    "validation_error",
    "csv_parse_failed",
    "llm_provider_unavailable",
    "enrichment_failed",
    "storage_failed",
    "internal_error",
]

RetryClassification = Literal["recoverable", "terminal"]

CANONICAL_ERROR_CODES: tuple[ErrorCode, ...] = (
    "unauthorized",
    "bad_request",
    "upload_too_large",
    "validation_error",
    "csv_parse_failed",
    "llm_provider_unavailable",
    "enrichment_failed",
    "storage_failed",
    "internal_error",
)

# Errors worth another completion attempt within the enrichment retry budget.
RECOVERABLE_ERROR_CODES: frozenset[ErrorCode] = frozenset(
    {
        "llm_provider_unavailable",
    }
)

# Stage-specific allowlist. If a stage emits a code outside this map,
# it is normalized to internal_error by resolve_stage_error().
STAGE_ERROR_MAP: Mapping[str, frozenset[ErrorCode]] = {
    "authenticate": frozenset({"unauthorized", "internal_error"}),
    "validate": frozenset({"bad_request", "upload_too_large", "validation_error", "internal_error"}),
    "parse": frozenset({"csv_parse_failed", "internal_error"}),
    "score": frozenset({"internal_error"}),
    "enrich": frozenset({"llm_provider_unavailable", "enrichment_failed", "internal_error"}),
    "aggregate": frozenset({"internal_error"}),
    "persist": frozenset({"storage_failed", "internal_error"}),
    "history": frozenset({"storage_failed", "internal_error"}),
}

HTTP_STATUS_BY_CODE: Mapping[ErrorCode, int] = {
    "unauthorized": 401,
    "bad_request": 400,
    "upload_too_large": 400,
    "validation_error": 400,
    "csv_parse_failed": 500,
    "llm_provider_unavailable": 500,
    "enrichment_failed": 500,
    "storage_failed": 500,
    "internal_error": 500,
}

# Client-facing messages. Exception text never leaves the service.
CLIENT_MESSAGE_BY_STAGE: Mapping[str, str] = {
    "authenticate": "Unauthorized. You must be logged in.",
    "validate": "No file uploaded.",
    "parse": "Failed to process CSV file.",
    "score": "Failed to score CSV rows.",
    "enrich": "Failed to get AI insights.",
    "aggregate": "Failed to aggregate analysis.",
    "persist": "Failed to save analysis.",
    "history": "Failed to fetch analysis history.",
}

# Codes that share a stage but need their own wording.
CLIENT_MESSAGE_BY_CODE: Mapping[str, str] = {
    "upload_too_large": "File is too large.",
}


def is_canonical_error_code(code: str) -> bool:
    return code in CANONICAL_ERROR_CODES


def classify_error(code: ErrorCode) -> RetryClassification:
    if code in RECOVERABLE_ERROR_CODES:
        return "recoverable"
    return "terminal"


def resolve_stage_error(*, stage: str, code: str) -> ErrorCode:
    allowed = STAGE_ERROR_MAP.get(stage, frozenset({"internal_error"}))
    if code in allowed and is_canonical_error_code(code):
        return code
    return "internal_error"


def http_status_for(code: ErrorCode) -> int:
    return HTTP_STATUS_BY_CODE.get(code, 500)


def client_message_for(*, stage: str | None, code: str | None = None) -> str:
    if code is not None and code in CLIENT_MESSAGE_BY_CODE:
        return CLIENT_MESSAGE_BY_CODE[code]
    if stage is None:
        return "Internal server error."
    return CLIENT_MESSAGE_BY_STAGE.get(stage, "Internal server error.")
