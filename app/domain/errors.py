from __future__ import annotations


class DomainError(Exception):
    code = "internal_error"

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        self.stage = stage


class DomainValidationError(DomainError):
    code = "validation_error"


class DomainDependencyError(DomainError):
    pass


class UnauthorizedError(DomainError):
    code = "unauthorized"


class BadRequestError(DomainValidationError):
    code = "bad_request"


class UploadTooLargeError(BadRequestError):
    code = "upload_too_large"


class CsvParseError(DomainError):
    code = "csv_parse_failed"


class LLMProviderError(DomainDependencyError):
    code = "llm_provider_unavailable"

    def __init__(self, message: str, *, recoverable: bool = True) -> None:
        super().__init__(message, stage="enrich")
        self.recoverable = recoverable


class EnrichmentError(DomainDependencyError):
    code = "enrichment_failed"


class StorageError(DomainDependencyError):
    code = "storage_failed"
