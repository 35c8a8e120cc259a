from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

ANALYSIS_ID_PATTERN = r"^ana_[0-9A-HJKMNP-TV-Z]{26}$"


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    service: str
    mode: str


class ReadyResponse(BaseModel):
    status: str
    service: str
    mode: str
    repository: str
    llm: str
    identity: str


class AnalysisResponse(BaseModel):
    # Items echo the uploaded columns verbatim plus greenScore and optional suggestion.
    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(alias="fileName")
    average_score: int = Field(alias="averageScore", ge=0, le=100)
    summary: str
    items: list[dict[str, object]]


class HistoryEntryResponse(AnalysisResponse):
    id: str = Field(pattern=ANALYSIS_ID_PATTERN)
    created_at: str = Field(alias="createdAt")
