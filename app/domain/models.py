from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType

DEFAULT_PRODUCT_ALIASES: tuple[str, ...] = ("product", "item")
# Lower-cased names of the fields items_to_json adds next to the CSV columns.
DERIVED_ITEM_FIELDS: frozenset[str] = frozenset({"greenscore", "suggestion"})


@dataclass(frozen=True)
class Row:
    """One procurement line item with lower-cased column names."""

    attributes: Mapping[str, str]
    product_aliases: tuple[str, ...] = DEFAULT_PRODUCT_ALIASES

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    @property
    def product(self) -> str | None:
        for alias in self.product_aliases:
            value = self.attributes.get(alias)
            if value:
                return value
        return None


@dataclass(frozen=True)
class ScoredRow:
    row: Row
    green_score: int
    suggestion: str | None = None

    @property
    def product(self) -> str | None:
        return self.row.product

    def with_suggestion(self, suggestion: str) -> ScoredRow:
        return replace(self, suggestion=suggestion)


@dataclass(frozen=True)
class AnalysisResult:
    file_name: str
    average_score: int
    summary: str
    items: tuple[ScoredRow, ...]
    owner_id: str | None = None
    created_at: datetime | None = None
    analysis_id: str | None = None

    def stored_as(self, *, analysis_id: str, owner_id: str, created_at: datetime) -> AnalysisResult:
        return replace(self, analysis_id=analysis_id, owner_id=owner_id, created_at=created_at)


@dataclass(frozen=True)
class StoredAnalysis:
    analysis_id: str
    created_at: datetime


@dataclass(frozen=True)
class CallerIdentity:
    """Verified caller returned by the identity provider."""

    subject: str
    email: str | None = None
    display_name: str | None = None
    claims: Mapping[str, object] = field(default_factory=dict)


def items_to_json(items: Sequence[ScoredRow]) -> list[dict[str, object]]:
    """Flatten scored rows into the wire/storage shape: columns + greenScore + suggestion?"""
    payload: list[dict[str, object]] = []
    for item in items:
        entry: dict[str, object] = dict(item.row.attributes)
        entry["greenScore"] = item.green_score
        if item.suggestion is not None:
            entry["suggestion"] = item.suggestion
        payload.append(entry)
    return payload


def items_from_json(
    payload: Sequence[Mapping[str, object]],
    *,
    product_aliases: tuple[str, ...] = DEFAULT_PRODUCT_ALIASES,
) -> tuple[ScoredRow, ...]:
    items: list[ScoredRow] = []
    for entry in payload:
        attributes = {
            key: str(value)
            for key, value in entry.items()
            if key not in ("greenScore", "suggestion")
        }
        suggestion = entry.get("suggestion")
        items.append(
            ScoredRow(
                row=Row(attributes=attributes, product_aliases=product_aliases),
                green_score=int(entry.get("greenScore", 0)),  # type: ignore[call-overload]
                suggestion=suggestion if isinstance(suggestion, str) else None,
            )
        )
    return tuple(items)
