from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from app.domain.models import AnalysisResult, ScoredRow

COMPONENT_ID = "domain.aggregate"


def average_green_score(items: Sequence[ScoredRow]) -> int:
    if not items:
        return 0
    total = sum(item.green_score for item in items)
    # Half-up rounding, so 42.5 -> 43 rather than banker's 42.
    mean = Decimal(total) / Decimal(len(items))
    return int(mean.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def aggregate_analysis(*, file_name: str, items: Sequence[ScoredRow], summary: str) -> AnalysisResult:
    return AnalysisResult(
        file_name=file_name,
        average_score=average_green_score(items),
        summary=summary,
        items=tuple(items),
    )
