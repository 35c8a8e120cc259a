from __future__ import annotations

from dataclasses import dataclass
import re

from app.domain.models import Row

BASELINE_SCORE = 50
MIN_SCORE = 0
MAX_SCORE = 100


@dataclass(frozen=True)
class KeywordRule:
    keyword: str
    delta: int
    unless: str | None = None

    def applies_to(self, text: str) -> bool:
        if not _contains_keyword(text, self.keyword):
            return False
        return self.unless is None or not _contains_keyword(text, self.unless)


GREEN_SCORE_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(keyword="recycled", delta=20),
    KeywordRule(keyword="compostable", delta=20),
    KeywordRule(keyword="organic", delta=15),
    KeywordRule(keyword="reusable", delta=15),
    KeywordRule(keyword="led", delta=10),
    KeywordRule(keyword="local", delta=10),
    KeywordRule(keyword="plastic", delta=-30, unless="reusable"),
    KeywordRule(keyword="disposable", delta=-25),
    KeywordRule(keyword="single-use", delta=-30),
)


def _contains_keyword(text: str, keyword: str) -> bool:
    # Anchored at a word start: "leds" matches "led" and "recycled" does not.
    # Keywords inside a compound are missed too, so "bioplastic cups" keeps
    # the baseline 50 and "unrecycled" gets no recycled bonus.
    return re.search(r"(?<![a-z0-9])" + re.escape(keyword), text) is not None


def green_score(row: Row | None, *, rules: tuple[KeywordRule, ...] = GREEN_SCORE_RULES) -> int:
    if row is None:
        return MIN_SCORE
    product = row.product
    if not product:
        return MIN_SCORE

    text = product.lower()
    score = BASELINE_SCORE
    for rule in rules:
        if rule.applies_to(text):
            score += rule.delta

    return max(MIN_SCORE, min(MAX_SCORE, score))
