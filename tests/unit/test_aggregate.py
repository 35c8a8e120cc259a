import pytest

from app.domain.models import Row, ScoredRow
from app.domain.use_cases.aggregate import aggregate_analysis, average_green_score


def _items(*scores: int) -> list[ScoredRow]:
    return [ScoredRow(row=Row(attributes={"product": f"item {index}"}), green_score=score) for index, score in enumerate(scores)]


@pytest.mark.unit
def test_average_of_empty_items_is_zero() -> None:
    assert average_green_score([]) == 0
    result = aggregate_analysis(file_name="empty.csv", items=[], summary="")
    assert result.average_score == 0
    assert result.items == ()


@pytest.mark.unit
@pytest.mark.parametrize(
    ("scores", "expected"),
    [
        ((70, 0, 60), 43),
        ((50,), 50),
        ((0, 1), 1),
        ((41, 44), 43),
        ((100, 100, 99), 100),
    ],
)
def test_average_is_rounded_mean(scores: tuple[int, ...], expected: int) -> None:
    assert average_green_score(_items(*scores)) == expected


@pytest.mark.unit
def test_aggregate_keeps_item_order_and_summary() -> None:
    items = _items(10, 90, 40)
    result = aggregate_analysis(file_name="purchases.csv", items=items, summary="Mixed impact.")

    assert result.file_name == "purchases.csv"
    assert result.summary == "Mixed impact."
    assert [item.green_score for item in result.items] == [10, 90, 40]
    assert result.owner_id is None
    assert result.created_at is None
