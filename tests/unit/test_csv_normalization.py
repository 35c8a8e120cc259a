import pytest

from app.domain.errors import CsvParseError
from app.domain.normalization import iter_csv_rows, parse_csv


@pytest.mark.unit
def test_header_names_are_case_insensitive() -> None:
    upper = parse_csv(b"Product,Quantity\nRecycled Paper,10\n")
    lower = parse_csv(b"product,quantity\nRecycled Paper,10\n")
    shouting = parse_csv(b"PRODUCT,QUANTITY\nRecycled Paper,10\n")

    assert [dict(row.attributes) for row in upper] == [{"product": "Recycled Paper", "quantity": "10"}]
    assert [dict(row.attributes) for row in upper] == [dict(row.attributes) for row in lower]
    assert [dict(row.attributes) for row in lower] == [dict(row.attributes) for row in shouting]


@pytest.mark.unit
def test_rows_preserve_order_and_extra_columns() -> None:
    rows = parse_csv(
        b"Product,Supplier,Cost\n"
        b"Recycled A4 Paper,PaperCo,120\n"
        b'"Disposable Plastic Cups","Cups, Inc",45\n'
        b"LED Light Bulbs,BrightCo,300\n"
    )

    assert [row.product for row in rows] == ["Recycled A4 Paper", "Disposable Plastic Cups", "LED Light Bulbs"]
    assert rows[1].attributes["supplier"] == "Cups, Inc"
    assert rows[2].attributes["cost"] == "300"


@pytest.mark.unit
def test_item_alias_resolves_product() -> None:
    rows = parse_csv(b"Item,Qty\nCompostable Plates,5\n")
    assert rows[0].product == "Compostable Plates"


@pytest.mark.unit
def test_custom_aliases_are_lower_cased() -> None:
    rows = parse_csv(b"Description\nOrganic Coffee\n", product_aliases=("Description",))
    assert rows[0].product == "Organic Coffee"


@pytest.mark.unit
def test_row_without_product_is_retained() -> None:
    rows = parse_csv(b"product,quantity\n,4\nLED Lamp,2\n")
    assert len(rows) == 2
    assert rows[0].product is None


@pytest.mark.unit
def test_empty_and_header_only_inputs_yield_no_rows() -> None:
    assert parse_csv(b"") == []
    assert parse_csv(b"product,quantity\n") == []
    assert parse_csv(b"product\n\n\n") == []


@pytest.mark.unit
def test_bom_and_crlf_are_handled() -> None:
    rows = parse_csv("\ufeffProduct,Qty\r\nRecycled Paper,1\r\n".encode("utf-8"))
    assert rows[0].attributes == {"product": "Recycled Paper", "qty": "1"}


@pytest.mark.unit
def test_column_count_mismatch_fails_whole_stream() -> None:
    rows = iter_csv_rows(b"product,quantity\nRecycled Paper,10\nLED Lamp,2,extra\n")

    first = next(rows)
    assert first.product == "Recycled Paper"
    with pytest.raises(CsvParseError) as excinfo:
        next(rows)
    assert excinfo.value.stage == "parse"


@pytest.mark.unit
def test_invalid_utf8_is_a_parse_error() -> None:
    with pytest.raises(CsvParseError):
        parse_csv(b"product\n\xff\xfe broken\n")


@pytest.mark.unit
def test_unterminated_quote_is_a_parse_error() -> None:
    with pytest.raises(CsvParseError):
        parse_csv(b'product,qty\n"Recycled Paper,1\n')


@pytest.mark.unit
def test_duplicate_headers_after_lower_casing_are_rejected() -> None:
    with pytest.raises(CsvParseError):
        parse_csv(b"Product,product\nA,B\n")


@pytest.mark.unit
@pytest.mark.parametrize(
    "payload",
    [
        b"Product,Suggestion\nRecycled Paper,buy more\n",
        b"Product,GreenScore\nRecycled Paper,99\n",
        b"product, suggestion \n",
    ],
)
def test_columns_named_like_analysis_output_are_rejected(payload: bytes) -> None:
    with pytest.raises(CsvParseError, match="reserved"):
        parse_csv(payload)
