from __future__ import annotations

from collections.abc import Iterator
import csv
import io

from app.domain.errors import CsvParseError
from app.domain.models import DEFAULT_PRODUCT_ALIASES, DERIVED_ITEM_FIELDS, Row

UTF8_BOM = "\ufeff"


def normalize_header(name: str) -> str:
    return name.strip().lower()


def iter_csv_rows(
    payload: bytes,
    *,
    product_aliases: tuple[str, ...] = DEFAULT_PRODUCT_ALIASES,
) -> Iterator[Row]:
    """Decode CSV bytes row by row.

    Any malformed line fails the whole stream with CsvParseError; rows are
    never dropped silently. A payload without data rows yields nothing.
    """
    try:
        text = payload.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise CsvParseError(f"payload is not valid utf-8: {exc.reason}", stage="parse") from exc
    text = text.removeprefix(UTF8_BOM)

    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    header: list[str] | None = None
    aliases = tuple(normalize_header(alias) for alias in product_aliases)
    try:
        for record in reader:
            if _is_blank(record):
                continue
            if header is None:
                header = [normalize_header(name) for name in record]
                _ensure_unique(header)
                _ensure_not_derived(header)
                continue
            if len(record) != len(header):
                raise CsvParseError(
                    f"line {reader.line_num}: expected {len(header)} columns, got {len(record)}",
                    stage="parse",
                )
            yield Row(attributes=dict(zip(header, record)), product_aliases=aliases)
    except csv.Error as exc:
        raise CsvParseError(f"line {reader.line_num}: {exc}", stage="parse") from exc


def parse_csv(
    payload: bytes,
    *,
    product_aliases: tuple[str, ...] = DEFAULT_PRODUCT_ALIASES,
) -> list[Row]:
    return list(iter_csv_rows(payload, product_aliases=product_aliases))


def _ensure_unique(header: list[str]) -> None:
    seen: set[str] = set()
    for name in header:
        if name in seen:
            raise CsvParseError(f"duplicate column after lower-casing: {name!r}", stage="parse")
        seen.add(name)


def _ensure_not_derived(header: list[str]) -> None:
    clashes = sorted(DERIVED_ITEM_FIELDS.intersection(header))
    if clashes:
        raise CsvParseError(f"column names reserved for analysis output: {clashes}", stage="parse")


def _is_blank(record: list[str]) -> bool:
    return len(record) <= 1 and not "".join(record).strip()
