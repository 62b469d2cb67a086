"""Tolerant parser for foreign expense CSV files.

Accepted layout, one expense per line::

    date, category label, amount, description, rating, memo

An optional header line and an optional leading blank column are tolerated.
Rows that cannot be split into fields, or whose date or amount cannot be
read, are dropped silently. Files written by ``kakeibo.domain.csv_export``
are recognized by their header and read with the export column layout.
"""

import csv
from dataclasses import dataclass
from typing import Optional

from kakeibo.utils.amount_parser import parse_amount
from kakeibo.utils.date_parser import looks_like_date, normalize_date

EXPORT_HEADER = (
    "date",
    "major_category",
    "minor_category",
    "amount",
    "description",
    "rating",
    "payment_method",
    "memo",
)

_RATING_ALIASES = {
    "〇": "○",
    "○": "○",
    "△": "△",
    "✖": "✖",
    "×": "✖",
    "x": "✖",
    "X": "✖",
}


@dataclass(frozen=True)
class ParsedRow:
    """One importable CSV row, normalized."""

    date: str
    category: str
    amount: int
    description: str
    rating: Optional[str]
    memo: str


@dataclass(frozen=True)
class ParsedCSV:
    """Rows of a CSV file and the distinct category labels they use."""

    rows: list[ParsedRow]
    categories: list[str]


def normalize_rating(value: str) -> Optional[str]:
    """Map rating spellings to ○, △ or ✖; anything else is no rating."""
    return _RATING_ALIASES.get(value.strip())


def parse_csv_line(line: str) -> list[str]:
    """Split one line, honouring quoted fields and ``""`` escapes.

    Raises:
        csv.Error: If the line can't be split (e.g. an oversized field)
    """
    return next(csv.reader([line]), [])


def _field(cols: list[str], index: int) -> str:
    return cols[index] if index < len(cols) else ""


def _category_label(major: str, minor: str) -> str:
    major, minor = major.strip(), minor.strip()
    if major and minor:
        return f"{major} > {minor}"
    return major


def _parse_row(cols: list[str], export_layout: bool) -> Optional[ParsedRow]:
    # Tolerate a leading blank column
    offset = 1 if len(cols) > 1 and cols[0] == "" else 0
    cols = cols[offset:]

    if export_layout:
        category = _category_label(_field(cols, 1), _field(cols, 2))
        amount_raw, description, rating, memo = (
            _field(cols, 3),
            _field(cols, 4),
            _field(cols, 5),
            _field(cols, 7),
        )
    else:
        category = _field(cols, 1).strip()
        amount_raw, description, rating, memo = (
            _field(cols, 2),
            _field(cols, 3),
            _field(cols, 4),
            _field(cols, 5),
        )

    try:
        date = normalize_date(_field(cols, 0))
        amount = parse_amount(amount_raw)
    except ValueError:
        return None

    return ParsedRow(
        date=date,
        category=category,
        amount=amount,
        description=description.strip(),
        rating=normalize_rating(rating),
        memo=memo.strip(),
    )


def parse_csv(content: str) -> ParsedCSV:
    """Parse CSV text into normalized rows.

    Args:
        content: Whole file content

    Returns:
        ParsedCSV with the rows in file order and sorted distinct non-empty
        category labels
    """
    lines = [line for line in content.lstrip("\ufeff").splitlines() if line.strip()]

    start = 0
    export_layout = False
    if lines:
        try:
            first = parse_csv_line(lines[0])
        except csv.Error:
            first = []
        first_column = first[0].strip() if first else ""
        if first_column and not looks_like_date(first_column):
            start = 1
            export_layout = tuple(col.strip() for col in first) == EXPORT_HEADER

    rows = []
    for line in lines[start:]:
        try:
            cols = parse_csv_line(line)
        except csv.Error:
            continue
        row = _parse_row(cols, export_layout)
        if row is not None:
            rows.append(row)

    categories = sorted({row.category for row in rows if row.category})
    return ParsedCSV(rows=rows, categories=categories)
