"""Tests for the CSV parser."""

import csv

import pytest

from kakeibo.domain.csv_parser import (
    EXPORT_HEADER,
    ParsedRow,
    normalize_rating,
    parse_csv,
    parse_csv_line,
)


def test_typical_row():
    """Test the canonical row with quoted amount and 〇 rating."""
    parsed = parse_csv('2024/5/1,食費,"1,200",ランチ,〇,\n')

    assert parsed.rows == [
        ParsedRow(
            date="2024-05-01",
            category="食費",
            amount=1200,
            description="ランチ",
            rating="○",
            memo="",
        )
    ]
    assert parsed.categories == ["食費"]


def test_header_is_skipped():
    """Test that a non-date first line is treated as a header."""
    parsed = parse_csv("日付,カテゴリ,金額,内容,評価,メモ\n2024-05-02,交通,220,電車,,\n")
    assert [r.date for r in parsed.rows] == ["2024-05-02"]


def test_bom_and_blank_lines():
    """Test BOM stripping and blank line skipping."""
    parsed = parse_csv("\ufeff2024/5/1,食費,100,,,\n\n   \n2024/5/2,食費,200,,,\n")
    assert [r.amount for r in parsed.rows] == [100, 200]


def test_leading_blank_column():
    """Test that an empty first column shifts the layout."""
    parsed = parse_csv(",2024/5/1,食費,100,パン,△,朝食\n")
    row = parsed.rows[0]
    assert (row.date, row.category, row.amount, row.rating, row.memo) == (
        "2024-05-01",
        "食費",
        100,
        "△",
        "朝食",
    )


def test_invalid_rows_are_dropped():
    """Test that rows with bad dates or amounts disappear silently."""
    parsed = parse_csv(
        "2024/5/1,食費,100,,,\n"
        "2024/2/30,食費,100,,,\n"
        "not-a-date,食費,100,,,\n"
        "2024/5/3,食費,abc,,,\n"
    )
    assert [r.date for r in parsed.rows] == ["2024-05-01"]


def test_oversized_field_drops_only_that_row():
    """Test that a line the csv module rejects is dropped like any bad row."""
    huge = "x" * (csv.field_size_limit() + 10)
    parsed = parse_csv(f"2024/5/1,食費,100,ランチ,,\n2024/5/2,食費,200,{huge},,\n2024/5/3,交通,300,,,\n")

    assert [r.date for r in parsed.rows] == ["2024-05-01", "2024-05-03"]
    assert parsed.categories == ["交通", "食費"]


@pytest.mark.parametrize(
    "raw, expected",
    [("¥1,200", 1200), ("￥3、000", 3000), ("-500", 500), ("980円", 980), ("12.5", 12)],
)
def test_amount_normalization(raw, expected):
    """Test amount cleanup."""
    parsed = parse_csv(f'2024/5/1,食費,"{raw}",,,\n')
    assert parsed.rows[0].amount == expected


@pytest.mark.parametrize(
    "raw, expected",
    [("〇", "○"), ("○", "○"), ("△", "△"), ("✖", "✖"), ("×", "✖"), ("x", "✖"), ("X", "✖"), ("", None), ("good", None)],
)
def test_normalize_rating(raw, expected):
    """Test rating spellings."""
    assert normalize_rating(raw) == expected


def test_quoted_fields():
    """Test quoted commas and escaped quotes."""
    assert parse_csv_line('a,"b,c","say ""hi"""') == ["a", "b,c", 'say "hi"']


def test_short_rows_fill_missing_fields():
    """Test that missing trailing columns default to empty."""
    row = parse_csv("2024/5/1,食費,100\n").rows[0]
    assert (row.description, row.rating, row.memo) == ("", None, "")


def test_categories_sorted_and_distinct():
    """Test the category label list."""
    parsed = parse_csv("2024/5/1,交通,1,,,\n2024/5/2,食費,2,,,\n2024/5/3,交通,3,,,\n2024/5/4,,4,,,\n")
    assert parsed.categories == sorted(["交通", "食費"])
    assert len(parsed.rows) == 4


def test_export_layout_is_recognized():
    """Test that files written by the exporter parse with their own columns."""
    content = "\n".join(
        [
            ",".join(EXPORT_HEADER),
            "2024-05-01,食費,外食,1200,ランチ,○,現金,同僚と",
            "2024-05-02,その他,,300,,,未設定,",
        ]
    )
    parsed = parse_csv(content)

    first, second = parsed.rows
    assert (first.category, first.amount, first.description, first.rating, first.memo) == (
        "食費 > 外食",
        1200,
        "ランチ",
        "○",
        "同僚と",
    )
    assert second.category == "その他"
    assert parsed.categories == sorted(["その他", "食費 > 外食"])


def test_empty_content():
    """Test parsing nothing."""
    parsed = parse_csv("")
    assert parsed.rows == []
    assert parsed.categories == []
