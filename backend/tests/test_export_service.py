"""Unit tests for CSV export of widget rows."""

import pytest

from vizboard.services.export_service import csv_filename, rows_to_csv

pytestmark = pytest.mark.unit


def test_header_follows_first_row_key_order() -> None:
    rows = [{"month": "Jan", "sales": 100}, {"month": "Feb", "sales": 150}]

    assert rows_to_csv(rows) == "month,sales\nJan,100\nFeb,150"


def test_values_with_commas_or_quotes_are_quoted() -> None:
    rows = [{"name": "Acme, Inc.", "note": 'say "hi"', "plain": "ok"}]

    assert rows_to_csv(rows).split("\n")[1] == '"Acme, Inc.","say ""hi""",ok'


def test_missing_values_export_empty() -> None:
    rows = [{"a": 1, "b": 2}, {"a": None}]

    assert rows_to_csv(rows) == "a,b\n1,2\n,"


def test_no_rows_export_nothing() -> None:
    assert rows_to_csv([]) == ""


def test_filename_replaces_non_alphanumerics() -> None:
    assert csv_filename("Q1 Sales (EU)") == "Q1_Sales__EU_.csv"
    assert csv_filename("") == "widget.csv"


def test_header_names_are_quoted_like_values() -> None:
    rows = [{"city, state": "Austin, TX", "pop": 960000}]

    assert rows_to_csv(rows) == '"city, state",pop\n"Austin, TX",960000'
