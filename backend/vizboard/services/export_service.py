"""
CSV export of a widget's resolved rows.

Header order is the key order of the first row. A value is quoted, with
inner quotes doubled, only when it contains a comma or a double quote;
missing values export as empty strings and lines are joined with ``\\n``.
"""
from typing import Any, List

from vizboard.utils import safe_filename


def _csv_cell(value: Any) -> str:
    text = "" if value is None else str(value)
    if "," in text or '"' in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def rows_to_csv(rows: List[Any]) -> str:
    if not rows or not isinstance(rows[0], dict):
        return ""
    headers = list(rows[0].keys())
    lines = [",".join(_csv_cell(header) for header in headers)]
    for row in rows:
        lines.append(",".join(_csv_cell(row.get(header) if isinstance(row, dict) else None) for header in headers))
    return "\n".join(lines)


def csv_filename(title: str) -> str:
    return safe_filename(title or "widget", "csv")
