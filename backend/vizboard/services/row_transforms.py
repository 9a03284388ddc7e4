"""
Filtering, date-range and group/aggregate steps applied to resolved rows.

These run once per widget, on the base config, before any layer is
dispatched. With none of ``filters``, ``dateRange`` or ``aggregation`` set
the input list is returned unchanged.
"""
from typing import Any, Dict, List, Mapping, Optional, Tuple

from vizboard.core.logger import logger
from vizboard.utils import coerce_numeric, to_dataframe, to_number, to_python, to_timestamp


def resolve_axis_keys(rows: List[Any], config: Mapping[str, Any]) -> Tuple[Optional[str], Optional[str]]:
    """
    Field names used for the x and y axes.

    Resolution order: ``config["xAxis"]`` / ``config["yAxis"]`` when set,
    otherwise the first and second keys of the first row in their
    declaration order. A configured axis that is not a string is ignored.
    Either may be None when the row has too few keys.
    """
    keys = [str(key) for key in rows[0].keys()] if rows and isinstance(rows[0], dict) else []
    x_axis, y_axis = config.get("xAxis"), config.get("yAxis")
    x_key = x_axis if isinstance(x_axis, str) and x_axis else (keys[0] if len(keys) > 0 else None)
    y_key = y_axis if isinstance(y_axis, str) and y_axis else (keys[1] if len(keys) > 1 else None)
    return x_key, y_key


def _matches(row: Dict[str, Any], rule: Mapping[str, Any]) -> bool:
    field = rule.get("field")
    if field not in row:
        return True
    value = row[field]
    if value is None:
        return False

    operator = rule.get("operator")
    expected = rule.get("value")
    if operator in ("eq", "neq", "contains"):
        text = str(value).lower()
        wanted = str(expected).lower()
        if operator == "eq":
            return text == wanted
        if operator == "neq":
            return text != wanted
        return wanted in text

    left, right = to_number(value), to_number(expected)
    if left is None or right is None:
        return False
    if operator == "gt":
        return left > right
    if operator == "gte":
        return left >= right
    if operator == "lt":
        return left < right
    if operator == "lte":
        return left <= right
    return True


def apply_filters(rows: List[Dict[str, Any]], filters: Optional[List[Mapping[str, Any]]]) -> List[Dict[str, Any]]:
    """
    Keep rows matching every filter.

    Filters on a field no row carries are ignored, and a row without the
    filtered field passes that filter. String operators compare
    case-insensitively; numeric operators drop rows that are not numbers.
    """
    if not filters or not rows:
        return rows
    applicable = [rule for rule in filters if any(rule.get("field") in row for row in rows)]
    if not applicable:
        return rows
    return [row for row in rows if all(_matches(row, rule) for rule in applicable)]


def apply_date_range(rows: List[Dict[str, Any]], field: Optional[str], date_range: Optional[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Keep rows whose ``field`` falls inside the inclusive start/end dates."""
    if not rows or not field or not date_range:
        return rows
    start = to_timestamp(date_range.get("start"))
    end = to_timestamp(date_range.get("end"))
    if start is None and end is None:
        return rows

    kept = []
    for row in rows:
        stamp = to_timestamp(row.get(field))
        if stamp is None:
            continue
        if start is not None and stamp < start:
            continue
        if end is not None and stamp > end:
            continue
        kept.append(row)
    return kept


def aggregate_rows(rows: List[Dict[str, Any]], group_key: Optional[str], value_key: Optional[str], aggregation: str) -> List[Dict[str, Any]]:
    """
    Collapse rows to one per distinct ``group_key`` value, in first-seen order.

    ``count`` counts rows per group; the other aggregations read
    ``value_key`` as numbers, skipping cells that are not numeric.
    """
    if not rows or not group_key:
        return rows
    frame = to_dataframe(rows)
    if group_key not in frame.columns:
        return rows

    if aggregation == "count":
        result = frame.groupby(group_key, sort=False).size()
        out_key = value_key or "count"
    else:
        if not value_key or value_key not in frame.columns:
            return rows
        grouped = coerce_numeric(frame[value_key]).groupby(frame[group_key], sort=False)
        reducers = {"sum": grouped.sum, "avg": grouped.mean, "min": grouped.min, "max": grouped.max}
        if aggregation not in reducers:
            return rows
        result = reducers[aggregation]()
        out_key = value_key

    return [{group_key: to_python(key), out_key: to_python(value)} for key, value in result.items()]


def transform_rows(rows: List[Any], config: Mapping[str, Any]) -> List[Any]:
    """Apply the config's filters, date range and aggregation, in that order."""
    if not rows or not all(isinstance(row, dict) for row in rows):
        return rows
    if not (config.get("filters") or config.get("dateRange") or config.get("aggregation")):
        return rows

    x_key, y_key = resolve_axis_keys(rows, config)
    out = apply_filters(rows, config.get("filters"))
    out = apply_date_range(out, x_key, config.get("dateRange"))
    aggregation = config.get("aggregation")
    if aggregation:
        out = aggregate_rows(out, config.get("groupBy") or x_key, y_key, aggregation)
    logger.debug(f"[TRANSFORM] {len(rows)} rows -> {len(out)} rows")
    return out
