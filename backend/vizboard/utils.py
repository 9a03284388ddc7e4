import math
import re
from typing import Any, List, Optional

import pandas as pd


def to_dataframe(rows: List[dict]) -> pd.DataFrame:
    return pd.DataFrame(rows)


def coerce_numeric(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series, errors="coerce")


def to_number(value: Any) -> Optional[float]:
    """Numeric reading of a cell, or None when it has none ("12.5" -> 12.5, "n/a" -> None)."""
    if value is None or isinstance(value, (bool, dict, list, tuple, set)):
        return None
    try:
        number = pd.to_numeric(pd.Series([value]), errors="coerce").iloc[0]
    except (TypeError, ValueError):
        return None
    if pd.isna(number):
        return None
    number = float(number)
    return None if math.isinf(number) else number


def to_timestamp(value: Any) -> Optional[pd.Timestamp]:
    if value is None or value == "" or isinstance(value, (bool, dict, list, tuple, set)):
        return None
    try:
        stamp = pd.to_datetime(value, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return None
    if stamp is pd.NaT or pd.isna(stamp):
        return None
    if stamp.tzinfo is not None:
        stamp = stamp.tz_convert(None)
    return stamp


def to_python(value: Any) -> Any:
    """Unwrap numpy scalars and map NaN to None so values serialize as JSON."""
    if hasattr(value, "item"):
        value = value.item()
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def safe_filename(title: str, extension: str) -> str:
    return f"{re.sub(r'[^a-z0-9]', '_', title, flags=re.IGNORECASE)}.{extension}"
