"""
Data resolution for widgets.

Turns a widget's stored config plus the data sources the caller already
loaded into the concrete rows a chart renders. Inline ``config["data"]``
always wins over a live source; sources are capped at ``ROW_LIMIT`` rows.
Nothing here touches the database or raises: missing or malformed data
resolves to an empty list and the dispatcher renders its empty state.
"""
import hashlib
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from vizboard.core.config import settings

ROW_LIMIT = settings.WIDGET_ROW_LIMIT


@dataclass
class ResolvedRows:
    rows: List[Any] = field(default_factory=list)
    origin: str = "none"  # inline, source, none
    total_rows: int = 0

    @property
    def truncated(self) -> bool:
        return self.total_rows > len(self.rows)


def _source_attr(source: Any, name: str) -> Any:
    if isinstance(source, Mapping):
        return source.get(name)
    return getattr(source, name, None)


def find_source(data_source_id: Optional[int], available_sources: Iterable[Any]) -> Optional[Any]:
    if data_source_id is None:
        return None
    for source in available_sources or ():
        if _source_attr(source, "id") == data_source_id:
            return source
    return None


def is_usable(source: Any) -> bool:
    """A source feeds charts only once it is ready and carries a non-empty payload."""
    return _source_attr(source, "status") == "ready" and bool(_source_attr(source, "raw_data"))


def extract_rows(raw_data: Any, limit: int = ROW_LIMIT) -> ResolvedRows:
    """
    Pull rows out of a stored payload.

    A list is used directly. For an object the first list-valued member is
    used; an object without one is treated as a single row. Anything else
    yields nothing.
    """
    if isinstance(raw_data, list):
        return ResolvedRows(rows=raw_data[:limit], origin="source", total_rows=len(raw_data))
    if isinstance(raw_data, dict):
        for value in raw_data.values():
            if isinstance(value, list):
                return ResolvedRows(rows=value[:limit], origin="source", total_rows=len(value))
        return ResolvedRows(rows=[raw_data], origin="source", total_rows=1)
    return ResolvedRows()


def resolve_widget_rows(
    widget_config: Optional[Mapping[str, Any]],
    data_source_id: Optional[int],
    available_sources: Iterable[Any],
    limit: int = ROW_LIMIT,
) -> ResolvedRows:
    inline = (widget_config or {}).get("data")
    if isinstance(inline, list) and inline:
        return ResolvedRows(rows=inline, origin="inline", total_rows=len(inline))

    source = find_source(data_source_id, available_sources)
    if source is None or not is_usable(source):
        return ResolvedRows()
    return extract_rows(_source_attr(source, "raw_data"), limit)


def resolve_rows(
    widget_config: Optional[Mapping[str, Any]],
    data_source_id: Optional[int],
    available_sources: Iterable[Any],
) -> List[Any]:
    """Rows for one widget; an empty list stands for "no data"."""
    return resolve_widget_rows(widget_config, data_source_id, available_sources).rows


def config_fingerprint(data_source_id: Optional[int], widget_config: Optional[Dict[str, Any]]) -> str:
    """Stable key for caching resolved rows on (data source, config)."""
    payload = json.dumps(widget_config or {}, sort_keys=True, default=str)
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest()
    return f"{data_source_id or 0}:{digest}"
