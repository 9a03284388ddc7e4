"""Unit tests for widget row resolution."""

import pytest

from vizboard.services.data_resolver import (
    config_fingerprint,
    extract_rows,
    resolve_rows,
    resolve_widget_rows,
)

pytestmark = pytest.mark.unit


def _source(source_id=1, raw_data=None, status="ready"):
    return {"id": source_id, "raw_data": raw_data, "status": status}


def test_inline_data_is_returned_unchanged() -> None:
    """Non-empty inline data wins over any referenced source."""

    inline = [{"a": 1}, {"a": 2}]
    sources = [_source(raw_data=[{"b": 9}])]

    rows = resolve_rows({"data": inline}, 1, sources)

    assert rows is inline


def test_empty_inline_data_falls_through_to_source() -> None:
    rows = resolve_rows({"data": []}, 1, [_source(raw_data=[{"b": 9}])])

    assert rows == [{"b": 9}]


def test_array_payload_is_capped_at_first_100_rows() -> None:
    """Order is preserved and the overflow is reported."""

    payload = [{"i": i} for i in range(250)]

    resolved = resolve_widget_rows({}, 1, [_source(raw_data=payload)])

    assert resolved.rows == payload[:100]
    assert resolved.total_rows == 250
    assert resolved.truncated is True


def test_object_payload_uses_its_array_member() -> None:
    payload = {"meta": {"source": "api"}, "records": [{"x": 1}, {"x": 2}]}

    assert resolve_rows(None, 1, [_source(raw_data=payload)]) == [{"x": 1}, {"x": 2}]


def test_object_payload_array_member_is_capped() -> None:
    payload = {"items": list(range(150))}

    assert extract_rows(payload).rows == list(range(100))


def test_object_without_array_member_is_one_row() -> None:
    payload = {"total": 42, "label": "Revenue"}

    assert resolve_rows({}, 1, [_source(raw_data=payload)]) == [payload]


def test_malformed_payload_resolves_to_nothing() -> None:
    assert resolve_rows({}, 1, [_source(raw_data="not rows")]) == []


@pytest.mark.parametrize("status", ["pending", "processing", "error"])
def test_source_that_is_not_ready_is_ignored(status: str) -> None:
    assert resolve_rows({}, 1, [_source(raw_data=[{"a": 1}], status=status)]) == []


def test_missing_source_resolves_to_nothing() -> None:
    assert resolve_rows({}, 7, [_source(source_id=1, raw_data=[{"a": 1}])]) == []
    assert resolve_rows({}, None, [_source(raw_data=[{"a": 1}])]) == []


def test_sources_may_be_objects() -> None:
    """ORM rows and plain objects work as well as mappings."""

    class Source:
        id = 3
        status = "ready"
        raw_data = [{"k": "v"}]

    assert resolve_rows({}, 3, [Source()]) == [{"k": "v"}]


def test_config_fingerprint_tracks_source_and_config() -> None:
    base = config_fingerprint(1, {"xAxis": "month", "yAxis": "sales"})

    assert base == config_fingerprint(1, {"yAxis": "sales", "xAxis": "month"})
    assert base != config_fingerprint(2, {"xAxis": "month", "yAxis": "sales"})
    assert base != config_fingerprint(1, {"xAxis": "month", "yAxis": "profit"})
