"""Unit tests for widget config validation and persistence shape."""

import json

import pytest
from pydantic import ValidationError

from vizboard.schemas.widget import (
    CartesianConfig,
    GaugeConfig,
    WidgetConfig,
    WidgetCreate,
    check_layer_configs,
    parse_widget_config,
)

pytestmark = pytest.mark.unit

FULL_CONFIG = {
    "xAxis": "month",
    "yAxis": "sales",
    "groupBy": "region",
    "aggregation": "sum",
    "colors": ["#3b82f6", "#22c55e"],
    "showLegend": True,
    "showGrid": False,
    "statValue": 42,
    "statLabel": "Orders",
    "gaugeMin": 0,
    "gaugeMax": 250,
    "dateRange": {"start": "2024-01-01", "end": "2024-12-31"},
    "filters": [{"field": "region", "operator": "eq", "value": "North"}],
    "textContent": "Quarterly numbers",
    "data": [{"month": "Jan", "sales": 100}, {"month": "Feb", "sales": 150.5}],
}


def test_config_round_trips_through_json_without_loss() -> None:
    """Every documented field survives validate -> dump -> JSON -> validate."""

    first = parse_widget_config("bar", FULL_CONFIG).to_json_dict()
    second = parse_widget_config("bar", json.loads(json.dumps(first))).to_json_dict()

    assert first == FULL_CONFIG
    assert second == first


def test_unknown_keys_are_kept() -> None:
    config = parse_widget_config("line", {"xAxis": "t", "curve": "monotone"})

    assert config.to_json_dict() == {"xAxis": "t", "curve": "monotone"}


def test_chart_types_map_to_their_models() -> None:
    assert isinstance(parse_widget_config("area", {}), CartesianConfig)
    assert isinstance(parse_widget_config("gauge", {}), GaugeConfig)
    assert type(parse_widget_config("sankey", {})) is WidgetConfig


def test_gauge_bounds_must_be_ordered() -> None:
    with pytest.raises(ValidationError):
        parse_widget_config("gauge", {"gaugeMin": 10, "gaugeMax": 10})
    with pytest.raises(ValidationError):
        parse_widget_config("gauge", {"gaugeMin": 150})


def test_bad_aggregation_is_rejected() -> None:
    with pytest.raises(ValidationError):
        parse_widget_config("bar", {"aggregation": "median"})


def test_widget_create_validates_config_against_type() -> None:
    with pytest.raises(ValidationError):
        WidgetCreate(dashboardId=1, type="gauge", title="Score", config={"gaugeMin": 5, "gaugeMax": 1})

    widget = WidgetCreate(dashboardId=1, type="bar", title="Sales", dataSourceId=3, config={"xAxis": "m"})
    assert (widget.dashboard_id, widget.data_source_id) == (1, 3)


def test_layer_overrides_are_validated_against_the_layer_type() -> None:
    """Each layer is checked as it renders: base config plus its own keys, under its own type."""

    with pytest.raises(ValidationError):
        WidgetCreate(
            dashboardId=1, type="bar", title="Sales", config={},
            layers=[{"id": "l1", "type": "pie", "config": {"colors": 5}}],
        )
    with pytest.raises(ValidationError):
        check_layer_configs({"gaugeMin": 150}, [{"id": "l1", "type": "gauge"}])

    check_layer_configs({"gaugeMin": 150}, [{"id": "l1", "type": "gauge", "config": {"gaugeMax": 300}}])
