"""Unit tests for visualization layers."""

from types import SimpleNamespace

import pytest

from vizboard.schemas.chart import CartesianChart, PieChart, Placeholder, StatCard
from vizboard.services.chart_dispatcher import RenderOptions
from vizboard.services.layer_compositor import (
    WidgetComposition,
    build_layers,
    clamp_layer_index,
    layer_config,
    render_widget,
)

pytestmark = pytest.mark.unit

SALES = [{"month": "Jan", "sales": 100}, {"month": "Feb", "sales": 150}]


def _widget(**overrides):
    fields = dict(
        id=11,
        type="bar",
        title="Monthly sales",
        config={"xAxis": "month", "yAxis": "sales", "data": SALES},
        data_source_id=None,
        layers=[{"id": "l1", "type": "pie", "label": "Share", "config": {"showLegend": True}}],
        reference_lines=None,
        annotations=None,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


def test_primary_layer_is_always_first() -> None:
    layers = build_layers("bar", None)

    assert [(layer.type, layer.label) for layer in layers] == [("bar", "Bar")]


def test_stored_layers_follow_in_order_and_default_their_label() -> None:
    layers = build_layers("line", [{"type": "area"}, {"label": "broken"}, {"type": "stat", "label": "Total"}])

    assert [(layer.type, layer.label) for layer in layers] == [("line", "Line"), ("area", "Area"), ("stat", "Total")]


@pytest.mark.parametrize(("index", "expected"), [(0, 0), (1, 1), (5, 0), (-1, 0), (None, 0), ("1", 0), (True, 0)])
def test_out_of_range_index_falls_back_to_primary(index, expected: int) -> None:
    assert clamp_layer_index(index, 2) == expected


def test_layer_config_shallow_merges_overrides() -> None:
    base = {"xAxis": "month", "colors": ["#000000"], "showLegend": False}
    layers = build_layers("bar", [{"type": "pie", "config": {"showLegend": True, "colors": ["#ffffff"]}}])

    assert layer_config(base, layers, 0) == base
    assert layer_config(base, layers, 1) == {"xAxis": "month", "colors": ["#ffffff"], "showLegend": True}


def test_stale_active_index_renders_primary_layer() -> None:
    """One extra layer and an active index of 5: layer 0 is rendered, nothing raises."""

    result = render_widget(_widget(), [], active_layer=5)

    assert result.active_layer == 0
    assert isinstance(result.chart, CartesianChart)


def test_switching_layers_keeps_row_count() -> None:
    composition = WidgetComposition("bar", {"data": SALES}, None, [], [{"type": "pie"}, {"type": "stat"}])

    renders = [composition.render(i) for i in range(3)]

    assert [type(r.chart) for r in renders] == [CartesianChart, PieChart, StatCard]
    assert {r.row_count for r in renders} == {2}
    assert [layer.label for layer in renders[0].layers] == ["Bar", "Pie", "Stat"]


def test_layer_override_reaches_the_dispatcher() -> None:
    result = render_widget(_widget(), [], active_layer=1)

    assert isinstance(result.chart, PieChart)
    assert result.chart.show_legend is True
    assert result.config["showLegend"] is True


def test_rendered_config_omits_row_snapshot() -> None:
    result = render_widget(_widget(), [])

    assert "data" not in result.config
    assert result.widget_id == 11


def test_live_source_truncation_is_reported() -> None:
    source = {"id": 4, "status": "ready", "raw_data": [{"n": i, "v": i} for i in range(120)]}

    result = render_widget(_widget(config={}, data_source_id=4, layers=None), [source])

    assert result.row_count == 100
    assert result.truncated is True


def test_widget_without_data_renders_placeholder() -> None:
    result = render_widget(_widget(config={}, layers=None), [])

    assert result.chart == Placeholder(message="No data available")
    assert result.row_count == 0


def test_widget_annotations_and_title_flow_into_options() -> None:
    widget = _widget(annotations=[{"id": "a", "dataIndex": 0, "label": "Launch"}])

    result = render_widget(widget, [], options=RenderOptions(ai_tooltips=True))

    assert result.chart.annotations[0].category == "Jan"
    assert result.chart.tooltip.widget_title == "Monthly sales"


def test_stored_layer_with_malformed_override_renders_from_base_config() -> None:
    widget = _widget(layers=[{"id": "l1", "type": "line", "config": 5}, {"id": "l2", "type": "pie", "config": {"colors": 5}}])

    line = render_widget(widget, [], active_layer=1)
    pie = render_widget(widget, [], active_layer=2)

    assert line.chart.x_key == "month"
    assert isinstance(pie.chart, PieChart)
    assert pie.chart.slices[0].color == "#3b82f6"
