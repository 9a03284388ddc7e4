"""
Visualization layers for a single widget.

Layer 0 is always the widget's own type and config. Stored layers follow,
each with its own type and an optional partial config that is shallow-merged
over the base config. All layers render from the same resolved rows, which
are computed once per widget.
"""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional

from vizboard.schemas.chart import ChartRender, LayerSummary, WidgetRender
from vizboard.services.chart_dispatcher import RenderOptions, render_chart
from vizboard.services.data_resolver import ResolvedRows, resolve_widget_rows
from vizboard.services.row_transforms import transform_rows


@dataclass
class Layer:
    type: str
    label: str
    config: Dict[str, Any] = field(default_factory=dict)


def build_layers(widget_type: str, stored_layers: Optional[Iterable[Mapping[str, Any]]]) -> List[Layer]:
    """Primary layer followed by the widget's stored layers, in stored order."""
    layers = [Layer(type=widget_type, label=(widget_type or "").capitalize())]
    for stored in stored_layers or ():
        if not isinstance(stored, Mapping) or not stored.get("type"):
            continue
        layer_type = str(stored["type"])
        override = stored.get("config")
        layers.append(Layer(
            type=layer_type,
            label=str(stored.get("label") or layer_type.capitalize()),
            config=dict(override) if isinstance(override, Mapping) else {},
        ))
    return layers


def clamp_layer_index(index: Any, layer_count: int) -> int:
    """A stale or malformed index falls back to the primary layer."""
    if not isinstance(index, int) or isinstance(index, bool):
        return 0
    if index < 0 or index >= layer_count:
        return 0
    return index


def layer_config(base_config: Mapping[str, Any], layers: List[Layer], index: int) -> Dict[str, Any]:
    """Config for layer ``index``: the base itself for 0, base overlaid with the layer's keys otherwise."""
    if index == 0:
        return dict(base_config)
    return {**base_config, **layers[index].config}


class WidgetComposition:
    """
    Rows and layers of one widget, resolved once and rendered on demand.

    ``render(i)`` may be called for any layer without re-resolving data, so
    every layer sees the same row count.
    """

    def __init__(
        self,
        widget_type: str,
        config: Optional[Mapping[str, Any]],
        data_source_id: Optional[int],
        available_sources: Iterable[Any],
        stored_layers: Optional[Iterable[Mapping[str, Any]]] = None,
    ):
        self.base_config = dict(config or {})
        self.layers = build_layers(widget_type, stored_layers)
        self.resolved: ResolvedRows = resolve_widget_rows(self.base_config, data_source_id, available_sources)
        self.rows = transform_rows(self.resolved.rows, self.base_config)

    def render(self, active_layer: Any = 0, options: Optional[RenderOptions] = None) -> WidgetRender:
        index = clamp_layer_index(active_layer, len(self.layers))
        layer = self.layers[index]
        config = layer_config(self.base_config, self.layers, index)
        chart: ChartRender = render_chart(layer.type, self.rows, config, options)
        config.pop("data", None)
        return WidgetRender(
            layers=[LayerSummary(index=i, type=item.type, label=item.label) for i, item in enumerate(self.layers)],
            active_layer=index,
            row_count=len(self.rows),
            truncated=self.resolved.truncated,
            chart=chart,
            config=config,
        )


def render_widget(
    widget: Any,
    available_sources: Iterable[Any],
    active_layer: Any = 0,
    options: Optional[RenderOptions] = None,
) -> WidgetRender:
    """Render a stored widget (ORM row or any object with the same attributes)."""
    options = replace(
        options or RenderOptions(),
        title=widget.title,
        reference_lines=widget.reference_lines or (),
        annotations=widget.annotations or (),
    )
    composition = WidgetComposition(
        widget_type=widget.type,
        config=widget.config,
        data_source_id=widget.data_source_id,
        available_sources=available_sources,
        stored_layers=widget.layers,
    )
    result = composition.render(active_layer, options)
    result.widget_id = getattr(widget, "id", None)
    return result
