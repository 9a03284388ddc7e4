"""
Chart type dispatch.

``render_chart`` maps resolved rows, a chart type tag and a widget config to
a render-ready description (see ``vizboard.schemas.chart``). Drawing is left
to the client charting library. Dispatch is total: an empty row-set and an
unknown type both come back as a ``Placeholder``, never as an exception.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from vizboard.schemas.chart import (
    AnnotationSpec,
    CartesianChart,
    ChartRender,
    FunnelChart,
    FunnelStage,
    GaugeChart,
    GaugeSegment,
    PieChart,
    Placeholder,
    RadarChart,
    RadarPoint,
    ReferenceLineSpec,
    Slice,
    StatCard,
    TableView,
    TooltipSpec,
)
from vizboard.services.row_transforms import resolve_axis_keys
from vizboard.utils import to_number

NO_DATA_MESSAGE = "No data available"
UNSUPPORTED_MESSAGE = "Unsupported chart type"

CHART_TYPES = ("bar", "line", "area", "scatter", "pie", "donut", "gauge", "funnel", "radar", "stat", "table")

DEFAULT_PALETTE = ["#3b82f6", "#22c55e", "#f59e0b", "#ef4444", "#8b5cf6"]

COLOR_PRESETS: Dict[str, List[str]] = {
    "default": DEFAULT_PALETTE,
    "blue": ["#3b82f6", "#60a5fa", "#93c5fd"],
    "green": ["#22c55e", "#4ade80", "#86efac"],
    "purple": ["#8b5cf6", "#a78bfa", "#c4b5fd"],
    "orange": ["#f97316", "#fb923c", "#fdba74"],
}

THEMES = ("default", "minimal", "glass", "dark", "corporate", "colorful")
DARK_GRID_COLOR = "#334155"

AREA_FILL_OPACITY = 0.2
TABLE_ROW_LIMIT = 10

GAUGE_RED = "#ef4444"
GAUGE_AMBER = "#f59e0b"
GAUGE_GREEN = "#22c55e"
GAUGE_NEUTRAL = "#e5e7eb"


@dataclass
class RenderOptions:
    """Presentation inputs that live outside the widget config."""
    palette: List[str] = field(default_factory=lambda: list(DEFAULT_PALETTE))
    theme: str = "default"
    ai_tooltips: bool = False
    title: Optional[str] = None
    reference_lines: Sequence[Mapping[str, Any]] = ()
    annotations: Sequence[Mapping[str, Any]] = ()

    @classmethod
    def for_preset(cls, preset: str, **kwargs) -> "RenderOptions":
        return cls(palette=list(COLOR_PRESETS.get(preset, DEFAULT_PALETTE)), **kwargs)


def active_palette(config: Mapping[str, Any], options: RenderOptions) -> List[str]:
    """Explicit ``config["colors"]`` beats the palette from the render options."""
    colors = config.get("colors")
    if isinstance(colors, list) and colors and all(isinstance(color, str) for color in colors):
        return list(colors)
    return list(options.palette or DEFAULT_PALETTE)


def color_at(palette: Sequence[str], index: int) -> str:
    return palette[index % len(palette)]


def gauge_band(percent: float) -> str:
    if percent < 33:
        return "red"
    if percent < 66:
        return "amber"
    return "green"


_BAND_COLORS = {"red": GAUGE_RED, "amber": GAUGE_AMBER, "green": GAUGE_GREEN}


def _tooltip(options: RenderOptions) -> TooltipSpec:
    if options.ai_tooltips:
        return TooltipSpec(mode="interactive", widget_title=options.title)
    return TooltipSpec(mode="static")


def _cell(row: Any, key: Optional[str]) -> Any:
    if key is None or not isinstance(row, dict):
        return None
    return row.get(key)


def _reference_lines(options: RenderOptions) -> List[ReferenceLineSpec]:
    lines = []
    for line in options.reference_lines or ():
        if line.get("axis") not in ("x", "y") or line.get("value") is None:
            continue
        lines.append(ReferenceLineSpec(
            axis=line["axis"],
            value=line["value"],
            label=line.get("label"),
            color=line.get("color"),
            style=line.get("style") or "dashed",
        ))
    return lines


def _annotations(rows: List[Any], x_key: str, options: RenderOptions) -> List[AnnotationSpec]:
    specs = []
    for note in options.annotations or ():
        index = note.get("dataIndex")
        # Annotations pointing past the current rows are dropped
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(rows):
            continue
        specs.append(AnnotationSpec(
            data_index=index,
            category=_cell(rows[index], x_key),
            label=str(note.get("label", "")),
            description=note.get("description"),
        ))
    return specs


def _render_cartesian(chart_type, rows, config, options, x_key, y_key, palette) -> CartesianChart:
    return CartesianChart(
        chart_type=chart_type,
        x_key=x_key,
        y_key=y_key,
        categories=[_cell(row, x_key) for row in rows],
        values=[to_number(_cell(row, y_key)) for row in rows],
        color=palette[0],
        show_grid=config.get("showGrid") is not False,
        show_legend=bool(config.get("showLegend")),
        grid_color=DARK_GRID_COLOR if options.theme == "dark" else None,
        fill_opacity=AREA_FILL_OPACITY if chart_type == "area" else None,
        reference_lines=_reference_lines(options),
        annotations=_annotations(rows, x_key, options),
        tooltip=_tooltip(options),
    )


def _render_pie(chart_type, rows, config, options, x_key, y_key, palette) -> PieChart:
    donut = chart_type == "donut"
    return PieChart(
        chart_type=chart_type,
        name_key=x_key,
        value_key=y_key,
        slices=[
            Slice(name=_cell(row, x_key), value=to_number(_cell(row, y_key)), color=color_at(palette, index))
            for index, row in enumerate(rows)
        ],
        inner_radius=0.55 if donut else 0.6,
        outer_radius=0.8,
        padding_angle=3 if donut else 2,
        corner_radius=4 if donut else 0,
        show_legend=bool(config.get("showLegend")),
        tooltip=_tooltip(options),
    )


def _render_gauge(chart_type, rows, config, options, x_key, y_key, palette) -> GaugeChart:
    gauge_min = to_number(config.get("gaugeMin"))
    gauge_max = to_number(config.get("gaugeMax"))
    gauge_min = 0.0 if gauge_min is None else gauge_min
    gauge_max = 100.0 if gauge_max is None else gauge_max

    raw = config.get("statValue")
    if raw is None or raw == "":
        raw = _cell(rows[0], y_key)
    value = to_number(raw)
    # A value that is not a number reads as the bottom of the scale
    value = gauge_min if value is None else value

    span = gauge_max - gauge_min
    ratio = (value - gauge_min) / span if span > 0 else 0.0
    percent = min(1.0, max(0.0, ratio)) * 100
    band = gauge_band(percent)
    color = _BAND_COLORS[band]

    return GaugeChart(
        value=value,
        min=gauge_min,
        max=gauge_max,
        percent=percent,
        band=band,
        color=color,
        label=str(config.get("statLabel") or x_key or ""),
        segments=[
            GaugeSegment(name="value", value=percent, color=color),
            GaugeSegment(name="remaining", value=100 - percent, color=GAUGE_NEUTRAL),
        ],
    )


def _render_funnel(chart_type, rows, config, options, x_key, y_key, palette) -> FunnelChart:
    # Stages keep the caller's order
    return FunnelChart(
        name_key=x_key,
        value_key=y_key,
        stages=[
            FunnelStage(name=_cell(row, x_key), value=to_number(_cell(row, y_key)), color=color_at(palette, index))
            for index, row in enumerate(rows)
        ],
        tooltip=_tooltip(options),
    )


def _render_radar(chart_type, rows, config, options, x_key, y_key, palette) -> RadarChart:
    return RadarChart(
        axis_key=x_key,
        value_key=y_key,
        points=[RadarPoint(axis=_cell(row, x_key), value=to_number(_cell(row, y_key))) for row in rows],
        color=palette[0],
        tooltip=_tooltip(options),
    )


def _render_stat(chart_type, rows, config, options, x_key, y_key, palette) -> StatCard:
    first = rows[0] if isinstance(rows[0], dict) else {}
    value = config.get("statValue")
    if value is None or value == "":
        value = next(iter(first.values()), "")
    label = config.get("statLabel") or next(iter(first.keys()), "")
    return StatCard(value="" if value is None else str(value), label=str(label))


def _render_table(chart_type, rows, config, options, x_key, y_key, palette) -> TableView:
    columns = list(rows[0].keys()) if isinstance(rows[0], dict) else []
    return TableView(
        columns=columns,
        rows=[[_cell(row, column) for column in columns] for row in rows[:TABLE_ROW_LIMIT]],
        total_rows=len(rows),
    )


_RENDERERS: Dict[str, Callable[..., ChartRender]] = {
    "bar": _render_cartesian,
    "line": _render_cartesian,
    "area": _render_cartesian,
    "scatter": _render_cartesian,
    "pie": _render_pie,
    "donut": _render_pie,
    "gauge": _render_gauge,
    "funnel": _render_funnel,
    "radar": _render_radar,
    "stat": _render_stat,
    "table": _render_table,
}


def render_chart(
    chart_type: str,
    rows: Optional[List[Any]],
    config: Optional[Mapping[str, Any]] = None,
    options: Optional[RenderOptions] = None,
) -> ChartRender:
    """
    Build the render description for one chart.

    Args:
        chart_type: Type tag, one of ``CHART_TYPES``
        rows: Resolved rows
        config: Widget config (camelCase keys, as persisted)
        options: Palette, theme and tooltip mode

    Returns:
        A chart description, or a ``Placeholder`` for empty data and
        unknown types
    """
    if not rows:
        return Placeholder(message=NO_DATA_MESSAGE)

    renderer = _RENDERERS.get(chart_type)
    if renderer is None:
        return Placeholder(message=UNSUPPORTED_MESSAGE)

    config = config or {}
    options = options or RenderOptions()
    x_key, y_key = resolve_axis_keys(rows, config)
    palette = active_palette(config, options)
    if x_key is None and chart_type not in ("stat", "table", "gauge"):
        # Rows without any named field cannot be plotted
        return Placeholder(message=NO_DATA_MESSAGE)
    return renderer(chart_type, rows, config, options, x_key, y_key, palette)
