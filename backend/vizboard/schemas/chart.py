from pydantic import BaseModel, Field
from typing import Annotated, Any, Dict, List, Literal, Optional, Union


class RenderModel(BaseModel):
    """Render descriptions: snake_case in Python, camelCase on the wire."""
    model_config = {"populate_by_name": True}


class TooltipSpec(RenderModel):
    # 'interactive' hands tooltip content to the AI tooltip component on the client
    mode: Literal["static", "interactive"] = "static"
    widget_title: Optional[str] = Field(None, alias="widgetTitle")


class Placeholder(RenderModel):
    kind: Literal["placeholder"] = "placeholder"
    message: str


class ReferenceLineSpec(RenderModel):
    axis: Literal["x", "y"]
    value: Union[str, int, float]
    label: Optional[str] = None
    color: Optional[str] = None
    style: Literal["solid", "dashed", "dotted"] = "dashed"


class AnnotationSpec(RenderModel):
    data_index: int = Field(alias="dataIndex")
    category: Any = None
    label: str
    description: Optional[str] = None


class CartesianChart(RenderModel):
    kind: Literal["cartesian"] = "cartesian"
    chart_type: Literal["bar", "line", "area", "scatter"] = Field(alias="chartType")
    x_key: str = Field(alias="xKey")
    y_key: Optional[str] = Field(None, alias="yKey")
    categories: List[Any]
    values: List[Optional[float]]
    color: str
    show_grid: bool = Field(alias="showGrid")
    show_legend: bool = Field(alias="showLegend")
    grid_color: Optional[str] = Field(None, alias="gridColor")
    fill_opacity: Optional[float] = Field(None, alias="fillOpacity")
    reference_lines: List[ReferenceLineSpec] = Field(default_factory=list, alias="referenceLines")
    annotations: List[AnnotationSpec] = Field(default_factory=list)
    tooltip: TooltipSpec


class Slice(RenderModel):
    name: Any
    value: Optional[float]
    color: str


class PieChart(RenderModel):
    kind: Literal["pie"] = "pie"
    chart_type: Literal["pie", "donut"] = Field(alias="chartType")
    name_key: str = Field(alias="nameKey")
    value_key: Optional[str] = Field(None, alias="valueKey")
    slices: List[Slice]
    # Fractions of the available radius
    inner_radius: float = Field(alias="innerRadius")
    outer_radius: float = Field(alias="outerRadius")
    padding_angle: int = Field(alias="paddingAngle")
    corner_radius: int = Field(alias="cornerRadius")
    show_legend: bool = Field(alias="showLegend")
    tooltip: TooltipSpec


class GaugeSegment(RenderModel):
    name: Literal["value", "remaining"]
    value: float
    color: str


class GaugeChart(RenderModel):
    kind: Literal["gauge"] = "gauge"
    value: float
    min: float
    max: float
    percent: float
    band: Literal["red", "amber", "green"]
    color: str
    label: str
    segments: List[GaugeSegment]
    start_angle: int = Field(180, alias="startAngle")
    end_angle: int = Field(0, alias="endAngle")


class FunnelStage(RenderModel):
    name: Any
    value: Optional[float]
    color: str


class FunnelChart(RenderModel):
    kind: Literal["funnel"] = "funnel"
    name_key: str = Field(alias="nameKey")
    value_key: Optional[str] = Field(None, alias="valueKey")
    stages: List[FunnelStage]
    tooltip: TooltipSpec


class RadarPoint(RenderModel):
    axis: Any
    value: Optional[float]


class RadarChart(RenderModel):
    kind: Literal["radar"] = "radar"
    axis_key: str = Field(alias="axisKey")
    value_key: Optional[str] = Field(None, alias="valueKey")
    points: List[RadarPoint]
    color: str
    fill_opacity: float = Field(0.3, alias="fillOpacity")
    tooltip: TooltipSpec


class StatCard(RenderModel):
    kind: Literal["stat"] = "stat"
    value: str
    label: str


class TableView(RenderModel):
    kind: Literal["table"] = "table"
    columns: List[str]
    rows: List[List[Any]]
    total_rows: int = Field(alias="totalRows")


ChartRender = Annotated[
    Union[Placeholder, CartesianChart, PieChart, GaugeChart, FunnelChart, RadarChart, StatCard, TableView],
    Field(discriminator="kind"),
]


class LayerSummary(RenderModel):
    index: int
    type: str
    label: str


class WidgetRender(RenderModel):
    widget_id: Optional[int] = Field(None, alias="widgetId")
    layers: List[LayerSummary]
    active_layer: int = Field(alias="activeLayer")
    row_count: int = Field(alias="rowCount")
    truncated: bool = False
    chart: ChartRender
    config: Dict[str, Any]
