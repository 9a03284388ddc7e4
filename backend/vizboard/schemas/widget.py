"""
Pydantic schemas for widgets and their persisted configuration.

The stored ``config`` blob is validated at the API boundary as a tagged
union: ``WidgetConfig`` carries the fields shared by every chart, and each
chart type maps to a subclass in ``CONFIG_MODELS`` adding its own checks.
Unknown keys are kept so that a config always round-trips without loss.
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Type, Union

from pydantic import BaseModel, Field, model_validator


Aggregation = Literal["sum", "avg", "count", "min", "max"]
FilterOperator = Literal["eq", "neq", "gt", "gte", "lt", "lte", "contains"]
Scalar = Union[str, int, float]


class DateRange(BaseModel):
    start: Optional[str] = None
    end: Optional[str] = None


class FilterRule(BaseModel):
    field: str
    operator: FilterOperator
    value: Scalar


class WidgetConfig(BaseModel):
    """Fields shared by every chart type."""
    x_axis: Optional[str] = Field(None, alias="xAxis")
    y_axis: Optional[str] = Field(None, alias="yAxis")
    group_by: Optional[str] = Field(None, alias="groupBy")
    aggregation: Optional[Aggregation] = None
    colors: Optional[List[str]] = None
    show_legend: Optional[bool] = Field(None, alias="showLegend")
    show_grid: Optional[bool] = Field(None, alias="showGrid")
    stat_value: Optional[Scalar] = Field(None, alias="statValue")
    stat_label: Optional[str] = Field(None, alias="statLabel")
    gauge_min: Optional[Union[int, float]] = Field(None, alias="gaugeMin")
    gauge_max: Optional[Union[int, float]] = Field(None, alias="gaugeMax")
    date_range: Optional[DateRange] = Field(None, alias="dateRange")
    filters: Optional[List[FilterRule]] = None
    text_content: Optional[str] = Field(None, alias="textContent")
    data: Optional[List[Dict[str, Any]]] = None

    model_config = {"populate_by_name": True, "extra": "allow"}

    def to_json_dict(self) -> Dict[str, Any]:
        """Dump back to the persisted camelCase shape, keeping only keys that were set."""
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")


class CartesianConfig(WidgetConfig):
    """bar, line, area, scatter, funnel and radar."""


class PieConfig(WidgetConfig):
    """pie and donut."""


class GaugeConfig(WidgetConfig):
    @model_validator(mode="after")
    def check_bounds(self):
        low = 0 if self.gauge_min is None else self.gauge_min
        high = 100 if self.gauge_max is None else self.gauge_max
        if high <= low:
            raise ValueError("gaugeMax must be greater than gaugeMin")
        return self


class StatConfig(WidgetConfig):
    pass


class TableConfig(WidgetConfig):
    pass


class TextConfig(WidgetConfig):
    pass


CONFIG_MODELS: Dict[str, Type[WidgetConfig]] = {
    "bar": CartesianConfig,
    "line": CartesianConfig,
    "area": CartesianConfig,
    "scatter": CartesianConfig,
    "funnel": CartesianConfig,
    "radar": CartesianConfig,
    "pie": PieConfig,
    "donut": PieConfig,
    "gauge": GaugeConfig,
    "stat": StatConfig,
    "table": TableConfig,
    "text": TextConfig,
}


def parse_widget_config(widget_type: str, config: Optional[Dict[str, Any]]) -> WidgetConfig:
    """
    Validate a raw config blob against the model for its chart type.

    Types without a dedicated model fall back to ``WidgetConfig``; they are
    stored as-is and render as unsupported.

    Raises:
        pydantic.ValidationError: If the config does not match its model
    """
    model = CONFIG_MODELS.get(widget_type, WidgetConfig)
    return model.model_validate(config or {})


class Position(BaseModel):
    x: int = 0
    y: int = 0
    w: int = 1
    h: int = 1


class VisualizationLayer(BaseModel):
    id: str
    type: str
    label: Optional[str] = None
    config: Optional[Dict[str, Any]] = None


def check_layer_configs(base_config: Optional[Dict[str, Any]], layers: Optional[List[Any]]) -> None:
    """
    Validate every extra layer as it will render: the base config overlaid
    with the layer's own keys, checked against the layer's chart type.

    ``layers`` may hold ``VisualizationLayer`` models or their stored dicts.

    Raises:
        pydantic.ValidationError: If a merged layer config does not fit its type
    """
    for layer in layers or ():
        if isinstance(layer, BaseModel):
            layer_type, override = layer.type, layer.config
        else:
            layer_type, override = layer.get("type"), layer.get("config")
        parse_widget_config(layer_type, {**(base_config or {}), **(override or {})})


class ReferenceLine(BaseModel):
    id: str
    axis: Literal["x", "y"]
    value: Scalar
    label: Optional[str] = None
    color: Optional[str] = None
    style: Optional[Literal["solid", "dashed", "dotted"]] = None


class Annotation(BaseModel):
    id: str
    data_index: int = Field(alias="dataIndex")
    label: str
    description: Optional[str] = None

    model_config = {"populate_by_name": True}


class WidgetCreate(BaseModel):
    dashboard_id: int = Field(alias="dashboardId")
    type: str
    title: str
    config: Dict[str, Any] = {}
    position: Optional[Position] = None
    data_source_id: Optional[int] = Field(None, alias="dataSourceId")
    layers: Optional[List[VisualizationLayer]] = None
    reference_lines: Optional[List[ReferenceLine]] = Field(None, alias="referenceLines")
    annotations: Optional[List[Annotation]] = None

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def check_config(self):
        parse_widget_config(self.type, self.config)
        check_layer_configs(self.config, self.layers)
        return self


class WidgetUpdate(BaseModel):
    """Partial update; only the fields sent are applied."""
    type: Optional[str] = None
    title: Optional[str] = None
    config: Optional[Dict[str, Any]] = None
    position: Optional[Position] = None
    data_source_id: Optional[int] = Field(None, alias="dataSourceId")
    layers: Optional[List[VisualizationLayer]] = None
    reference_lines: Optional[List[ReferenceLine]] = Field(None, alias="referenceLines")
    annotations: Optional[List[Annotation]] = None
    ai_insights: Optional[str] = Field(None, alias="aiInsights")

    model_config = {"populate_by_name": True}


class WidgetResponse(BaseModel):
    id: int
    dashboard_id: int = Field(alias="dashboardId")
    data_source_id: Optional[int] = Field(None, alias="dataSourceId")
    type: str
    title: str
    config: Dict[str, Any]
    position: Dict[str, Any]
    layers: Optional[List[Dict[str, Any]]] = None
    reference_lines: Optional[List[Dict[str, Any]]] = Field(None, alias="referenceLines")
    annotations: Optional[List[Dict[str, Any]]] = None
    ai_insights: Optional[str] = Field(None, alias="aiInsights")
    created_at: datetime = Field(alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    model_config = {"from_attributes": True, "populate_by_name": True}
