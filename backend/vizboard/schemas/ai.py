from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional


ChartTypeName = Literal["bar", "line", "area", "scatter", "pie", "donut", "gauge", "funnel", "radar", "stat", "table"]


class DataAnalysis(BaseModel):
    """Structured analysis of a data source, stored as an AiAnalysis result."""
    title: str = Field(description="Short title for the analysis")
    summary: str = Field(description="Two or three sentences describing what the data contains")
    insights: List[str] = Field(default_factory=list, description="Notable trends, outliers or patterns")
    suggested_charts: List[ChartTypeName] = Field(default_factory=list, description="Chart types that suit this data")
    data_quality: List[str] = Field(default_factory=list, description="Missing values, inconsistent formats and similar issues")


class NLQWidgetSpec(BaseModel):
    """A widget proposed in answer to a natural-language question."""
    type: ChartTypeName = Field(description="Chart type that best answers the question")
    title: str = Field(description="Widget title")
    x_axis: Optional[str] = Field(None, description="Column used for categories")
    y_axis: Optional[str] = Field(None, description="Column used for values")
    aggregation: Optional[Literal["sum", "avg", "count", "min", "max"]] = Field(
        None, description="How to combine values sharing a category, if at all"
    )
    explanation: str = Field("", description="One sentence on why this answers the question")

    def to_widget_config(self) -> Dict[str, Any]:
        config: Dict[str, Any] = {}
        if self.x_axis:
            config["xAxis"] = self.x_axis
        if self.y_axis:
            config["yAxis"] = self.y_axis
        if self.aggregation:
            config["aggregation"] = self.aggregation
        return config


class WidgetInsight(BaseModel):
    insight: str = Field(description="One short, specific observation about the chart's data")


class NLQRequest(BaseModel):
    question: str = Field(min_length=1)
    data_source_id: int = Field(alias="dataSourceId")

    model_config = {"populate_by_name": True}


class NLQResponse(BaseModel):
    type: str
    title: str
    config: Dict[str, Any]
    explanation: str = ""
    data_source_id: int = Field(alias="dataSourceId")

    model_config = {"populate_by_name": True}


class InsightsResponse(BaseModel):
    success: bool = True
    updated: int
    insights: Dict[int, str] = {}
