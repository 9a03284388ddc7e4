"""
AI Service - data analysis, natural-language questions and widget insights.
Built on LangChain chat models; every call returns a Pydantic model through
structured output so callers never parse free text.
"""
import json
from typing import Any, Dict, List, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate

from vizboard.core.config import settings
from vizboard.core.logger import logger
from vizboard.schemas.ai import DataAnalysis, NLQWidgetSpec, WidgetInsight
from vizboard.services.llm_models import LLMModelFactory

SAMPLE_ROWS = 20


def describe_rows(rows: List[Any], sample_size: int = SAMPLE_ROWS) -> Dict[str, Any]:
    """Columns, row count and a JSON sample small enough for a prompt."""
    columns = list(rows[0].keys()) if rows and isinstance(rows[0], dict) else []
    return {
        "columns": ", ".join(columns) or "(none)",
        "row_count": len(rows),
        "data_sample": json.dumps(rows[:sample_size], default=str),
    }


ANALYSIS_PROMPT = ChatPromptTemplate.from_messages([
    ("system", """You are a data analyst reviewing a dataset uploaded to a dashboard builder.
Describe what the data contains, point out notable trends or outliers,
suggest chart types that suit it and list data-quality issues.

Dataset: {name}
Columns: {columns}
Row count: {row_count}
Sample rows (JSON): {data_sample}"""),
    ("human", "Analyze this dataset."),
])

NLQ_PROMPT = ChatPromptTemplate.from_messages([
    ("system", """You turn questions about a dataset into a single dashboard widget.
Only use column names that appear in the list below.
Pick 'stat' for a single number, 'line' or 'area' for change over time,
'pie' or 'donut' for parts of a whole and 'bar' otherwise.

Columns: {columns}
Row count: {row_count}
Sample rows (JSON): {data_sample}"""),
    ("human", "{question}"),
])

INSIGHT_PROMPT = ChatPromptTemplate.from_messages([
    ("system", """You write one-sentence insights shown under dashboard charts.
Be specific and quote numbers from the data. No preamble.

Chart: {title} ({chart_type})
Columns: {columns}
Rows (JSON): {data_sample}"""),
    ("human", "What is the key takeaway from this chart?"),
])


class AIService:
    """
    Structured AI calls over already-resolved rows.

    The chat model is created on first use so that the service can be
    constructed without provider credentials.
    """

    def __init__(
        self,
        model_name: str = settings.AI_MODEL_NAME,
        api_key: Optional[str] = None,
        temperature: float = settings.AI_TEMPERATURE,
        max_tokens: int = settings.AI_MAX_TOKENS,
        llm: Optional[BaseChatModel] = None,
    ):
        self.model_name = model_name
        self.api_key = api_key
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.model_factory = LLMModelFactory()
        self._llm = llm

    @property
    def llm(self) -> BaseChatModel:
        if self._llm is None:
            self._llm = self.model_factory.create_llm(
                model_name=self.model_name,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                api_key=self.api_key,
            )
        return self._llm

    async def analyze_data_source(self, name: str, rows: List[Any]) -> DataAnalysis:
        """
        Summarize a data source.

        Args:
            name: Data source name
            rows: Rows extracted from the source payload

        Returns:
            DataAnalysis with summary, insights, suggested charts and data-quality notes
        """
        chain = ANALYSIS_PROMPT | self.llm.with_structured_output(DataAnalysis)
        logger.info(f"[AI] Analyzing data source '{name}' ({len(rows)} rows)")
        return await chain.ainvoke({"name": name, **describe_rows(rows)})

    async def answer_question(self, question: str, rows: List[Any]) -> NLQWidgetSpec:
        """
        Propose a widget answering a natural-language question about the rows.

        Args:
            question: The user's question
            rows: Rows of the data source the question is about

        Returns:
            NLQWidgetSpec describing type, title and axes
        """
        chain = NLQ_PROMPT | self.llm.with_structured_output(NLQWidgetSpec)
        logger.info(f"[AI] NLQ: {question}")
        return await chain.ainvoke({"question": question, **describe_rows(rows)})

    async def generate_widget_insight(self, title: str, chart_type: str, rows: List[Any]) -> str:
        chain = INSIGHT_PROMPT | self.llm.with_structured_output(WidgetInsight)
        result = await chain.ainvoke({"title": title, "chart_type": chart_type, **describe_rows(rows)})
        return result.insight


def get_ai_service() -> AIService:
    """FastAPI dependency; tests override it with a stub."""
    return AIService()
