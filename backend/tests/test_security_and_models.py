"""Unit tests for token handling and chat model selection."""

from datetime import timedelta

import pytest
from langchain_anthropic import ChatAnthropic
from langchain_openai import ChatOpenAI

from vizboard.core.security import create_access_token, decode_access_token
from vizboard.services.ai_service import describe_rows
from vizboard.services.llm_models import LLMModelFactory
from vizboard.services.llm_models.anthropic import AnthropicModel
from vizboard.services.llm_models.openai import OpenAIModel

pytestmark = pytest.mark.unit


def test_token_round_trip() -> None:
    token = create_access_token({"sub": "7"})

    assert decode_access_token(token)["sub"] == "7"


def test_expired_or_tampered_token_decodes_to_none() -> None:
    expired = create_access_token({"sub": "7"}, expires_delta=timedelta(minutes=-1))

    assert decode_access_token(expired) is None
    assert decode_access_token(create_access_token({"sub": "7"}) + "x") is None


@pytest.mark.parametrize(
    ("model_name", "provider"),
    [("gpt-4o-mini", OpenAIModel), ("claude-3-5-sonnet-latest", AnthropicModel), ("mystery-model", OpenAIModel)],
)
def test_factory_picks_provider_by_model_name(model_name: str, provider: type) -> None:
    assert isinstance(LLMModelFactory().provider_for(model_name), provider)


def test_factory_builds_langchain_chat_models() -> None:
    factory = LLMModelFactory()

    assert isinstance(factory.create_llm("gpt-4o-mini", 0.3, 500, api_key="sk-test"), ChatOpenAI)
    assert isinstance(factory.create_llm("claude-3-5-haiku-latest", 0.3, 500, api_key="sk-ant-test"), ChatAnthropic)


def test_prompt_context_samples_rows() -> None:
    rows = [{"i": i, "label": f"row {i}"} for i in range(50)]

    context = describe_rows(rows, sample_size=3)

    assert context["columns"] == "i, label"
    assert context["row_count"] == 50
    assert context["data_sample"].count('"label"') == 3
