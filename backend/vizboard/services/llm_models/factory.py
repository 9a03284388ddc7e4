from typing import List, Optional
from langchain_core.language_models.chat_models import BaseChatModel
from vizboard.core.logger import logger
from .base import LLMBaseModel
from .openai import OpenAIModel
from .anthropic import AnthropicModel

class LLMModelFactory:
    """
    Picks the provider for a model name from the registered strategies.
    Unknown names are served by OpenAI.
    """

    def __init__(self, strategies: Optional[List[LLMBaseModel]] = None):
        self.strategies: List[LLMBaseModel] = strategies or [
            OpenAIModel(),
            AnthropicModel()
        ]

    def provider_for(self, model_name: str) -> LLMBaseModel:
        for strategy in self.strategies:
            if strategy.is_provider_for(model_name):
                return strategy
        logger.warning(f"[AI] No provider claims model '{model_name}', using OpenAI")
        return OpenAIModel()

    def create_llm(
        self,
        model_name: str,
        temperature: float,
        max_tokens: int,
        api_key: Optional[str] = None
    ) -> BaseChatModel:
        return self.provider_for(model_name).create_model(
            model_name=model_name,
            temperature=temperature,
            max_tokens=max_tokens,
            api_key=api_key
        )
