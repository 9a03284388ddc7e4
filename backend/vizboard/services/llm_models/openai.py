from typing import Optional
from langchain_openai import ChatOpenAI
from langchain_core.language_models.chat_models import BaseChatModel
from .base import LLMBaseModel
from vizboard.core.config import settings

class OpenAIModel(LLMBaseModel):
    """OpenAI chat models (gpt-*, o-series)."""

    PREFIXES = ('gpt', 'o1', 'o3', 'o4', 'openai')

    def is_provider_for(self, model_name: str) -> bool:
        return model_name.lower().startswith(self.PREFIXES)

    def create_model(
        self,
        model_name: str,
        temperature: float,
        max_tokens: int,
        api_key: Optional[str] = None,
        **kwargs
    ) -> BaseChatModel:
        return ChatOpenAI(
            model=model_name,
            temperature=temperature,
            max_tokens=max_tokens,
            api_key=api_key or settings.OPENAI_API_KEY
        )
