from abc import ABC, abstractmethod
from typing import Optional
from langchain_core.language_models.chat_models import BaseChatModel

class LLMBaseModel(ABC):
    """
    Abstract base class for chat model providers.
    Each provider decides from the model name whether it can serve it.
    """

    @abstractmethod
    def create_model(
        self,
        model_name: str,
        temperature: float,
        max_tokens: int,
        api_key: Optional[str] = None,
        **kwargs
    ) -> BaseChatModel:
        pass

    @abstractmethod
    def is_provider_for(self, model_name: str) -> bool:
        pass
