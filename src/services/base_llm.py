import logging
from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

from config import settings

logger = logging.getLogger(__name__)


class LLMConfigurationError(ValueError):
    """The provider cannot be called because its credentials are missing or invalid."""


def validate_api_key(api_key: Optional[str]) -> str:
    if not api_key:
        raise LLMConfigurationError(
            "OpenAI API key is not configured. Please set OPENAI_API_KEY in your .env file."
        )
    if not api_key.startswith("sk-"):
        raise LLMConfigurationError(
            'OpenAI API key appears to be invalid. API keys should start with "sk-".'
        )
    return api_key


class BaseLLMService(ABC):
    """A text-completion provider taking a system and a user instruction.

    ``complete`` returns the whole answer at once; ``stream`` yields text
    deltas until the provider signals the end of the answer.
    """

    default_model: str
    api_base: str
    temperature: float = 0.7
    max_tokens: Optional[int] = None

    def __init__(self, api_key: Optional[str] = None):
        self._api_key = api_key

    def _get_api_key(self) -> str:
        return validate_api_key(self._api_key or settings.openai_api_key)

    def _build_messages(self, system_prompt: str, user_prompt: str) -> list[dict]:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})
        return messages

    def _build_payload(
        self,
        messages: list[dict],
        model_name: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        stream: bool = False,
    ) -> dict:
        payload = {
            "model": model_name,
            "messages": messages,
            "temperature": self.temperature if temperature is None else temperature,
        }
        tokens = max_tokens or self.max_tokens
        if tokens is not None:
            payload["max_tokens"] = tokens
        if stream:
            payload["stream"] = True
        return payload

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model_name: Optional[str] = None,
        **kwargs,
    ) -> str:
        pass

    @abstractmethod
    def stream(
        self,
        system_prompt: str,
        user_prompt: str,
        model_name: Optional[str] = None,
        **kwargs,
    ) -> AsyncIterator[str]:
        pass
