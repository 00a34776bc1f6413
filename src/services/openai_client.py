import logging
import time
from typing import AsyncIterator, Optional

import httpx
from openai import APIError, APIStatusError, AsyncOpenAI

from config import settings
from services.base_llm import BaseLLMService
from services.name_stream.errors import ProviderError

logger = logging.getLogger(__name__)


def _provider_error(error: APIError) -> ProviderError:
    if isinstance(error, APIStatusError):
        logger.error(f"OpenAI API error {error.status_code}: {error.message}")
        return ProviderError(f"OpenAI API error {error.status_code}: {error.message}", error.status_code)
    logger.error(f"OpenAI API error: {error}")
    return ProviderError(f"OpenAI API error: {error}")


class OpenAIService(BaseLLMService):
    """Chat-completions provider backed by the official ``openai`` client.

    ``transport`` replaces the network layer of the underlying httpx client,
    which lets tests serve canned responses.
    """

    temperature = 0.8

    def __init__(
        self,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(api_key)
        self._transport = transport
        self.default_model = settings.openai_model
        self.api_base = settings.openai_api_base.rstrip("/")
        self.temperature = settings.openai_temperature
        self.max_tokens = settings.openai_max_tokens

    def _client(self, api_key: str) -> AsyncOpenAI:
        http_client = None
        if self._transport is not None:
            http_client = httpx.AsyncClient(transport=self._transport, timeout=settings.openai_timeout)
        return AsyncOpenAI(
            api_key=api_key,
            base_url=self.api_base,
            timeout=settings.openai_timeout,
            http_client=http_client,
        )

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model_name: Optional[str] = None,
        **kwargs,
    ) -> str:
        api_key = self._get_api_key()
        model = model_name or self.default_model

        request_kwargs = self._build_payload(
            self._build_messages(system_prompt, user_prompt),
            model,
            temperature=kwargs.get("temperature"),
            max_tokens=kwargs.get("max_tokens"),
        )

        start_time = time.time()
        async with self._client(api_key) as client:
            try:
                response = await client.chat.completions.create(**request_kwargs)
            except APIError as e:
                raise _provider_error(e) from e

        latency = time.time() - start_time
        usage = response.usage
        logger.info(
            f"OpenAI completion with {model} took {latency:.2f}s "
            f"(tokens in={usage.prompt_tokens if usage else 0}, "
            f"out={usage.completion_tokens if usage else 0})"
        )
        return response.choices[0].message.content or ""

    async def stream(
        self,
        system_prompt: str,
        user_prompt: str,
        model_name: Optional[str] = None,
        **kwargs,
    ) -> AsyncIterator[str]:
        """Yield ``choices[0].delta.content`` of every streamed chunk as it arrives."""
        api_key = self._get_api_key()
        model = model_name or self.default_model

        request_kwargs = self._build_payload(
            self._build_messages(system_prompt, user_prompt),
            model,
            temperature=kwargs.get("temperature"),
            max_tokens=kwargs.get("max_tokens"),
            stream=True,
        )

        logger.info(f"Starting OpenAI streaming call using model {model}")
        async with self._client(api_key) as client:
            try:
                response = await client.chat.completions.create(**request_kwargs)
                async with response:
                    async for chunk in response:
                        if not chunk.choices:
                            continue
                        content = chunk.choices[0].delta.content
                        if content:
                            yield content
            except APIError as e:
                raise _provider_error(e) from e
