from __future__ import annotations

import asyncio

import httpx
from loguru import logger

from resumable_llm.errors import ProtocolError, RemoteError, TransportError
from resumable_llm.models import ChatMessage

DEFAULT_ENDPOINT = "https://router.huggingface.co/v1/chat/completions"
DEFAULT_MODEL = "Qwen/Qwen2.5-Coder-32B-Instruct"
DEFAULT_MAX_TOKENS = 10
DEFAULT_TIMEOUT_SECONDS = 60.0


def build_request_body(model: str, max_tokens: int, messages: list[ChatMessage]) -> dict:
    return {
        "model": model,
        "messages": [m.to_dict() for m in messages],
        "max_tokens": max_tokens,
    }


def extract_content(data: object) -> str:
    """Return choices[0].message.content from a decoded chat completion body."""
    if not isinstance(data, dict):
        raise ProtocolError("Response body is not a JSON object")
    choices = data.get("choices")
    if not isinstance(choices, list):
        raise ProtocolError("Response has no choices array")
    if not choices:
        raise ProtocolError("no choices in response")
    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    if not isinstance(message, dict):
        raise ProtocolError("First choice has no message object")
    content = message.get("content")
    if not isinstance(content, str):
        raise ProtocolError("First choice message has no text content")
    return content


class ChatCompletionClient:
    """Single-shot POST client for an OpenAI-compatible chat completion endpoint."""

    def __init__(
        self,
        *,
        endpoint: str = DEFAULT_ENDPOINT,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._endpoint = endpoint
        self._model = model
        self._max_tokens = max_tokens
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def model(self) -> str:
        return self._model

    @property
    def max_tokens(self) -> int:
        return self._max_tokens

    async def complete(
        self,
        api_key: str,
        messages: list[ChatMessage],
        *,
        timeout: float | None = None,
    ) -> str:
        body = build_request_body(self._model, self._max_tokens, messages)
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }
        request_timeout = timeout if timeout is not None else self._timeout_seconds

        logger.debug(
            f"API request: model={self._model}, max_tokens={self._max_tokens}, "
            f"messages={len(messages)}"
        )
        try:
            async with asyncio.timeout(timeout):
                async with httpx.AsyncClient(timeout=request_timeout, transport=self._transport) as client:
                    response = await client.post(self._endpoint, json=body, headers=headers)
        except TimeoutError as ex:
            raise TransportError(f"Request timed out after {timeout}s") from ex
        except httpx.HTTPError as ex:
            raise TransportError(f"failed to send request: {ex}") from ex

        if not response.is_success:
            raise RemoteError(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as ex:
            raise ProtocolError(f"failed to decode response: {ex}") from ex

        content = extract_content(data)
        logger.debug(f"API response: status={response.status_code}, text_len={len(content)}")
        return content
