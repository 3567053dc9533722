"""
Client for the external text-completion service (OpenAI style chat completions).

The reply is treated as opaque move text. Anything that keeps us from getting that text
(network, timeout, HTTP status, unexpected JSON) is raised as a CompletionServiceError subclass.
"""

import asyncio
import logging
from typing import Any, Literal, Optional, Protocol, Self, Sequence

import aiohttp
from pydantic import BaseModel, ValidationError

from src.core.config import Settings
from src.core.exceptions import MalformedResponseError, TransportError

log = logging.getLogger(__name__)

Role = Literal["system", "user", "assistant"]


class ChatMessage(BaseModel):
    role: Role
    content: str


class ChatCompletionRequest(BaseModel):
    model: str
    messages: list[ChatMessage]
    temperature: float


class ChatChoice(BaseModel):
    message: ChatMessage


class ChatCompletionResponse(BaseModel):
    choices: list[ChatChoice]


def extract_move_text(body: Any) -> str:
    """Pull `choices[0].message.content` out of a decoded response body."""
    try:
        response = ChatCompletionResponse.model_validate(body)
    except ValidationError as e:
        raise MalformedResponseError(f"Unexpected response shape: {e.error_count()} validation errors") from e

    if not response.choices:
        raise MalformedResponseError("Response has no choices")
    content = response.choices[0].message.content.strip()
    if not content:
        raise MalformedResponseError("Response content is empty")
    return content


class CompletionClient(Protocol):
    async def complete(self, messages: Sequence[ChatMessage]) -> str: ...


class ChatCompletionClient:
    """Posts the conversation to the completion endpoint and returns the reply text."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.settings.request_timeout_s)
            )
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def build_request(self, messages: Sequence[ChatMessage]) -> ChatCompletionRequest:
        return ChatCompletionRequest(
            model=self.settings.model,
            messages=list(messages),
            temperature=self.settings.temperature,
        )

    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        if not self.settings.has_api_key:
            raise TransportError("No API key configured for the completion service")

        payload = self.build_request(messages).model_dump()
        headers = {
            "Authorization": f"Bearer {self.settings.api_key}",
            "Content-Type": "application/json",
        }
        session = await self._get_session()
        log.debug("Sending %d messages to %s", len(payload["messages"]), self.settings.api_url)

        try:
            async with session.post(self.settings.api_url, json=payload, headers=headers) as response:
                if response.status != 200:
                    text = await response.text()
                    raise TransportError(f"Completion service returned HTTP {response.status}: {text[:200]}")
                try:
                    body = await response.json(content_type=None)
                except ValueError as e:
                    raise MalformedResponseError("Response body is not JSON") from e
        except asyncio.TimeoutError as e:
            raise TransportError(
                f"Completion service timed out after {self.settings.request_timeout_s}s"
            ) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Completion service request failed: {e}") from e

        return extract_move_text(body)
