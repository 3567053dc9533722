"""Unit tests for src/ai/client.py"""

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from src.ai.client import ChatCompletionClient, ChatMessage, extract_move_text
from src.core.config import Settings
from src.core.exceptions import MalformedResponseError, TransportError

MESSAGES = [
    ChatMessage(role="system", content="You are a chess player."),
    ChatMessage(role="user", content="Make your move."),
]


def body_with(content: str) -> dict[str, Any]:
    return {"id": "x", "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


def mock_session(status: int = 200, body: Any = None, text: str = "") -> MagicMock:
    """aiohttp session whose `post()` can be used as an async context manager."""
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=body)
    response.text = AsyncMock(return_value=text)
    session = MagicMock()
    session.post.return_value.__aenter__.return_value = response
    return session


# --- extract_move_text ---
def test_extract_move_text() -> None:
    assert extract_move_text(body_with("  e2e4\n")) == "e2e4"


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"choices": []},
        {"choices": [{}]},
        {"choices": [{"message": {"role": "assistant"}}]},
        body_with("   "),
        "not even a dict",
        None,
    ],
)
def test_malformed_bodies(body: Any) -> None:
    with pytest.raises(MalformedResponseError):
        extract_move_text(body)


# --- ChatCompletionClient ---
def test_request_payload() -> None:
    client = ChatCompletionClient(Settings(model="test-model", temperature=0.3))
    request = client.build_request(MESSAGES)
    assert request.model_dump() == {
        "model": "test-model",
        "messages": [
            {"role": "system", "content": "You are a chess player."},
            {"role": "user", "content": "Make your move."},
        ],
        "temperature": 0.3,
    }


def test_missing_api_key_is_a_transport_error() -> None:
    client = ChatCompletionClient(Settings(api_key=""))
    with pytest.raises(TransportError):
        asyncio.run(client.complete(MESSAGES))


def test_successful_completion() -> None:
    settings = Settings(api_key="sk-test")
    client = ChatCompletionClient(settings)
    session = mock_session(body=body_with("Nf3"))

    with patch.object(ChatCompletionClient, "_get_session", AsyncMock(return_value=session)):
        assert asyncio.run(client.complete(MESSAGES)) == "Nf3"

    args, kwargs = session.post.call_args
    assert args == (settings.api_url,)
    assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
    assert kwargs["json"]["model"] == "gpt-4.1-mini"
    assert len(kwargs["json"]["messages"]) == 2


def test_http_error_status() -> None:
    client = ChatCompletionClient(Settings(api_key="sk-test"))
    session = mock_session(status=429, text="rate limited")
    with patch.object(ChatCompletionClient, "_get_session", AsyncMock(return_value=session)):
        with pytest.raises(TransportError, match="429"):
            asyncio.run(client.complete(MESSAGES))


def test_connection_error() -> None:
    client = ChatCompletionClient(Settings(api_key="sk-test"))
    session = MagicMock()
    session.post.side_effect = aiohttp.ClientConnectionError("connection refused")
    with patch.object(ChatCompletionClient, "_get_session", AsyncMock(return_value=session)):
        with pytest.raises(TransportError):
            asyncio.run(client.complete(MESSAGES))


def test_timeout() -> None:
    client = ChatCompletionClient(Settings(api_key="sk-test"))
    session = mock_session()
    session.post.return_value.__aenter__.side_effect = asyncio.TimeoutError()
    with patch.object(ChatCompletionClient, "_get_session", AsyncMock(return_value=session)):
        with pytest.raises(TransportError, match="timed out"):
            asyncio.run(client.complete(MESSAGES))


def test_body_that_is_not_json() -> None:
    client = ChatCompletionClient(Settings(api_key="sk-test"))
    session = mock_session()
    session.post.return_value.__aenter__.return_value.json = AsyncMock(side_effect=ValueError("bad json"))
    with patch.object(ChatCompletionClient, "_get_session", AsyncMock(return_value=session)):
        with pytest.raises(MalformedResponseError):
            asyncio.run(client.complete(MESSAGES))


def test_close_without_session_is_harmless() -> None:
    async def _use_and_close() -> None:
        async with ChatCompletionClient(Settings()) as client:
            assert client._session is None

    asyncio.run(_use_and_close())
