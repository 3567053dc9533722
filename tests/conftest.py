"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Callable, Optional, Sequence

import pytest

from src.ai.client import ChatMessage
from src.chess.board import Board
from src.chess.game import Game
from src.chess.pieces import Piece
from src.chess.square import Square
from src.core.config import Settings
from src.core.shared_types import Color, Status

BoardFactory = Callable[..., Board]


def build_board(placement: dict[str, str], turn: Color = Color.WHITE) -> Board:
    """Board from {"e1": "K", "e8": "k", ...}. Upper case is white, like in FEN."""
    board = Board(turn=turn)
    for name, code in placement.items():
        board.place_piece(Piece.from_fen(code, Square.from_algebraic(name)))
    return board


@pytest.fixture
def make_board() -> BoardFactory:
    return build_board


@pytest.fixture
def make_game() -> Callable[..., Game]:
    """A game already in progress on a custom position."""

    def _make(
        placement: dict[str, str],
        turn: Color = Color.WHITE,
        player_color: Color = Color.WHITE,
    ) -> Game:
        return Game(
            board=build_board(placement, turn),
            player_color=player_color,
            status=Status.IN_PROGRESS,
        )

    return _make


@pytest.fixture
def instant_settings() -> Settings:
    """No thinking pause, so AI turns run instantly in tests."""
    return Settings(response_delay_s=0)


class ScriptedClient:
    """Stands in for the completion service: answers with the scripted replies, in order."""

    def __init__(self, *replies: str | Exception, on_complete: Optional[Callable[[], None]] = None) -> None:
        self.replies = list(replies)
        self.requests: list[list[ChatMessage]] = []
        self.on_complete = on_complete

    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        self.requests.append(list(messages))
        if self.on_complete is not None:
            self.on_complete()
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def scripted_client() -> Callable[..., ScriptedClient]:
    return ScriptedClient
