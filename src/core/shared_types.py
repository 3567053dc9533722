"""
Type definitions used across layers
"""

from enum import StrEnum


class Status(StrEnum):
    NOT_STARTED = "not started"
    IN_PROGRESS = "in progress"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    KING_CAPTURED = "king captured"

    @property
    def is_terminal(self) -> bool:
        return self in (Status.CHECKMATE, Status.STALEMATE, Status.KING_CAPTURED)


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opposite(self) -> "Color":
        return Color.BLACK if self == Color.WHITE else Color.WHITE


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


class Rejection(StrEnum):
    """Why a move attempt was not applied. Returned to callers instead of raising."""

    NOT_STARTED = "game not started"
    GAME_OVER = "game over"
    NOT_YOUR_TURN = "not your turn"
    INVALID_SQUARE = "invalid square"
    UNPARSEABLE = "unparseable notation"
    MISSING_PIECE = "missing piece"
    WRONG_COLOR = "cannot move the opponent's piece"
    SELF_KING_CAPTURE = "cannot capture your own king"
    UNRESOLVED_CHECK = "move does not resolve check"
    ILLEGAL_DESTINATION = "illegal destination"
